"""Verification of identity-provider assertions.

The provider signs an ID token for the browser; the API verifies it and
reads the stable subject id and profile claims. Production verification
uses the provider's published JWKS (RS256). A shared HS256 secret can be
configured for local development and tests.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt

from app.config import Settings
from app.errors import InvalidAssertion, MalformedAssertion

logger = logging.getLogger("mt-tasks.identity")

@dataclass(frozen=True)
class IdentityAssertion:
    subject: str
    email: str
    name: str | None = None
    avatar: str | None = None

class IdentityVerifier:
    def __init__(
        self,
        *,
        audience: str,
        issuer: str,
        jwks_url: str | None = None,
        shared_secret: str | None = None,
        leeway: int = 0,
    ):
        if not jwks_url and not shared_secret:
            raise ValueError("identity verifier needs a jwks url or a shared secret")
        self.audience = audience
        self.issuer = issuer
        self.leeway = leeway
        self._shared_secret = shared_secret
        self._jwks = None if shared_secret else jwt.PyJWKClient(jwks_url, cache_keys=True)

    def _signing_key(self, token: str):
        if self._shared_secret:
            return self._shared_secret, ["HS256"]
        return self._jwks.get_signing_key_from_jwt(token).key, ["RS256"]

    def verify(self, token: str) -> IdentityAssertion:
        try:
            key, algorithms = self._signing_key(token)
            claims = jwt.decode(
                token,
                key,
                algorithms=algorithms,
                audience=self.audience,
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidAssertion("Identity token has expired")
        except jwt.PyJWKClientError as e:
            logger.warning(f"could not resolve identity signing key: {e}")
            raise InvalidAssertion("Failed to verify identity token")
        except jwt.InvalidTokenError as e:
            raise InvalidAssertion(f"Failed to verify identity token: {e}")

        subject = claims.get("sub") or claims.get("user_id")
        email = claims.get("email")
        if not subject or not isinstance(subject, str):
            raise MalformedAssertion("Identity token has no subject")
        if not email or not isinstance(email, str):
            raise MalformedAssertion("Identity token has no email")

        return IdentityAssertion(
            subject=subject,
            email=email.strip().lower(),
            name=claims.get("name") or None,
            avatar=claims.get("picture") or None,
        )

def build_identity_verifier(settings: Settings) -> IdentityVerifier:
    return IdentityVerifier(
        audience=settings.identity_audience,
        issuer=settings.identity_issuer,
        jwks_url=settings.identity_jwks_url,
        shared_secret=settings.identity_shared_secret,
        leeway=settings.identity_leeway_seconds,
    )
