from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    database_url: str = "postgresql+psycopg://app:app@db:5432/app"
    redis_url: str = "redis://redis:6379/0"

    # session credential (validity window is fixed, see app.auth.tokens)
    jwt_secret: str = "dev-secret-change-me"
    jwt_issuer: str = "mt-tasks-api"
    jwt_audience: str = "mt-tasks-api"

    # identity provider assertions
    identity_audience: str = "mt-tasks"
    identity_issuer: str = "https://securetoken.google.com/mt-tasks"
    identity_jwks_url: str = (
        "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
    )
    # dev/test only: verify HS256 assertions instead of fetching provider keys
    identity_shared_secret: str | None = None
    identity_leeway_seconds: int = 0

    # when false, any signed-in user may delete a task
    strict_task_delete: bool = False

    # rate limiting (redis)
    rate_limit_enabled: bool = True
    rate_limit_verify_token_per_min: int = 30

settings = Settings()
