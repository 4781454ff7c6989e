import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.auth.identity import IdentityVerifier, build_identity_verifier
from app.config import settings
from app.errors import install_error_handlers
from app.routes.auth import router as auth_router
from app.routes.health import router as health_router
from app.routes.members import router as members_router
from app.routes.orgs import router as orgs_router
from app.routes.projects import router as projects_router
from app.routes.tasks import router as tasks_router

logger = logging.getLogger("mt-tasks")

def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

def create_app(identity_verifier: IdentityVerifier | None = None) -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(title="mt-tasks-api", version="0.1.0")
    app.state.identity_verifier = identity_verifier or build_identity_verifier(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(orgs_router)
    app.include_router(projects_router)
    app.include_router(members_router)
    app.include_router(tasks_router)

    logger.info(f"mt-tasks-api ready (env={settings.app_env})")
    return app

app = create_app()
