"""
NIH RePORTER Scoop Backend API
Account-gated NIH RePORTER search with results delivered by email.
"""
from dotenv import load_dotenv
load_dotenv()

import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

# Configure logging once for the whole process; the host captures stdout
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,  # Override any existing configuration
)

logger = logging.getLogger(__name__)

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import actions, projects, webhooks
from app.core.config import get_settings
from app.core.errors import AppError, ConfigurationError, UpstreamError
from app.db.base import Base
from app.db.session import engine
# Import all models to ensure they're registered with Base
from app.models import Account  # noqa: F401


def run_migrations() -> None:
    """Run Alembic migrations on startup. Fails startup if migrations fail."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_ini = project_root / "alembic.ini"
    if not alembic_ini.exists():
        logger.warning("alembic.ini not found, skipping Alembic migrations")
        return
    try:
        alembic_cfg = Config(str(alembic_ini))
        alembic_cfg.attributes["configure_logger"] = False
        alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
        command.upgrade(alembic_cfg, "head")
        logger.info("Alembic migrations completed successfully")
    except Exception as e:
        logger.exception("Alembic migration failed: %s", e)
        raise  # Fail startup so the DB is not left out of sync


app = FastAPI(title="NIH RePORTER Scoop")


@app.on_event("startup")
async def startup_event():
    """Create tables, run migrations and report missing collaborator secrets."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    run_migrations()

    missing = get_settings().missing_secrets()
    for name in missing:
        logger.warning("%s is not set; the feature that needs it will report a configuration error", name)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, (UpstreamError, ConfigurationError)):
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("API Error on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


# The frontend is a static page served from any host
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "Stripe-Signature"],
)

# Register routers
app.include_router(actions.router, prefix="/api", tags=["Account"])
app.include_router(webhooks.router, prefix="/api/payment", tags=["Payments"])
app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])


@app.get("/health")
def health_check():
    return {"status": "ok"}
