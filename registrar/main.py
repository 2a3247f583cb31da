"""Entry point. Wires repositories into routes and serves the frontend."""
import logging
import os

from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_DIR = os.path.dirname(BASE_DIR)
load_dotenv(os.path.join(PROJECT_DIR, ".env"))

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles

from registrar.api.errors import register_error_handlers
from registrar.api.routes.auth_routes import router as auth_router, init_auth_routes
from registrar.api.routes.dashboard_routes import router as dashboard_router, init_dashboard_routes
from registrar.api.routes.records_routes import router as records_router, init_records_routes
from registrar.infrastructure.auth.login_guard import login_guard
from registrar.infrastructure.database.connection import init_engine, check_health, session_factory
from registrar.infrastructure.repositories.pg_account_repository import PgAccountRepository
from registrar.infrastructure.repositories.pg_dashboard_repository import PgDashboardRepository
from registrar.infrastructure.repositories.pg_records_repository import PgRecordsRepository

logger = logging.getLogger("registrar.startup")

STATIC_DIR = os.path.join(PROJECT_DIR, "public")

app = FastAPI(
    title="Registrar API",
    description="Student information backend: login, dashboards, grades, transcripts.",
    version="1.0.0",
)

app.add_middleware(GZipMiddleware, minimum_size=1024)

# CORS configuration: read allowed origins from env (comma-separated).
_allowed = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _allowed:
    allow_origins = [o.strip() for o in _allowed.split(",") if o.strip()]
else:
    allow_origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_origins != ["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

register_error_handlers(app)

# ---------------------------------------------------------------------------
# Persistence wiring
# ---------------------------------------------------------------------------

init_engine()

init_auth_routes(PgAccountRepository(session_factory), guard=login_guard)
init_dashboard_routes(PgDashboardRepository(session_factory))
init_records_routes(PgRecordsRepository(session_factory))

app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(records_router)

logger.info(
    "Login guard: %d attempts per %ds window",
    login_guard.max_attempts, int(login_guard.lockout_seconds),
)


@app.get("/health")
def health():
    database = "connected" if check_health() else "disconnected"
    return {
        "success": database == "connected",
        "status": "online",
        "database": database,
        "login_guard_records": len(login_guard),
    }


# Frontend assets are served from the site root; registered last so API
# routes take precedence.
if os.path.exists(STATIC_DIR):
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="public")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "registrar.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "3000")),
        reload=os.environ.get("ENV", "").lower() != "production",
    )
