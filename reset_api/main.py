from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from reset_api.core.config import get_settings, parse_comma_separated_origins
from reset_api.core.error_handlers import register_exception_handlers
from reset_api.core.telemetry import setup_telemetry
from reset_api.database.database import create_db_and_tables
from reset_api.routers import password_reset
from reset_api.utils.logger import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Perform application startup tasks before the FastAPI app begins serving requests.

    Runs logging setup, creates the database tables, and initializes telemetry for the provided FastAPI application.
    """
    setup_logging()
    create_db_and_tables()
    setup_telemetry(app)
    yield


app = FastAPI(
    title="Reset API",
    description="Password reset by emailed, time-limited token",
    lifespan=lifespan,
)

cors_origins = [
    str(origin).rstrip("/")
    for origin in parse_comma_separated_origins(get_settings().BACKEND_CORS_ORIGINS)
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins or ["*"],
    # Browsers refuse credentials with a wildcard origin
    allow_credentials=bool(cors_origins),
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
def root():
    """Liveness message for load balancers that check the root path."""
    return "Server is running!"


@app.get("/health", include_in_schema=False)
def health_check():
    """
    Provide the application's liveness state for health checks.

    Returns:
        dict: A mapping with key "status" and value "ok" indicating the service is healthy.
    """
    return {"status": "ok"}


app.include_router(password_reset.router)
