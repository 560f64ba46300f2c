import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from chat_api.api import router as api_router
from chat_api.database import build_engine, build_sessionmaker, create_db_and_tables
from chat_api.responses import apply_gateway_headers, failure, preflight
from chat_api.settings import ConfigurationError, Settings, load_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = app.state.engine
    if engine is None:
        logger.error("Starting without a database: %s", app.state.config_error)
        yield
        return

    logger.info("Starting up %s...", app.state.settings.APP_NAME)
    if app.state.settings.CREATE_TABLES:
        await create_db_and_tables(engine)
    yield

    logger.info("Shutting down...")
    await engine.dispose()


def create_app(settings: Optional[Settings] = None, env_file: str = ".env") -> FastAPI:
    config_error = None
    if settings is None:
        try:
            settings = load_settings(env_file)
        except ConfigurationError as exc:
            config_error = str(exc)

    configure_logging(settings.LOG_LEVEL if settings else "INFO")

    app = FastAPI(title=settings.APP_NAME if settings else "Chat Gateway", lifespan=lifespan)
    app.state.settings = settings
    app.state.config_error = config_error
    app.state.engine = build_engine(settings) if settings else None
    app.state.sessionmaker = build_sessionmaker(app.state.engine) if settings else None

    @app.middleware("http")
    async def gateway_headers(request: Request, call_next):
        if request.method == "OPTIONS":
            return apply_gateway_headers(preflight())
        if app.state.config_error:
            return apply_gateway_headers(
                failure(app.state.config_error, status.HTTP_500_INTERNAL_SERVER_ERROR)
            )
        response = await call_next(request)
        return apply_gateway_headers(response)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return failure(str(exc.detail), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return failure("Invalid request.", status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Unhandled database error on %s", request.url.path)
        return failure(f"Database error: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR)

    app.include_router(api_router)
    return app


app = create_app()
