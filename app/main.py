import logging
import traceback
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Depends, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from app.config.config import settings
from app.db.session import engine, AsyncSessionLocal
from app.api.dependencies import get_db
from app.api.v1 import router as api_router
from app.api.v1.responses import to_response
from app.core.exceptions import WHOLE_OBJECT
from app.core.settings_service import TokenCounterService, initialize_token_counter
from app.core.utils import configure_logging
from app.core.validation import errors_to_map
from app.schemas.result_schemas import ActionResult

logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup & Shutdown lifespan events."""
    # -------- STARTUP --------
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting FastAPI application...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    async with engine.begin() as conn:
        await conn.run_sync(lambda _: None)
    logger.info("Database connection established successfully.")

    # Registration cannot work without the counter row; fail startup if it
    # cannot be created
    async with AsyncSessionLocal() as db:
        counter = await initialize_token_counter(db)
    logger.info(f"Token counter ready (last token: {counter.last_token})")

    logger.info("Application startup complete")

    yield

    # -------- SHUTDOWN --------
    logger.info("Shutting down application...")
    await engine.dispose()
    logger.info("Database engine disposed")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # ---------------------- EXCEPTION HANDLER ----------------------
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Path, query and body parsing errors use the same envelope as actions
        return to_response(
            ActionResult.fail(
                errors_to_map(exc.errors(), strip_source=True),
                status.HTTP_400_BAD_REQUEST,
            )
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        logger.error(f"Unhandled Error: {trace}")

        message = str(exc) if settings.ENVIRONMENT != "production" else "Server error"
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": {WHOLE_OBJECT: [message]}},
        )

    # ---------------------- CORS ----------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000, compresslevel=6)

    # ---------------------- ROUTES ----------------------
    app.include_router(api_router, prefix=settings.API_PREFIX)

    # ---------------------- HEALTH CHECK ----------------------
    @app.get("/health")
    async def health_check(db: AsyncSession = Depends(get_db)):
        try:
            await db.execute(text("SELECT 1"))
            counter = await TokenCounterService(db).get_counter()
            return {
                "status": "healthy",
                "environment": settings.ENVIRONMENT,
                "database": "connected",
                "token_counter": {
                    "last_token": counter.last_token,
                    "last_token_date": counter.last_token_date.isoformat(),
                },
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}", exc_info=True)
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "error": str(e)},
            )

    @app.get("/")
    async def root():
        return {
            "name": settings.PROJECT_NAME,
            "environment": settings.ENVIRONMENT,
            "version": settings.VERSION,
        }

    return app


app = create_app()
