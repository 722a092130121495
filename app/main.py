from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from app.apps.price_api.routers import keys_router, meta_router, prices_router
from app.apps.price_api.state import ServiceState, build_state
from app.core.config import app_logger, settings
from app.core.exceptions.handlers import (
    authentication_exception_handler,
    exception_schema,
    general_exception_handler,
    not_found_exception_handler,
    rate_limit_exception_handler,
    upstream_exception_handler,
)
from app.core.exceptions.types import (
    AppException,
    AuthenticationException,
    NotFoundException,
    RateLimitExceededException,
    UpstreamException,
)
from app.core.utils import generate_openapi_json, write_to_file_async


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_logger.info("Starting application...")
    services: ServiceState = app.state.services

    # Initialize the upstream price client
    app_logger.info("Initializing CoinGecko client...")
    await services.coingecko.init()
    app_logger.info("CoinGecko client initialized successfully.")

    # Generate and write OpenAPI schema to file
    app_logger.info("Generating OpenAPI schema...")
    openapi_schema = generate_openapi_json(app)
    await write_to_file_async("openapi.json", openapi_schema)

    app_logger.info(f"{settings.APP_NAME} running on port {services.config.PORT}")
    app_logger.info(f"Payment address: {services.config.PAYMENT_ADDRESS}")

    # Yield control back to the application
    yield

    # Cleanup on shutdown
    app_logger.info("Shutting down application...")

    app_logger.info("Closing CoinGecko client...")
    await services.coingecko.aclose()
    app_logger.info("CoinGecko client closed successfully.")


def create_app(services: ServiceState | None = None) -> FastAPI:
    """
    Build the FastAPI application around one set of shared services.

    Args:
        services: Pre-built service state. Defaults to ``build_state()``
            from the global settings.
    """
    application = FastAPI(
        lifespan=lifespan,
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        debug=settings.DEBUG,
        openapi_url="/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        responses=exception_schema,
    )
    application.state.services = services or build_state()

    # Register exception handlers (order matters - more specific first)
    application.add_exception_handler(
        RateLimitExceededException, rate_limit_exception_handler
    )
    application.add_exception_handler(
        AuthenticationException, authentication_exception_handler
    )
    application.add_exception_handler(NotFoundException, not_found_exception_handler)
    application.add_exception_handler(UpstreamException, upstream_exception_handler)
    # Generic fallback
    application.add_exception_handler(AppException, general_exception_handler)

    # CORS configuration
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    application.include_router(meta_router)
    application.include_router(prices_router)
    application.include_router(keys_router)

    return application


app = create_app()
