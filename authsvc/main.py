"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from authsvc.api.cookies import CookiePolicy
from authsvc.api.deps import general_rate_limit
from authsvc.api.rate_limit import FixedWindowRateLimiter, get_client_ip
from authsvc.api.v1 import router as v1_router
from authsvc.core.config import Settings, get_settings
from authsvc.core.database import build_engine, build_session_factory
from authsvc.core.security import PasswordHasher
from authsvc.core.tokens import TokenConfig, TokenIssuer

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("authsvc starting (env=%s)", app.state.settings.APP_ENV)
    yield
    logger.info("authsvc shutting down; disposing database engine")
    app.state.engine.dispose()


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


def init_state(app: FastAPI, settings: Settings) -> None:
    """Build everything the routes depend on from one Settings object."""
    app.state.settings = settings
    app.state.engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.password_hasher = PasswordHasher.from_settings(settings)
    app.state.token_issuer = TokenIssuer(TokenConfig.from_settings(settings))
    app.state.cookie_policy = CookiePolicy.from_settings(settings)
    app.state.rate_limiters = {}
    if settings.RATE_LIMIT_ENABLED:
        app.state.rate_limiters = {
            "general": FixedWindowRateLimiter(limit=settings.GENERAL_RATE_LIMIT_PER_MINUTE),
            "auth": FixedWindowRateLimiter(limit=settings.AUTH_RATE_LIMIT_PER_MINUTE),
        }


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="authsvc",
        version="0.1.0",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
        dependencies=[Depends(general_rate_limit)],
    )
    init_state(app, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        client = get_client_ip(request, settings.trusted_proxy_networks)
        logger.info("[%s] %s - %s", request.method, request.url.path, client)
        return await call_next(request)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "authsvc"}

    return app


app = create_app()
