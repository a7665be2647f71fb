import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.config.settings import settings
from app.core.rate_limit import limiter
from app.modules.auth import routes as auth_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.admin import routes as admin_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug, redirect_slashes=False)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Responses under these prefixes carry user data or session cookies
NO_STORE_PREFIXES = (f"{settings.api_prefix}/admin", f"{settings.api_prefix}/auth", f"{settings.api_prefix}/profile")


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    detail = str(exc) if settings.debug and not settings.is_production else "Internal server error"
    return JSONResponse(status_code=500, content={"detail": detail})


class AdminHeadersMiddleware:
    """Security headers on every response; no-store on user data and session responses."""

    base_headers = [
        (b"X-Content-Type-Options", b"nosniff"),
        (b"X-Frame-Options", b"DENY"),
        (b"Referrer-Policy", b"same-origin"),
    ]

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        extra = list(self.base_headers)
        if scope["path"].startswith(NO_STORE_PREFIXES):
            extra.append((b"Cache-Control", b"no-store"))

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                message["headers"] = list(message.get("headers", [])) + extra
            await send(message)

        await self.app(scope, receive, send_wrapper)


# Applies the default limit to every route not marked @limiter.exempt
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(AdminHeadersMiddleware)
# Credentials on so the session cookie travels; Content-Disposition exposed for the CSV download
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["Content-Disposition"],
)

for module_routes in (auth_routes, profiles_routes, admin_routes):
    app.include_router(module_routes.router, prefix=settings.api_prefix)


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.app_name} starting ({settings.environment})")
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("SUPABASE_URL / SUPABASE_KEY missing; every Supabase call will fail")
    if not settings.supabase_service_role_key:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY missing; admin endpoints will answer 500")


@app.get("/")
async def root():
    return {"service": settings.app_name, "api": settings.api_prefix}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Ready once the Supabase URL and anon key are configured."""
    configured = bool(settings.supabase_url and settings.supabase_key)
    return {"status": "ready" if configured else "not_configured"}
