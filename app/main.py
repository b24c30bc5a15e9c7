import logging
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.api.v1 import admin_sellers, auth, categories, seller, subscription
from app.config import settings
from app.middleware.security import SecurityHeadersMiddleware, TimingMiddleware
from app.utils.exceptions import AppError
from app.utils.logging_config import configure_logging

if not settings.DEBUG:
    configure_logging()
logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "AUTHENTICATION_ERROR",
    status.HTTP_403_FORBIDDEN: "AUTHORIZATION_ERROR",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
}

# (router module, prefix, tag)
ROUTERS = [
    (auth, "/api/v1/auth", "Authentication"),
    (seller, "/api/v1/seller", "Seller Onboarding"),
    (subscription, "/api/v1/subscription", "Seller Subscription"),
    (categories, "/api/v1/categories", "Categories"),
    (admin_sellers, "/api/v1/admin/sellers", "Admin Sellers"),
]


def cors_origins() -> list:
    """Explicit origins in production, anything elsewhere"""
    if settings.ENVIRONMENT != "production":
        return ["*"]
    origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]
    if not origins:
        logger.warning("ALLOWED_ORIGINS is empty in production; browser clients will be refused")
    return origins


def error_response(status_code: int, message: str, code: str, details=None, headers=None) -> JSONResponse:
    body = {"success": False, "message": message, "error": {"code": code, "details": details}}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


app = FastAPI(
    title=settings.APP_NAME,
    description="VCX Mart marketplace API: seller onboarding, subscriptions and categories",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Domain errors raised by services and dependencies"""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.code, exc.details, getattr(exc, "headers", None))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    code = HTTP_ERROR_CODES.get(exc.status_code, "ERROR")
    return error_response(exc.status_code, message, code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # pydantic may put exception objects under "ctx"
    errors = [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()]
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation error", "VALIDATION_ERROR", errors)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "SERVER_ERROR",
        str(exc) if settings.DEBUG else "An error occurred"
    )


for module, prefix, tag in ROUTERS:
    app.include_router(module.router, prefix=prefix, tags=[tag])


@app.get("/")
def root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": settings.APP_NAME}
