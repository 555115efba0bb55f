import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinica import __version__
from clinica.config import get_settings
from clinica.database import close_db, init_db
from clinica.services.mail_service import MailService, build_mailer
from clinica.utils.firebase import PushClient
from clinica.utils.logger import get_logger

from clinica.routers import auth as auth_router
from clinica.routers import notifications as notifications_router

logger = get_logger("main")
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    app.state.store = await init_db()
    app.state.mail = MailService(build_mailer(settings), timeout=settings.DISPATCH_TIMEOUT_SECONDS)
    app.state.push = PushClient.from_settings(settings)
    logger.info("Application ready")
    try:
        yield
    finally:
        app.state.push.close()
        close_db()
        logger.info("Shutting down application...")


app = FastAPI(
    title="Clinica API",
    version=__version__,
    debug=settings.APP_DEBUG,
    lifespan=lifespan,
)

# Refresh token is a cookie, so credentials must be allowed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(notifications_router.router)


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP {exc.status_code}: {exc.detail} - Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "status_code": exc.status_code},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}: {len(exc.errors())} error(s)")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_errors(exc), "status_code": 422},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "status_code": 500},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # Drop `input`/`ctx`: they may hold passwords or non-JSON values
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.3f}s"
    )
    return response


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.get("/readyz")
async def readyz(request: Request):
    if not await request.app.state.store.ping():
        raise HTTPException(status_code=503, detail="Database not ready")
    return {"status": "ok", "database": "up"}
