import traceback

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pixbank.api.endpoints import admin, auth, pix, users, webhooks, withdrawals
from pixbank.config import settings
from pixbank.core.exceptions import BankingError
from pixbank.core.logging import app_logger
from pixbank.core.middleware import RequestLoggingMiddleware, UserInjectionMiddleware

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Parses the JWT and injects the user (runs after request logging starts)
app.add_middleware(UserInjectionMiddleware)

# Outermost: logs every request with the injected user
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(BankingError)
async def handle_banking_error(request: Request, exc: BankingError):
    if exc.status_code >= 500:
        app_logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    app_logger.error(f"Unhandled error on {request.method} {request.url.path}\n{tb_str}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.include_router(auth.router, tags=["auth"])
app.include_router(users.router, prefix="/user", tags=["user"])
app.include_router(pix.router, prefix="/pix", tags=["pix"])
app.include_router(withdrawals.router, prefix="/withdrawals", tags=["withdrawals"])
app.include_router(admin.router, prefix="/admin", tags=["admin"])
app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
