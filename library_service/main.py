import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from starlette.middleware.base import BaseHTTPMiddleware
from library_service import __version__
from library_service.config import settings
from library_service.database import engine, Base
from library_service.exceptions import (
    LibraryError,
    ValidationError,
    ResourceNotFoundError,
    DuplicateResourceError,
    BookNotAvailableError,
    BorrowerNotActiveError,
    InvalidOperationError,
    ConflictError,
)
from library_service.routes import book, borrower, borrow

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ResourceNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateResourceError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    BookNotAvailableError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    BorrowerNotActiveError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidOperationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log incoming requests and their outcome."""
    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - IP: {client_ip} - {response.status_code}")
        return response

Base.metadata.create_all(bind=engine)


app = FastAPI(
    title="Library Management API",
    description="Catalog, membership and circulation back-end for a small library",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(LoggingMiddleware)


@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind, "detail": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": ValidationError.kind, "detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "unexpected", "detail": "Internal server error"},
    )


# Include routers
app.include_router(book.router)
app.include_router(borrower.router)
app.include_router(borrow.router)

@app.get("/")
def root():
    return {"message": "Library Management API", "version": __version__}

@app.get("/api/health")
def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "library_service.main:app",
        host=settings.host,
        port=settings.port,
    )
