from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from datetime import datetime
from contextlib import asynccontextmanager

from storefront_catalog.config import settings, is_production
from storefront_catalog.models.schemas import ErrorResponse
from storefront_catalog.api.routes import router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        from storefront_catalog.models.database import create_tables
        create_tables()
        logger.info("Database tables initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    yield
    logger.info("Application shutting down...")

app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    docs_url=None if is_production() else "/docs",
    redoc_url=None if is_production() else "/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api", tags=["Catalog"])


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Storefront Catalog Proxy API",
        "version": settings.API_VERSION,
        "endpoints": {
            "save_store": "POST /api/stores",
            "list_stores": "GET /api/stores",
            "products": "GET /api/products?shop={shop}",
            "health": "/health"
        },
        "status": "active"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(),
        "version": settings.API_VERSION,
        "service": settings.API_TITLE
    }


# Global exception handlers
@app.exception_handler(404)
async def not_found_handler(request, exc):
    message = exc.detail if isinstance(exc, HTTPException) else "The requested resource was not found"
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(
            error="Not Found",
            message=message,
            status_code=404
        ).model_dump(mode="json")
    )


@app.exception_handler(500)
async def internal_server_error_handler(request, exc):
    logger.error(f"Internal server error: {exc}")
    message = exc.detail if isinstance(exc, HTTPException) else "An internal server error occurred"
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            message=message,
            status_code=500
        ).model_dump(mode="json")
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error="HTTP Error",
            message=exc.detail,
            status_code=exc.status_code
        ).model_dump(mode="json")
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    # Request validation failures are reported as 400
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}" for error in exc.errors()
    )
    logger.warning(f"Rejected request to {request.url.path}: {problems}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="Bad Request",
            message=f"Invalid request: {problems}",
            status_code=400
        ).model_dump(mode="json")
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront_catalog.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
