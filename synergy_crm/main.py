import os
import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# Load environment variables from .env file at startup
def load_environment():
    """Load environment variables from .env file"""
    env_file = ".env"

    if os.path.exists(env_file):
        load_dotenv(env_file)
        logger.info(f"✅ Environment variables loaded from {env_file}")
    elif os.path.exists(os.path.join("..", env_file)):
        load_dotenv(os.path.join("..", env_file))
        logger.info(f"✅ Environment variables loaded from ../{env_file}")
    else:
        logger.info(f"⚠️  {env_file} file not found. Using system environment variables.")

# Load environment variables before importing config
load_environment()

from synergy_crm.config import settings
from synergy_crm.database import connect_database, close_database, create_tables
from synergy_crm.routers import (
    auth, users, clients, leads, vendors, requirements, quotes, sales_orders, expenses
)


# Lifespan context manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info(f"🚀 Starting Synergy CRM on {settings.host}:{settings.port}")
    await connect_database()
    if settings.auto_create_tables:
        await create_tables()
    yield
    await close_database()

# Create FastAPI app
app = FastAPI(
    title="Synergy CRM API",
    description="Clients, leads, vendors, requirements, quotes, sales orders and expenses",
    version="1.0.0",
    lifespan=lifespan
)


# Every error leaves the service as {"error": "<message>"}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors as plain 400s."""
    logger.warning(f"🔍 VALIDATION ERROR on {request.method} {request.url}: {exc.errors()}")
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(status_code=400, content={"error": "; ".join(messages) or "Invalid request"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        settings.frontend_url
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(clients.router)
app.include_router(leads.router)
app.include_router(vendors.router)
app.include_router(requirements.router)
app.include_router(quotes.router)
app.include_router(sales_orders.router)
app.include_router(expenses.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to Synergy CRM API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Synergy CRM API",
        "database": settings.database_url.split(":", 1)[0]
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "synergy_crm.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
