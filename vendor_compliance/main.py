import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

# Load environment variables from .env file at startup
def load_environment():
    """Load environment variables from .env file"""
    env_file = ".env"

    # Check if .env file exists in current directory or parent directory
    if os.path.exists(env_file):
        load_dotenv(env_file)
        print(f"✅ Environment variables loaded from {env_file}")
    elif os.path.exists(os.path.join("..", env_file)):
        load_dotenv(os.path.join("..", env_file))
        print(f"✅ Environment variables loaded from ../{env_file}")
    else:
        print(f"⚠️  {env_file} file not found. Using system environment variables.")

# Load environment variables before importing config
load_environment()

from vendor_compliance.config import settings
from vendor_compliance.database import connect_to_mongo, close_mongo_connection, logger
from vendor_compliance.routers import reports, vendors

# Lifespan context manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    print(f"🚀 Starting Vendor Compliance Reporting on {settings.host}:{settings.port}")
    await connect_to_mongo()
    yield
    # Shutdown
    await close_mongo_connection()

# Create FastAPI app
app = FastAPI(
    title="Vendor Compliance Reporting API",
    description="Compliance aggregation and reporting over the vendor document portal's MongoDB",
    version="1.0.0",
    lifespan=lifespan
)

# Add validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed logging."""
    logger.warning(f"🔍 VALIDATION ERROR on {request.method} {request.url}: {exc}")

    return JSONResponse(
        status_code=422,
        content={
            "detail": jsonable_encoder(exc.errors()),
            "message": "Validation error - check request parameters"
        }
    )

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        settings.frontend_url
    ],  # Frontend URLs
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(reports.router)
app.include_router(vendors.router)

@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to Vendor Compliance Reporting API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Vendor Compliance Reporting API",
        "databases": {
            "mongodb": "operational"
        }
    }

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vendor_compliance.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
