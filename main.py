from config import get_settings
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

# Import routers
from routers import (
    auth,
    profiles,
    pages
)
from services.auth_client import AuthClient
from services.errors import FormValidationError, PortalError
from services.profile_store import ProfileStore
from services.submissions import SubmissionRegistry
from services.supabase_client import close_supabase, create_auth_supabase, create_data_supabase

settings = get_settings()

# Setup logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("Starting auth portal...")

    # Supabase clients live exactly as long as the application
    auth_supabase = await create_auth_supabase(settings)
    data_supabase = await create_data_supabase(settings)
    app.state.auth_client = AuthClient(auth_supabase)
    app.state.profile_store = ProfileStore(
        data_supabase,
        table=settings.profiles_table
    )
    logger.info("Supabase facades ready")

    yield

    logger.info("Shutting down auth portal...")
    await close_supabase(auth_supabase)
    await close_supabase(data_supabase)
    app.state.auth_client = None
    app.state.profile_store = None

# Create FastAPI app
app = FastAPI(
    title="Auth Portal",
    description="Login, signup and session-gated home page backed by Supabase",
    version="1.0.0",
    lifespan=lifespan
)
app.state.submissions = SubmissionRegistry()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
@app.exception_handler(PortalError)
async def portal_exception_handler(request: Request, exc: PortalError):
    content = {"detail": exc.message, "code": exc.kind.value}
    if isinstance(exc, FormValidationError):
        content["fields"] = exc.fields
    return JSONResponse(status_code=exc.status_code, content=content)

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

# Health check endpoint, registered before the page fallback route
@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# Include routers
app.include_router(auth.router)
app.include_router(profiles.router)
app.include_router(pages.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
