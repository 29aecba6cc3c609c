"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
from dotenv import load_dotenv
from starlette.middleware.base import BaseHTTPMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.database import sessions_db  # noqa: E402
from api.routes import photos, saved, sessions  # noqa: E402
from db import get_session_factory  # noqa: E402


class PrivateNetworkAccessMiddleware(BaseHTTPMiddleware):
    """Middleware to handle Private Network Access preflight requests."""

    async def dispatch(self, request: Request, call_next):
        # Handle preflight for Private Network Access
        if request.method == "OPTIONS":
            response = Response(status_code=204)
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Methods"] = "*"
            response.headers["Access-Control-Allow-Headers"] = "*"
            response.headers["Access-Control-Allow-Private-Network"] = "true"
            return response

        response = await call_next(request)
        response.headers["Access-Control-Allow-Private-Network"] = "true"
        return response


# Create app
app = FastAPI(
    title="PinDiary API",
    description="API for searching, inspecting and bookmarking places on a map",
    version="0.1.0",
)

# Private Network Access middleware (must be before CORS)
app.add_middleware(PrivateNetworkAccessMiddleware)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
app.include_router(saved.router, prefix="/saved", tags=["saved"])
app.include_router(photos.router, prefix="/photos", tags=["photos"])


@app.on_event("startup")
def startup_event():
    """Initialize database tables on startup."""
    get_session_factory()


@app.on_event("shutdown")
def shutdown_event():
    """End any open sessions so their markers are released."""
    for session in list(sessions_db.values()):
        session.end()
    sessions_db.clear()


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "PinDiary API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
