from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv, find_dotenv
from vegmap.api import restaurants, progress, suggestions, admin
import logging
import os

load_dotenv(find_dotenv(usecwd=True), override=False)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

# Tables are created through alembic migrations (data/migrations)

app = FastAPI(
    title="vegmap API",
    description="Vegetarian and vegan restaurant discovery for Korea",
    version="1.0.0"
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {exc}"}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(restaurants.router, prefix="/api/restaurants", tags=["restaurants"])
app.include_router(progress.router, prefix="/api/progress", tags=["progress"])
app.include_router(suggestions.router, prefix="/api/suggestions", tags=["suggestions"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/")
async def root():
    return {"message": "vegmap API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Lightweight health check"""
    return {"status": "healthy"}
