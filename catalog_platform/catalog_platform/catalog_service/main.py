"""
Catalog Service - multi-tenant product catalog with token authentication
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .db import SessionLocal, init_db, purge_expired_revocations
from .errors import register_exception_handlers
from .routes import accounts, health, products

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialize database and drop stale revocations on startup"""
    init_db()
    db = SessionLocal()
    try:
        purge_expired_revocations(db)
    finally:
        db.close()
    yield


app = FastAPI(
    title="Catalog Service",
    description="Per-user product catalog with bearer token authentication",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(accounts.router)
app.include_router(products.router)
app.include_router(health.router)
