"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

import tinda.models  # noqa: F401  (registers every table on Base)
from tinda.core.config import get_settings
from tinda.core.database import Base, SessionLocal, engine
from tinda.core.locations import UserRole
from tinda.core.security import hash_password
from tinda.models.user import User
from tinda.routers import admin, auth, health, listing_images, listings, messages, reviews

# --- Load settings ---
settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def seed_admin(db: Session) -> None:
    """Create the configured admin account once; never touches an existing user."""
    if not settings.admin_email or not settings.admin_password:
        return

    email = settings.admin_email.lower()
    if db.query(User).filter(User.email == email).first():
        return

    db.add(
        User(
            email=email,
            hashed_password=hash_password(settings.admin_password),
            name=settings.admin_name,
            role=UserRole.ADMIN.value,
            region="NCR",
            province="Metro Manila",
            city="Manila",
            is_verified=True,
        )
    )
    db.commit()
    logger.info("Seeded admin account %s", email)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s...", settings.app_name)
    logger.info("Environment: %s", settings.app_env)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()

    yield

    logger.info("Shutting down %s...", settings.app_name)


# --- Create FastAPI app ---
app = FastAPI(title=settings.app_name, lifespan=lifespan)

# --- CORS (dev only) ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(listings.router)
app.include_router(listing_images.router)
app.include_router(messages.router)
app.include_router(reviews.router)
app.include_router(admin.router)

# --- Static media files ---
settings.media_root.mkdir(parents=True, exist_ok=True)
app.mount(
    settings.media_url,                          # "/media"
    StaticFiles(directory=settings.media_root),  # <project>/media
    name="media",
)


# --- Root endpoint ---
@app.get("/")
def root():
    return {"message": f"{settings.app_name} backend is running"}
