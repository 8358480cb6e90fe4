import logging
import random
from fastapi import FastAPI

from gridlogic import models  # registers tables on Base
from gridlogic.core.config import settings
from gridlogic.core.database import Base, engine
from gridlogic.routers import session_routers
from gridlogic.services import template_services
from utils.logger_config import configure_logging

configure_logging(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# reproducible puzzles when a seed is configured
if settings.RANDOM_SEED is not None:
    random.seed(settings.RANDOM_SEED)
    logger.info(f"Seeded random generator with {settings.RANDOM_SEED}")

# create FastAPI
app = FastAPI(title="Grid Logic Puzzle API", version="1.0")

# get routers
app.include_router(session_routers.router, prefix="/sessions", tags=["Sessions"])


# Landing page
@app.get("/")
async def index():
    """Game info and the available difficulty tiers"""
    return {
        "name": app.title,
        "difficulties": await template_services.get_difficulties(),
        "default_difficulty": settings.DEFAULT_DIFFICULTY,
    }
