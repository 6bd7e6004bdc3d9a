import logging
import os
import subprocess
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from padel_league.config import get_settings
from padel_league.database import init_db
from padel_league.routes import courts, day_groups, player_availability, schedule

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Padel League Scheduling API")


# Get build info
def get_build_info():
    """Get git commit hash or build timestamp"""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=os.path.dirname(os.path.dirname(__file__)),
            capture_output=True,
            text=True,
            timeout=2,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass

    # Fallback to build timestamp
    return datetime.now().strftime("%Y%m%d-%H%M%S")


BUILD_HASH = get_build_info()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(schedule.router, prefix="/api", tags=["schedule"])
app.include_router(day_groups.router, prefix="/api", tags=["day-groups"])
app.include_router(player_availability.router, prefix="/api", tags=["player-availability"])
app.include_router(courts.router, prefix="/api", tags=["courts"])


@app.on_event("startup")
def on_startup():
    init_db()  # Imports models and creates missing tables
    route_count = sum(1 for r in app.routes if getattr(r, "path", None))
    logger.info("Started with %d routes, build %s", route_count, BUILD_HASH)


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify which code is running"""
    return {"app_name": "Padel League Scheduling API", "build_hash": BUILD_HASH, "status": "healthy"}
