"""Main application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from .api.router import init_router, router
from .config import AppConfig, get_config_path, load_config
from .service import ParkingService
from .state.store import ParkingStore
from .storage import DebouncedSaver, StateStorage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global state
config: AppConfig | None = None
store: ParkingStore | None = None
saver: DebouncedSaver | None = None


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """
    Load configuration, falling back to defaults when no file exists.

    Args:
        path: Explicit config file; defaults to the standard locations
    """
    config_path = Path(path) if path else get_config_path()

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}, using defaults")
        return AppConfig()

    cfg = load_config(config_path)
    logger.info(f"Loaded configuration from {config_path}")
    return cfg


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global config, store, saver

    logger.info("Starting Parking Slot Tracker...")

    config = load_app_config()
    logging.getLogger().setLevel(config.logging.level)

    # Restore the last saved session, if any
    storage = StateStorage(config.storage.path)
    snapshot = storage.load()
    if snapshot is None:
        logger.info("No saved state found, starting fresh")
    else:
        logger.info(f"Restoring saved state from {storage.path}")

    store = ParkingStore(slot_count=config.facility.slot_count, initial_snapshot=snapshot)

    # Persist every change after a short quiet period
    saver = DebouncedSaver(storage, delay_seconds=config.storage.debounce_seconds)
    store.subscribe(saver)

    service = ParkingService(store, policy=config.billing)
    init_router(service, storage=storage, facility_name=config.facility.name)

    logger.info(f"Parking Slot Tracker ready on http://{config.api.host}:{config.api.port}")

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down...")

    if saver and not saver.flush():
        logger.error("Failed to write final state snapshot")

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Parking Slot Tracker",
    description="API for tracking parking slot occupancy and time-based billing",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router, prefix="/api/v1")


def main():
    """Run the application."""
    # Load config just to get API settings
    cfg = load_app_config()

    uvicorn.run(
        "parking_tracker.main:app",
        host=cfg.api.host,
        port=cfg.api.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
