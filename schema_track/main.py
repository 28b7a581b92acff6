"""FastAPI application entrypoint."""

from fastapi import FastAPI

from schema_track import __version__
from schema_track.config import get_settings
from schema_track.routers import snapshots

app = FastAPI(title=get_settings().app_name, version=__version__)

app.include_router(snapshots.router, tags=["snapshots"])


@app.get("/health")
def health() -> dict[str, str]:
    """Simple health check endpoint."""

    return {"status": "ok"}
