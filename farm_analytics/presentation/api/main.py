"""FastAPI main application."""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...infrastructure.repositories.in_memory_farm_repository import InMemoryFarmRepository
from ..wiring import build_dispatchers, load_repository
from config.settings import API_SETTINGS, LOG_LEVEL

logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Failure kind -> HTTP status
STATUS_BY_ERROR_KIND = {
    "NotFound": 404,
    "InvalidInput": 400,
    "InsufficientData": 422,
    "Internal": 500,
}


# Request models
class CommandRequest(BaseModel):
    """Request model for an aggregator command."""

    kind: str = Field(..., description="Command kind (e.g., 'compute-parcel-costs')")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Command parameters")


def _respond(result: Dict[str, Any]) -> JSONResponse:
    if result["ok"]:
        return JSONResponse(status_code=200, content=result)
    return JSONResponse(status_code=STATUS_BY_ERROR_KIND.get(result["error_kind"], 500), content=result)


def create_app(repository: Optional[InMemoryFarmRepository] = None) -> FastAPI:
    """
    Create the API application.

    Args:
        repository: Farm data source, loaded from DATA_DIR when None

    Returns:
        Configured FastAPI app
    """
    repository = repository if repository is not None else load_repository()
    dispatchers = build_dispatchers(repository)

    app = FastAPI(
        title=API_SETTINGS["title"],
        description=API_SETTINGS["description"],
        version=API_SETTINGS["version"],
    )

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": API_SETTINGS["title"],
            "version": API_SETTINGS["version"],
            "endpoints": {
                "costs": "/costs/commands",
                "productivity": "/productivity/commands",
                "health": "/health",
            },
            "commands": {name: dispatcher.kinds for name, dispatcher in dispatchers.items()},
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "data": repository.summary()}

    @app.post("/costs/commands")
    async def cost_command(request: CommandRequest) -> JSONResponse:
        """Dispatch a command to the cost aggregator."""
        result = await dispatchers["costs"].dispatch({"kind": request.kind, "payload": request.payload})
        return _respond(result)

    @app.post("/productivity/commands")
    async def productivity_command(request: CommandRequest) -> JSONResponse:
        """Dispatch a command to the productivity aggregator."""
        result = await dispatchers["productivity"].dispatch(
            {"kind": request.kind, "payload": request.payload}
        )
        return _respond(result)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
