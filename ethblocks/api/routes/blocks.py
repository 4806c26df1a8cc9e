"""Block API routes."""

from typing import Any

from pydantic import BaseModel, Field
from fastapi import APIRouter, HTTPException

from ...app import Application
from ...errors import UnknownOpcode
from ...logging_config import get_logger

logger = get_logger(__name__)


class BlockRequest(BaseModel):
    """Request model for running a block."""

    args: dict[str, Any] = Field(default_factory=dict)


class BlockResponse(BaseModel):
    """Response model for a block result."""

    value: Any = None


def create_blocks_router(app: Application) -> APIRouter:
    """Create blocks router."""
    router = APIRouter(prefix="/api", tags=["blocks"])

    @router.get("/extension")
    async def get_extension() -> dict:
        """Extension metadata: blocks and menus."""
        return app.blocks.get_info()

    @router.post("/blocks/{opcode}", response_model=BlockResponse)
    async def run_block(opcode: str, request: BlockRequest) -> dict:
        """Run one block with the host's arguments."""
        try:
            value = await app.blocks.run(opcode, request.args)
            return {"value": value}
        except UnknownOpcode as e:
            raise HTTPException(status_code=404, detail=str(e))
        except Exception as e:
            logger.exception("Block %s failed", opcode)
            raise HTTPException(status_code=500, detail=str(e))

    return router
