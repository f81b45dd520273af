"""Tools router: HTTP access to the tool registry."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.database import get_db
from rpg_engine.dependencies import get_event_bus
from rpg_engine.services.notification_service import DeferredPublisher, EventBus
from rpg_engine.tools import invoke_tool, list_tools

router = APIRouter(prefix="/tools", tags=["tools"])


@router.get("")
async def list_tools_endpoint():
    """Names, descriptions and input schemas of every registered tool."""
    return list_tools()


@router.post("/{name}")
async def invoke_tool_endpoint(
    name: str,
    payload: dict[str, Any] | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    """Run a tool. Errors come back as a 200 with isError set, like any other result.

    Events raised by the tool reach subscribers only once the commit succeeds.
    """
    publisher = DeferredPublisher(bus)
    result = await invoke_tool(name, payload, db, publisher)
    if result["isError"]:
        publisher.discard()
        return result
    await db.commit()
    publisher.release()
    return result
