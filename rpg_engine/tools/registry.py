"""Tool registry: named operations with typed inputs and structured results.

Each tool validates its payload against a pydantic model, calls the services
and returns either {"isError": False, "result": ...} or a ToolError payload.
Validation and precondition faults are converted here; the session is rolled
back so a failed call leaves nothing behind. Committing a successful call is
the caller's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python
from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.services.notification_service import DeferredPublisher, EventBus
from rpg_engine.tools.errors import ToolError, from_exception

logger = logging.getLogger(__name__)


@dataclass
class ToolContext:
    db: AsyncSession
    bus: EventBus | DeferredPublisher | None = None


Handler = Callable[[Any, ToolContext], Awaitable[Any]]


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: Handler


TOOLS: dict[str, Tool] = {}


def tool(name: str, description: str, input_model: type[BaseModel]):
    """Register the decorated coroutine as a tool."""

    def decorator(handler: Handler) -> Handler:
        if name in TOOLS:
            raise ValueError(f"Tool '{name}' is already registered")
        TOOLS[name] = Tool(name, description, input_model, handler)
        return handler

    return decorator


def list_tools() -> list[dict[str, Any]]:
    return [
        {
            "name": t.name,
            "description": t.description,
            "input_schema": t.input_model.model_json_schema(),
        }
        for t in sorted(TOOLS.values(), key=lambda t: t.name)
    ]


async def invoke_tool(
    name: str,
    payload: dict[str, Any] | None,
    db: AsyncSession,
    bus: EventBus | DeferredPublisher | None = None,
) -> dict[str, Any]:
    registered = TOOLS.get(name)
    if registered is None:
        return ToolError("UNKNOWN_TOOL", f"Unknown tool: '{name}'").to_dict()

    try:
        params = registered.input_model.model_validate(payload or {})
    except ValidationError as exc:
        return from_exception(exc).to_dict()

    try:
        outcome = await registered.handler(params, ToolContext(db=db, bus=bus))
    except ValueError as exc:
        await db.rollback()
        logger.info("Tool %s rejected: %s", name, exc)
        return from_exception(exc).to_dict()

    if isinstance(outcome, ToolError):
        return outcome.to_dict()
    return {"isError": False, "result": to_jsonable_python(outcome)}
