"""Bounded resource ledger: clamped numeric pools with an audit trail.

Every explicit value update writes exactly one ResourceChange whose delta is
the change actually applied after clamping, which can be smaller than the one
requested. Re-clamping caused by editing the bounds is not audited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.models.resource import OwnerType, Resource, ResourceChange
from rpg_engine.schemas.resource import ValueMode
from rpg_engine.services.entity_service import validate_game_exists
from rpg_engine.services.notification_service import EventBus, notify

logger = logging.getLogger(__name__)

# Fields update_resource accepts; value only moves through update_resource_value
UPDATABLE_FIELDS = frozenset({"name", "description", "category", "min_value", "max_value"})


@dataclass
class ValueUpdate:
    resource: Resource
    change: ResourceChange


def clamp_value(value: float, min_value: float | None, max_value: float | None) -> float:
    """Constrain value to whichever bounds are set; bounds are not checked against each other."""
    if min_value is not None:
        value = max(value, min_value)
    if max_value is not None:
        value = min(value, max_value)
    return value


async def create_resource(
    db: AsyncSession,
    game_id: str,
    owner_type: OwnerType,
    name: str,
    owner_id: str | None = None,
    description: str = "",
    category: str | None = None,
    value: float = 0,
    min_value: float | None = None,
    max_value: float | None = None,
) -> Resource:
    """Create a resource; the starting value is clamped to the given bounds."""
    await validate_game_exists(db, game_id)
    owner_type = OwnerType(owner_type)

    resource = Resource(
        game_id=game_id,
        owner_type=owner_type,
        owner_id=None if owner_type == OwnerType.game else owner_id,
        name=name,
        description=description,
        category=category,
        value=clamp_value(value, min_value, max_value),
        min_value=min_value,
        max_value=max_value,
    )
    db.add(resource)
    await db.flush()
    return resource


async def get_resource(db: AsyncSession, resource_id: str) -> Resource | None:
    return await db.get(Resource, resource_id)


async def list_resources(
    db: AsyncSession,
    game_id: str,
    owner_type: OwnerType | None = None,
    owner_id: str | None = None,
    category: str | None = None,
) -> list[Resource]:
    query = select(Resource).where(Resource.game_id == game_id)
    if owner_type is not None:
        query = query.where(Resource.owner_type == owner_type)
    if owner_id is not None:
        query = query.where(Resource.owner_id == owner_id)
    if category is not None:
        query = query.where(Resource.category == category)
    result = await db.execute(query.order_by(Resource.name))
    return list(result.scalars().all())


async def update_resource(
    db: AsyncSession, resource_id: str, changes: dict[str, Any]
) -> Resource | None:
    """Apply a partial metadata/bounds update and re-clamp the current value.

    changes holds only the fields to touch; an explicit None clears a nullable
    field (category or either bound).
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update resource field(s): {', '.join(sorted(unknown))}")

    resource = await get_resource(db, resource_id)
    if resource is None:
        return None

    for field_name, field_value in changes.items():
        setattr(resource, field_name, field_value)

    reclamped = clamp_value(resource.value, resource.min_value, resource.max_value)
    if reclamped != resource.value:
        logger.info(
            "Resource %s re-clamped from %s to %s after bounds change",
            resource.id, resource.value, reclamped,
        )
        resource.value = reclamped
    await db.flush()
    return resource


async def delete_resource(db: AsyncSession, resource_id: str) -> bool:
    """Delete a resource together with its change history."""
    resource = await get_resource(db, resource_id)
    if resource is None:
        return False
    await db.execute(delete(ResourceChange).where(ResourceChange.resource_id == resource_id))
    await db.delete(resource)
    await db.flush()
    return True


async def update_resource_value(
    db: AsyncSession,
    resource_id: str,
    mode: ValueMode | str,
    value: float,
    reason: str | None = None,
    bus: EventBus | None = None,
) -> ValueUpdate | None:
    """Move a resource's value by delta or to an absolute value, clamped, and audit it."""
    mode = ValueMode(mode)
    resource = await get_resource(db, resource_id)
    if resource is None:
        return None

    previous_value = resource.value
    target = previous_value + value if mode == ValueMode.delta else value
    new_value = clamp_value(target, resource.min_value, resource.max_value)

    resource.value = new_value
    change = ResourceChange(
        resource_id=resource.id,
        previous_value=previous_value,
        new_value=new_value,
        delta=new_value - previous_value,
        reason=reason,
    )
    db.add(change)
    await db.flush()

    notify(
        bus, "resource:changed", resource.game_id,
        entity_id=resource.id, entity_type="resource",
        data={
            "name": resource.name,
            "previousValue": previous_value,
            "newValue": new_value,
            "delta": change.delta,
        },
    )
    return ValueUpdate(resource=resource, change=change)


async def get_resource_history(
    db: AsyncSession, resource_id: str, limit: int | None = None
) -> list[ResourceChange]:
    """Change records for a resource, newest first."""
    query = (
        select(ResourceChange)
        .where(ResourceChange.resource_id == resource_id)
        .order_by(ResourceChange.timestamp.desc(), ResourceChange.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())
