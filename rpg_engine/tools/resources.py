from rpg_engine.schemas.resource import (
    CreateResourceRequest,
    ListResourcesRequest,
    ResourceChangeResponse,
    ResourceHistoryRequest,
    ResourceIdRequest,
    ResourceResponse,
    ResourceValueResponse,
    UpdateResourceRequest,
    UpdateResourceValueRequest,
)
from rpg_engine.services import resource_service
from rpg_engine.tools.errors import not_found
from rpg_engine.tools.registry import ToolContext, tool


@tool("create_resource", "Create a bounded resource owned by a game or character", CreateResourceRequest)
async def create_resource(params: CreateResourceRequest, ctx: ToolContext):
    resource = await resource_service.create_resource(
        ctx.db,
        params.game_id,
        params.owner_type,
        params.name,
        owner_id=params.owner_id,
        description=params.description,
        category=params.category,
        value=params.value,
        min_value=params.min_value,
        max_value=params.max_value,
    )
    return ResourceResponse.model_validate(resource)


@tool("get_resource", "Get a resource by id", ResourceIdRequest)
async def get_resource(params: ResourceIdRequest, ctx: ToolContext):
    resource = await resource_service.get_resource(ctx.db, params.resource_id)
    if resource is None:
        return not_found("resource", params.resource_id)
    return ResourceResponse.model_validate(resource)


@tool(
    "update_resource",
    "Update resource metadata or bounds; null clears a bound",
    UpdateResourceRequest,
)
async def update_resource(params: UpdateResourceRequest, ctx: ToolContext):
    resource = await resource_service.update_resource(ctx.db, params.resource_id, params.changes())
    if resource is None:
        return not_found("resource", params.resource_id)
    return ResourceResponse.model_validate(resource)


@tool("delete_resource", "Delete a resource and its history", ResourceIdRequest)
async def delete_resource(params: ResourceIdRequest, ctx: ToolContext):
    if not await resource_service.delete_resource(ctx.db, params.resource_id):
        return not_found("resource", params.resource_id)
    return {"deleted": True, "resource_id": params.resource_id}


@tool("list_resources", "List a game's resources", ListResourcesRequest)
async def list_resources(params: ListResourcesRequest, ctx: ToolContext):
    resources = await resource_service.list_resources(
        ctx.db,
        params.game_id,
        owner_type=params.owner_type,
        owner_id=params.owner_id,
        category=params.category,
    )
    return [ResourceResponse.model_validate(r) for r in resources]


@tool(
    "update_resource_value",
    "Change a resource by delta or set it outright; the result is clamped and audited",
    UpdateResourceValueRequest,
)
async def update_resource_value(params: UpdateResourceValueRequest, ctx: ToolContext):
    update = await resource_service.update_resource_value(
        ctx.db,
        params.resource_id,
        params.mode,
        params.value,
        reason=params.reason,
        bus=ctx.bus,
    )
    if update is None:
        return not_found("resource", params.resource_id)
    return ResourceValueResponse(
        resource=ResourceResponse.model_validate(update.resource),
        change=ResourceChangeResponse.model_validate(update.change),
    )


@tool("get_resource_history", "Change history of a resource, newest first", ResourceHistoryRequest)
async def get_resource_history(params: ResourceHistoryRequest, ctx: ToolContext):
    if await resource_service.get_resource(ctx.db, params.resource_id) is None:
        return not_found("resource", params.resource_id)
    changes = await resource_service.get_resource_history(
        ctx.db, params.resource_id, limit=params.limit
    )
    return [ResourceChangeResponse.model_validate(c) for c in changes]
