from pydantic import BaseModel

from rpg_engine.schemas.table import (
    CreateSimpleTableRequest,
    CreateTableRequest,
    ListTablesRequest,
    ModifyEntriesRequest,
    RandomTableResponse,
    RollTableRequest,
    TableIdRequest,
    UpdateTableRequest,
)
from rpg_engine.services import table_service
from rpg_engine.tools.errors import ToolError, not_found
from rpg_engine.tools.registry import ToolContext, tool


class EntryModificationResponse(BaseModel):
    table: RandomTableResponse
    added: int
    removed: int
    invalid_indices: list[int]


@tool("create_table", "Create a random table with ranged or weighted entries", CreateTableRequest)
async def create_table(params: CreateTableRequest, ctx: ToolContext):
    table = await table_service.create_table(
        ctx.db,
        params.game_id,
        params.name,
        description=params.description,
        category=params.category,
        entries=params.entries,
        roll_expression=params.roll_expression,
    )
    return RandomTableResponse.model_validate(table)


@tool(
    "create_simple_table",
    "Create a table from a plain list of results, rolled on 1dN",
    CreateSimpleTableRequest,
)
async def create_simple_table(params: CreateSimpleTableRequest, ctx: ToolContext):
    table = await table_service.create_simple_table(
        ctx.db, params.game_id, params.name, params.results, category=params.category
    )
    return RandomTableResponse.model_validate(table)


@tool("get_table", "Get a random table with its entries", TableIdRequest)
async def get_table(params: TableIdRequest, ctx: ToolContext):
    table = await table_service.get_table(ctx.db, params.table_id)
    if table is None:
        return not_found("table", params.table_id)
    return RandomTableResponse.model_validate(table)


@tool("update_table", "Update a table; entries replace the whole list", UpdateTableRequest)
async def update_table(params: UpdateTableRequest, ctx: ToolContext):
    table = await table_service.update_table(ctx.db, params.table_id, params.changes())
    if table is None:
        return not_found("table", params.table_id)
    return RandomTableResponse.model_validate(table)


@tool("delete_table", "Delete a random table", TableIdRequest)
async def delete_table(params: TableIdRequest, ctx: ToolContext):
    if not await table_service.delete_table(ctx.db, params.table_id):
        return not_found("table", params.table_id)
    return {"deleted": True, "table_id": params.table_id}


@tool("list_tables", "List a game's random tables", ListTablesRequest)
async def list_tables(params: ListTablesRequest, ctx: ToolContext):
    tables = await table_service.list_tables(ctx.db, params.game_id, category=params.category)
    return [RandomTableResponse.model_validate(t) for t in tables]


@tool("roll_table", "Roll on a random table, following subtables", RollTableRequest)
async def roll_table(params: RollTableRequest, ctx: ToolContext):
    result = await table_service.roll_table(ctx.db, params.table_id, params.modifier)
    if result is not None:
        return result
    if await table_service.get_table(ctx.db, params.table_id) is None:
        return not_found("table", params.table_id)
    return ToolError(
        "TABLE_EMPTY",
        f"Table '{params.table_id}' has no entries",
        entity_type="table",
        entity_id=params.table_id,
    )


@tool(
    "modify_table_entries",
    "Remove entries by index and append new ones",
    ModifyEntriesRequest,
)
async def modify_table_entries(params: ModifyEntriesRequest, ctx: ToolContext):
    modification = await table_service.modify_table_entries(
        ctx.db, params.table_id, add=params.add, remove=params.remove
    )
    if modification is None:
        return not_found("table", params.table_id)
    return EntryModificationResponse(
        table=RandomTableResponse.model_validate(modification.table),
        added=modification.added,
        removed=modification.removed,
        invalid_indices=modification.invalid_indices,
    )
