from rpg_engine.tools import combat, dice, resources, status, tables, timers  # noqa: F401
from rpg_engine.tools.registry import invoke_tool, list_tools  # noqa: F401
