from rpg_engine.models.base import Base  # noqa: F401
from rpg_engine.models.combat import Combat, CombatParticipant, CombatStatus  # noqa: F401
from rpg_engine.models.game import Character, Game  # noqa: F401
from rpg_engine.models.random_table import RandomTable, RandomTableEntry  # noqa: F401
from rpg_engine.models.resource import OwnerType, Resource, ResourceChange  # noqa: F401
from rpg_engine.models.status_effect import (  # noqa: F401
    EffectType,
    StatusEffect,
    StatusEffectModifier,
)
from rpg_engine.models.timer import Timer, TimerDirection, TimerType  # noqa: F401
