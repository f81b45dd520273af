from typing import Any, Optional

from pydantic import BaseModel


class CheckMechanics(BaseModel):
    base_dice: str = "1d20"
    # Both thresholds compare against the first die of the base roll, not the total
    critical_success: Optional[int] = None
    critical_failure: Optional[int] = None


class RuleSystem(BaseModel):
    name: str = "custom"
    check_mechanics: CheckMechanics = CheckMechanics()
    # Free-form sections owned by the surrounding application
    extra: dict[str, Any] = {}
