from typing import Any, ClassVar

from pydantic import BaseModel, model_validator


class PatchModel(BaseModel):
    """Partial update with three states per field.

    A field left out of the payload is untouched, an explicit null clears a
    nullable column, and a value replaces it. Fields listed in non_nullable may
    be changed but never cleared.
    """

    non_nullable: ClassVar[frozenset[str]] = frozenset()
    # Fields naming the record to update rather than a change to it
    identity_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_cleared_required_fields(self):
        for name in sorted(self.non_nullable & self.model_fields_set):
            if getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be set to null")
        return self

    def changes(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name not in self.identity_fields
        }
