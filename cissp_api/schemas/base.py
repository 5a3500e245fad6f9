from typing import ClassVar, FrozenSet
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case input still works."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        protected_namespaces=(),
    )


class PatchModel(CamelModel):
    """Partial update body.

    Omitted fields are left alone. An explicit ``null`` is only accepted for
    the columns listed in ``nullable_fields``; everything else must carry a
    value when it is sent.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{name} cannot be null")
        return self
