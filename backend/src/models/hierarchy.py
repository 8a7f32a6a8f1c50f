"""Hierarchy (relationship-set) configuration models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from .graph import DIRECTIONS, Direction, RuleId


class HierarchyConfigError(ValueError):
    """Raised when a hierarchy definition cannot be used."""


# Direction an enabled rule asserts edges in. self_is_sibling only affects queries.
RULE_RESULT_DIRECTION: Dict[RuleId, Optional[Direction]] = {
    RuleId.SELF_IS_SIBLING: None,
    RuleId.SAME_PARENT_IS_SIBLING: Direction.SAME,
    RuleId.SAME_SIBLING_IS_SIBLING: Direction.SAME,
    RuleId.COUSIN_IS_SIBLING: Direction.SAME,
    RuleId.SIBLINGS_PARENT_IS_PARENT: Direction.UP,
    RuleId.PARENTS_SIBLING_IS_PARENT: Direction.UP,
}


class Hierarchy(BaseModel):
    """A relationship-set: direction -> field names, plus rule toggles."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "dirs": {
                    "up": ["parent"],
                    "down": ["child"],
                    "same": ["sibling"],
                    "next": ["next"],
                    "prev": ["prev"],
                },
                "implied_relationships": {"parents_sibling_is_parent": True},
            }
        },
    )

    dirs: Dict[Direction, List[str]] = Field(default_factory=dict, validate_default=True)
    implied_relationships: Dict[RuleId, bool] = Field(default_factory=dict, validate_default=True)

    @field_validator("dirs", mode="after")
    @classmethod
    def _fill_dirs(cls, value: Dict[Direction, List[str]]) -> Dict[Direction, List[str]]:
        filled: Dict[Direction, List[str]] = {}
        seen: Dict[str, Direction] = {}
        for direction in DIRECTIONS:
            fields: List[str] = []
            for raw in value.get(direction, []):
                name = raw.strip()
                if not name:
                    raise HierarchyConfigError(
                        f"Blank field name under direction '{direction.value}'"
                    )
                if name in seen and seen[name] != direction:
                    raise HierarchyConfigError(
                        f"Field '{name}' is used for both '{seen[name].value}' and '{direction.value}'"
                    )
                seen[name] = direction
                if name not in fields:
                    fields.append(name)
            filled[direction] = fields
        return filled

    @field_validator("implied_relationships", mode="after")
    @classmethod
    def _fill_rules(cls, value: Dict[RuleId, bool]) -> Dict[RuleId, bool]:
        return {rule_id: bool(value.get(rule_id, False)) for rule_id in RuleId}

    @model_validator(mode="after")
    def _check_enabled_rules(self) -> "Hierarchy":
        for rule_id, enabled in self.implied_relationships.items():
            direction = RULE_RESULT_DIRECTION[rule_id]
            if enabled and direction is not None and not self.fields(direction):
                raise HierarchyConfigError(
                    f"Rule '{rule_id.value}' is enabled but direction "
                    f"'{direction.value}' has no fields"
                )
        return self

    def fields(self, direction: Direction) -> List[str]:
        return self.dirs.get(direction, [])

    def is_enabled(self, direction: Direction) -> bool:
        """An empty field list disables a direction entirely."""
        return bool(self.fields(direction))

    def primary_field(self, direction: Direction) -> Optional[str]:
        fields = self.fields(direction)
        return fields[0] if fields else None

    def rule_enabled(self, rule_id: RuleId) -> bool:
        return self.implied_relationships.get(rule_id, False)


def blank_hierarchy() -> Hierarchy:
    """Hierarchy with every direction disabled and every rule off."""
    return Hierarchy()


def default_hierarchy() -> Hierarchy:
    """The out-of-the-box hierarchy: one field per direction, named after it."""
    return Hierarchy(dirs={direction: [direction.value] for direction in DIRECTIONS})


_HIERARCHY_LIST = TypeAdapter(List[Hierarchy])


def parse_hierarchies(raw: Any) -> List[Hierarchy]:
    """Validate a hierarchy list from JSON text or already-decoded data.

    Raises HierarchyConfigError with pydantic's message on any problem.
    """
    try:
        if isinstance(raw, (str, bytes)):
            return _HIERARCHY_LIST.validate_json(raw)
        return _HIERARCHY_LIST.validate_python(raw)
    except ValidationError as exc:
        raise HierarchyConfigError(str(exc)) from exc


def get_hierarchy(hierarchies: Sequence[Hierarchy], hierarchy_i: int) -> Hierarchy:
    """Look up a hierarchy by index, raising HierarchyConfigError when out of range."""
    if hierarchy_i < 0 or hierarchy_i >= len(hierarchies):
        raise HierarchyConfigError(
            f"Unknown hierarchy index {hierarchy_i} ({len(hierarchies)} configured)"
        )
    return hierarchies[hierarchy_i]


__all__ = [
    "Hierarchy",
    "HierarchyConfigError",
    "RULE_RESULT_DIRECTION",
    "blank_hierarchy",
    "default_hierarchy",
    "get_hierarchy",
    "parse_hierarchies",
]
