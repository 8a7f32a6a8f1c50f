import json

import pytest

from backend.src.models.graph import Direction, RuleId
from backend.src.models.hierarchy import (
    Hierarchy,
    HierarchyConfigError,
    blank_hierarchy,
    default_hierarchy,
    get_hierarchy,
    parse_hierarchies,
)


def test_missing_directions_and_rules_are_filled() -> None:
    hierarchy = Hierarchy(dirs={"up": ["parent"]})

    assert hierarchy.fields(Direction.UP) == ["parent"]
    assert hierarchy.fields(Direction.DOWN) == []
    assert not hierarchy.is_enabled(Direction.SAME)
    assert set(hierarchy.implied_relationships) == set(RuleId)
    assert not any(hierarchy.implied_relationships.values())


def test_field_names_are_trimmed_and_deduplicated() -> None:
    hierarchy = Hierarchy(dirs={"up": [" parent ", "parent", "mother"]})

    assert hierarchy.fields(Direction.UP) == ["parent", "mother"]
    assert hierarchy.primary_field(Direction.UP) == "parent"


def test_blank_field_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        Hierarchy(dirs={"up": ["  "]})


def test_field_used_for_two_directions_is_rejected() -> None:
    with pytest.raises(ValueError):
        Hierarchy(dirs={"up": ["link"], "down": ["link"]})


def test_enabled_rule_needs_fields_in_its_result_direction() -> None:
    with pytest.raises(ValueError):
        Hierarchy(
            dirs={"up": ["parent"]},
            implied_relationships={"same_parent_is_sibling": True},
        )


def test_self_is_sibling_needs_no_fields() -> None:
    hierarchy = Hierarchy(implied_relationships={"self_is_sibling": True})

    assert hierarchy.rule_enabled(RuleId.SELF_IS_SIBLING)


def test_blank_and_default_hierarchies() -> None:
    assert all(not blank_hierarchy().is_enabled(direction) for direction in Direction)

    default = default_hierarchy()
    for direction in Direction:
        assert default.primary_field(direction) == direction.value


def test_parse_hierarchies_from_json() -> None:
    raw = json.dumps(
        [
            {"dirs": {"up": ["parent"], "same": ["sibling"]},
             "implied_relationships": {"parents_sibling_is_parent": True}},
            {"dirs": {"next": ["next"], "prev": ["prev"]}},
        ]
    )

    hierarchies = parse_hierarchies(raw)

    assert len(hierarchies) == 2
    assert hierarchies[0].rule_enabled(RuleId.PARENTS_SIBLING_IS_PARENT)
    assert hierarchies[1].fields(Direction.PREV) == ["prev"]


def test_parse_hierarchies_wraps_validation_errors() -> None:
    with pytest.raises(HierarchyConfigError):
        parse_hierarchies([{"dirs": {"sideways": ["x"]}}])

    with pytest.raises(HierarchyConfigError):
        parse_hierarchies("not json")


def test_get_hierarchy_out_of_range() -> None:
    hierarchies = [default_hierarchy()]

    assert get_hierarchy(hierarchies, 0) is hierarchies[0]
    with pytest.raises(HierarchyConfigError):
        get_hierarchy(hierarchies, 1)
    with pytest.raises(HierarchyConfigError):
        get_hierarchy(hierarchies, -1)
