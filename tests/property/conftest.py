# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- Field-worker ids and rosters
- Upstream work-order records with arbitrary opaque fields
- Free-text descriptions (including None and empty)

Usage:
    from tests.property.conftest import work_orders, rosters

    @given(record=work_orders(), active=rosters)
    def test_envelope_keeps_fields(record: dict, active: frozenset[int]) -> None:
        ...
"""

from __future__ import annotations

from typing import Any

from hypothesis import strategies as st

from wosync.contracts import DEFAULT_SERVER_OWNED_FIELDS

# Positive ids; 0 and None are the upstream's "unassigned" spellings
field_worker_ids = st.integers(min_value=1, max_value=10_000)

current_assignees = st.one_of(st.none(), st.just(0), field_worker_ids)

rosters = st.frozensets(field_worker_ids, max_size=20)

descriptions = st.one_of(st.none(), st.text(max_size=80))

json_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(2**31), max_value=2**31),
    st.text(max_size=20),
)

json_values = st.recursive(
    json_scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(st.text(max_size=8), children, max_size=4),
    ),
    max_leaves=10,
)

_RESERVED = {"Id", "StatusId", "FieldWorkerId", "Description", *DEFAULT_SERVER_OWNED_FIELDS, "ModifiedDate"}

# Opaque keys the engine never interprets
opaque_keys = st.text(alphabet=st.characters(categories=("Lu", "Ll")), min_size=1, max_size=12).filter(
    lambda k: k not in _RESERVED
)


@st.composite
def work_orders(draw: st.DrawFn) -> dict[str, Any]:
    """Upstream record with the fields the engine reads plus opaque extras."""
    record: dict[str, Any] = draw(st.dictionaries(opaque_keys, json_values, max_size=6))
    record["Id"] = draw(st.integers(min_value=1, max_value=10**7))
    record["StatusId"] = draw(st.integers(min_value=1, max_value=50))
    record["FieldWorkerId"] = draw(current_assignees)
    description = draw(descriptions)
    if description is not None:
        record["Description"] = description
    for name in draw(st.sets(st.sampled_from(DEFAULT_SERVER_OWNED_FIELDS))):
        record[name] = "/Date(1700000000000)/"
    return record
