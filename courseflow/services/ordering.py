"""Dense position bookkeeping for ordered child collections.

Modules within a course and content items within a module are each kept as
a permutation of ``0..n-1``.  Both store backends route every insert, delete
and reorder through these helpers so the rule lives in one place.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from courseflow.core.errors import Conflict


def next_position(sibling_count: int) -> int:
    """New children are always appended at the end."""
    return sibling_count


def validate_permutation(
    current_ids: Iterable[int], requested_ids: Sequence[int], *, scope: str
) -> None:
    """Require ``requested_ids`` to be exactly a reordering of ``current_ids``.

    Partial lists, foreign ids and repeated ids are all rejected with Conflict.
    """
    current = set(current_ids)
    requested = list(requested_ids)
    if len(set(requested)) != len(requested):
        raise Conflict(f"{scope} reorder contains duplicate ids")
    if set(requested) != current:
        missing = sorted(current - set(requested))
        foreign = sorted(set(requested) - current)
        parts = []
        if missing:
            parts.append(f"missing {missing}")
        if foreign:
            parts.append(f"foreign {foreign}")
        raise Conflict(f"{scope} reorder does not match current set ({'; '.join(parts)})")


def positions_for(ordered_ids: Sequence[int]) -> dict[int, int]:
    """Map each id to its dense position in the given order."""
    return {entity_id: position for position, entity_id in enumerate(ordered_ids)}


def close_gap(ordered_ids: Sequence[int], removed_id: int) -> dict[int, int]:
    """Positions for the survivors after ``removed_id`` leaves the sequence."""
    return positions_for([i for i in ordered_ids if i != removed_id])


def is_dense(positions: Iterable[int]) -> bool:
    values = sorted(positions)
    return values == list(range(len(values)))
