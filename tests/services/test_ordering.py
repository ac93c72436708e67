from __future__ import annotations

import pytest

from courseflow.core.errors import Conflict
from courseflow.services import ordering


def test_next_position_appends() -> None:
    assert ordering.next_position(0) == 0
    assert ordering.next_position(3) == 3


def test_validate_permutation_accepts_reordering() -> None:
    ordering.validate_permutation([1, 2, 3], [3, 1, 2], scope="module")


def test_validate_permutation_accepts_empty() -> None:
    ordering.validate_permutation([], [], scope="module")


@pytest.mark.parametrize(
    ("requested", "fragment"),
    [
        ([1, 2], "missing [3]"),
        ([1, 2, 3, 4], "foreign [4]"),
        ([1, 2, 2, 3], "duplicate"),
        ([1, 2, 9], "missing [3]; foreign [9]"),
    ],
)
def test_validate_permutation_rejects_mismatch(requested, fragment) -> None:
    with pytest.raises(Conflict) as exc_info:
        ordering.validate_permutation([1, 2, 3], requested, scope="content")
    assert fragment in exc_info.value.message
    assert exc_info.value.message.startswith("content reorder")


def test_positions_for() -> None:
    assert ordering.positions_for([7, 3, 5]) == {7: 0, 3: 1, 5: 2}


def test_close_gap_renumbers_survivors() -> None:
    assert ordering.close_gap([4, 5, 6, 7], 5) == {4: 0, 6: 1, 7: 2}


def test_is_dense() -> None:
    assert ordering.is_dense([])
    assert ordering.is_dense([2, 0, 1])
    assert not ordering.is_dense([0, 2])
    assert not ordering.is_dense([0, 0, 1])
