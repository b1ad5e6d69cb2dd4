# /tests/test_grade_scale.py

import pytest

from ccrm.core.enums import Grade, from_marks


@pytest.mark.parametrize("mark, expected", [
    (90, Grade.S),
    (80, Grade.A),
    (70, Grade.B),
    (60, Grade.C),
    (50, Grade.D),
    (40, Grade.E),
])
def test_boundary_marks_belong_to_the_higher_bucket(mark, expected):
    assert Grade.from_marks(mark) is expected


@pytest.mark.parametrize("mark", [39.999, 20, 0, -5, -1000])
def test_marks_below_forty_fail(mark):
    assert Grade.from_marks(mark) is Grade.F


def test_marks_above_range_stay_top_grade():
    assert Grade.from_marks(150) is Grade.S


def test_just_below_each_boundary_drops_one_grade():
    assert Grade.from_marks(89.99) is Grade.A
    assert Grade.from_marks(79.5) is Grade.B
    assert Grade.from_marks(49.9) is Grade.E


def test_grade_rank_never_improves_as_mark_decreases():
    """Walking marks downward, point values must never go up."""
    previous = Grade.from_marks(100).points
    mark = 100.0
    while mark >= -10:
        points = Grade.from_marks(mark).points
        assert points <= previous
        previous = points
        mark -= 0.5


def test_point_values():
    assert [g.points for g in Grade] == [10, 9, 8, 7, 6, 5, 0]
    assert [g.name for g in Grade] == ["S", "A", "B", "C", "D", "E", "F"]


def test_module_function_matches_classmethod():
    assert from_marks(85) is Grade.from_marks(85) is Grade.A
