"""Tests for the position generators."""

import math

import pytest

from layout.patterns import (
    DEFAULT_RADIUS,
    circle,
    generate_positions,
    grid,
    row,
    staggered,
)


class TestGrid:
    def test_positions_are_distinct(self):
        positions = grid(10)
        assert len(positions) == 10
        assert len({(p.x, p.y) for p in positions}) == 10

    def test_near_square_columns(self):
        positions = grid(5, spacing=60)
        # ceil(sqrt(5)) == 3 columns
        assert [(p.x, p.y) for p in positions] == [
            (0, 0), (60, 0), (120, 0), (0, 60), (60, 60),
        ]

    @pytest.mark.parametrize("count", [0, -3])
    def test_empty_for_non_positive_count(self, count):
        assert grid(count) == []


class TestRowAndStaggered:
    def test_row_is_horizontal(self):
        positions = row(4, spacing=50)
        assert [(p.x, p.y) for p in positions] == [(0, 0), (50, 0), (100, 0), (150, 0)]

    def test_staggered_shifts_odd_rows(self):
        positions = staggered(4, spacing=60)
        assert [(p.x, p.y) for p in positions] == [(0, 0), (60, 0), (30, 60), (90, 60)]


class TestCircle:
    @pytest.mark.parametrize("count", [1, 3, 8, 25])
    def test_all_points_on_radius(self, count):
        for p in circle(count):
            distance = math.hypot(p.x - DEFAULT_RADIUS, p.y - DEFAULT_RADIUS)
            assert distance == pytest.approx(DEFAULT_RADIUS)

    def test_coordinates_non_negative(self):
        assert all(p.x >= -1e-9 and p.y >= -1e-9 for p in circle(12))

    def test_spacing_is_used_as_radius(self):
        for p in generate_positions("circle", 6, 40):
            assert math.hypot(p.x - 40, p.y - 40) == pytest.approx(40)


class TestGeneratePositions:
    def test_unknown_pattern_falls_back_to_grid(self):
        assert generate_positions("spiral", 7) == grid(7)

    def test_spacing_passed_through(self):
        positions = generate_positions("row", 3, 25)
        assert [p.x for p in positions] == [0, 25, 50]

    def test_returns_new_objects(self):
        first = generate_positions("grid", 3)
        second = generate_positions("grid", 3)
        assert first == second
        assert all(a is not b for a, b in zip(first, second))
