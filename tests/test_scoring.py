"""Unit tests for arrow and set scoring."""

import pytest
from pydantic import ValidationError

from archery.schemas import SetScore, ShootOffScore
from archery.scoring import (
    arrow_point,
    build_set,
    count_x10s,
    is_x10,
    parse_arrow,
    rescore_set,
    resolve_set_points,
    set_total,
    shoot_off_points,
)


class TestArrowValues:
    """Tests for single arrow values."""

    def test_arrow_points(self):
        """Test X is 10, M is 0, numbers are face value."""
        assert arrow_point('X') == 10
        assert arrow_point('M') == 0
        assert arrow_point(10) == 10
        assert arrow_point(5) == 5

    def test_x10_counts_x_and_ten(self):
        """Test X and 10 both count toward X+10s."""
        assert is_x10('X')
        assert is_x10(10)
        assert not is_x10(9)
        assert not is_x10('M')

    def test_parse_arrow_tokens(self):
        """Test user input is normalized to arrow values."""
        assert parse_arrow('x') == 'X'
        assert parse_arrow(' m ') == 'M'
        assert parse_arrow('10') == 10
        assert parse_arrow(7) == 7

    @pytest.mark.parametrize('token', ['4', '11', 'Y', '', 0])
    def test_parse_arrow_rejects_invalid(self, token):
        """Test values outside X, 10-5, M are rejected."""
        with pytest.raises(ValueError):
            parse_arrow(token)


class TestSetTotals:
    """Tests for set totals and X+10 counts."""

    def test_set_total_and_x10s(self):
        """Test sum of arrow points and X+10 count."""
        arrows = ['X', 10, 10, 9, 9, 9, 9, 9, 9, 9]
        assert set_total(arrows) == 93
        assert count_x10s(arrows) == 3

    def test_misses_count_zero(self):
        """Test a set of misses totals zero."""
        assert set_total(['M'] * 10) == 0
        assert count_x10s(['M'] * 10) == 0


class TestSetPoints:
    """Tests for set point resolution."""

    def test_higher_total_wins_two(self):
        """Test the higher total takes 2 points."""
        assert resolve_set_points(95, 90) == (2, 0)
        assert resolve_set_points(80, 81) == (0, 2)

    def test_equal_totals_split(self):
        """Test equal totals split 1-1."""
        assert resolve_set_points(88, 88) == (1, 1)

    @pytest.mark.parametrize('a,b', [(100, 0), (0, 100), (75, 75), (91, 92)])
    def test_antisymmetric_and_sums_to_two(self, a, b):
        """Test swapping totals swaps points, and points always sum to 2."""
        points = resolve_set_points(a, b)
        assert resolve_set_points(b, a) == (points[1], points[0])
        assert sum(points) == 2


class TestBuildSet:
    """Tests for finalized sets."""

    def test_set_scenario(self):
        """Test 93 with 3 X+10s beats 90 with 1 X+10 for 2-0."""
        s = build_set(
            ['X', 10, 10, 9, 9, 9, 9, 9, 9, 9],
            ['X', 9, 9, 9, 9, 9, 9, 9, 9, 8],
        )
        assert s.team_a_set_total == 93
        assert s.team_b_set_total == 90
        assert s.team_a_x10s == 3
        assert s.team_b_x10s == 1
        assert (s.team_a_set_points, s.team_b_set_points) == (2, 0)

    def test_build_set_parses_tokens(self):
        """Test raw string tokens are parsed."""
        s = build_set(['x'] * 10, ['m'] * 10)
        assert s.team_a_arrows == ['X'] * 10
        assert s.team_a_set_total == 100
        assert s.team_b_set_total == 0

    def test_build_set_requires_ten_arrows(self):
        """Test a side with fewer than ten arrows is rejected."""
        with pytest.raises(ValueError, match='exactly 10'):
            build_set([9] * 9, [9] * 10)

    def test_set_schema_rejects_wrong_arrow_count(self):
        """Test the stored set schema also enforces ten arrows."""
        with pytest.raises(ValidationError):
            SetScore(
                team_a_arrows=[9] * 11,
                team_b_arrows=[9] * 10,
                team_a_set_total=99,
                team_b_set_total=90,
                team_a_x10s=0,
                team_b_x10s=0,
                team_a_set_points=2,
                team_b_set_points=0,
            )

    def test_set_accepts_stored_aliases(self):
        """Test a set loads from the stored key names."""
        s = SetScore.model_validate({
            'teamA_arrows': [9] * 10,
            'teamB_arrows': [8] * 10,
            'teamA_set_total': 90,
            'teamB_set_total': 80,
            'teamA_x10s': 0,
            'teamB_x10s': 0,
            'teamA_set_points': 2,
            'teamB_set_points': 0,
        })
        assert s.team_a_set_total == 90
        assert s.model_dump(by_alias=True)['teamB_set_total'] == 80

    def test_rescore_fixes_inconsistent_set(self):
        """Test rescoring rebuilds totals and points from arrows."""
        wrong = SetScore(
            team_a_arrows=[9] * 10,
            team_b_arrows=[10] * 10,
            team_a_set_total=100,
            team_b_set_total=0,
            team_a_x10s=0,
            team_b_x10s=0,
            team_a_set_points=2,
            team_b_set_points=0,
        )
        fixed = rescore_set(wrong)
        assert fixed.team_a_set_total == 90
        assert fixed.team_b_set_total == 100
        assert fixed.team_b_x10s == 10
        assert (fixed.team_a_set_points, fixed.team_b_set_points) == (0, 2)


class TestShootOffPoints:
    """Tests for shoot-off credit."""

    def test_no_shoot_off(self):
        assert shoot_off_points(None) == (0, 0)

    def test_winner_credited_one_point(self):
        """Test the shoot-off winner gets one set point."""
        so = ShootOffScore(team_a_winner=0, team_b_winner=1)
        assert shoot_off_points(so) == (0, 1)
