"""Scoring primitives: arrow values, set totals and set points."""

from typing import Iterable, Tuple

from .constants import ARROW_VALUES, ARROWS_PER_SET, SET_LOSS_POINTS, SET_TIE_POINTS, SET_WIN_POINTS
from .schemas import ArrowValue, SetScore, ShootOffScore

_ARROW_TOKENS = {str(value): value for value in ARROW_VALUES}


def arrow_point(value: ArrowValue) -> int:
    """
    Numeric value of a single arrow.

    Scoring:
        - X: 10 points
        - M (miss): 0 points
        - 10 to 5: face value
    """
    if value == 'X':
        return 10
    if value == 'M':
        return 0
    return int(value)


def is_x10(value: ArrowValue) -> bool:
    """True for an X or a 10 (counted together for tiebreak statistics)."""
    return value == 'X' or value == 10


def parse_arrow(token) -> ArrowValue:
    """
    Parse user input into an arrow value.

    Accepts ``X``/``x``, ``M``/``m`` and the digits 5 to 10, as strings or ints.

    Raises:
        ValueError: If the token is not a valid arrow value
    """
    key = str(token).strip().upper()
    if key not in _ARROW_TOKENS:
        raise ValueError(f'Invalid arrow value: {token!r} (expected X, 10-5 or M)')
    return _ARROW_TOKENS[key]  # type: ignore[return-value]


def set_total(arrows: Iterable[ArrowValue]) -> int:
    """Sum of arrow points for one side of a set."""
    return sum(arrow_point(a) for a in arrows)


def count_x10s(arrows: Iterable[ArrowValue]) -> int:
    """Number of X and 10 arrows."""
    return sum(1 for a in arrows if is_x10(a))


def resolve_set_points(total_a: int, total_b: int) -> Tuple[int, int]:
    """
    Award set points from two set totals.

    The higher total takes 2 points and the other side 0; equal totals
    split 1-1. Points always add up to 2.
    """
    if total_a > total_b:
        return SET_WIN_POINTS, SET_LOSS_POINTS
    if total_a < total_b:
        return SET_LOSS_POINTS, SET_WIN_POINTS
    return SET_TIE_POINTS, SET_TIE_POINTS


def build_set(arrows_a: list, arrows_b: list) -> SetScore:
    """
    Build a finalized set from both sides' arrows.

    Args:
        arrows_a: Ten arrow values (or raw tokens) for team A
        arrows_b: Ten arrow values (or raw tokens) for team B

    Returns:
        Immutable SetScore with totals, X10 counts and set points

    Raises:
        ValueError: If either side does not have exactly ten valid arrows
    """
    arrows_a = [parse_arrow(a) for a in arrows_a]
    arrows_b = [parse_arrow(b) for b in arrows_b]

    for side, arrows in (('A', arrows_a), ('B', arrows_b)):
        if len(arrows) != ARROWS_PER_SET:
            raise ValueError(
                f'Team {side} has {len(arrows)} arrows, a set needs exactly {ARROWS_PER_SET}'
            )

    total_a = set_total(arrows_a)
    total_b = set_total(arrows_b)
    points_a, points_b = resolve_set_points(total_a, total_b)

    return SetScore(
        team_a_arrows=arrows_a,
        team_b_arrows=arrows_b,
        team_a_set_total=total_a,
        team_b_set_total=total_b,
        team_a_x10s=count_x10s(arrows_a),
        team_b_x10s=count_x10s(arrows_b),
        team_a_set_points=points_a,
        team_b_set_points=points_b,
    )


def rescore_set(set_score: SetScore) -> SetScore:
    """Rebuild a set from its arrows so its totals and points are consistent."""
    return build_set(list(set_score.team_a_arrows), list(set_score.team_b_arrows))


def shoot_off_points(shoot_off: ShootOffScore | None) -> Tuple[int, int]:
    """Extra set point credited by a shoot-off: (1, 0), (0, 1) or (0, 0) if none."""
    if shoot_off is None:
        return 0, 0
    return int(shoot_off.team_a_winner), int(shoot_off.team_b_winner)
