"""In-memory data models for derived tournament views."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RankingData:
    """Standing of one team, aggregated from completed group matches."""
    team_id: int
    team_name: str
    matches_played: int = 0
    wins: int = 0
    match_points: int = 0
    total_arrow_score: int = 0
    total_x10s: int = 0
    total_arrows_shot: float = 0.0
    arrow_average: float = 0.0


@dataclass
class MedalTable:
    """Final placings once the medal matches are decided."""
    gold: Optional[int] = None
    silver: Optional[int] = None
    bronze: Optional[int] = None
    fourth: Optional[int] = None

    def team_ids(self) -> List[Optional[int]]:
        return [self.gold, self.silver, self.bronze, self.fourth]


@dataclass
class SetInProgress:
    """Arrows entered for a set that has not been saved yet."""
    team_a_arrows: List = field(default_factory=list)
    team_b_arrows: List = field(default_factory=list)
