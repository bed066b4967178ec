"""
Scoring of finished sessions and the terminal summary handed to the host.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, asdict
from enum import Enum
from urllib.parse import parse_qs, urlencode
import math


# Lower bound (inclusive) of each grade band, best first
GRADE_THRESHOLDS = (
    (500, "S"),
    (300, "A"),
    (200, "B"),
    (100, "C"),
)


class Grade(str, Enum):
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"

    def __str__(self) -> str:
        return self.value


def score(
    years_survived: int,
    final_volume: float,
    final_stability: float,
    final_thickness: float,
) -> int:
    """
    Weighted session score.

        score = floor(10 * years + volume / 100 + 5 * stability + thickness / 10)

    floored at 0.

    Parameters
    ----------
    years_survived : int
        Simulated years elapsed before the session ended.
    final_volume : float
        Ice volume at the end of the session.
    final_stability : float
        Stability (0-100) at the end of the session.
    final_thickness : float
        Thickness (m) at the end of the session.

    Returns
    -------
    int
        Non-negative integer score.
    """
    raw = (
        years_survived * 10
        + final_volume / 100
        + final_stability * 5
        + final_thickness / 10
    )
    return max(0, math.floor(raw))


def grade(points: int) -> Grade:
    """Map a score to a letter grade (lower band bounds inclusive)."""
    for threshold, letter in GRADE_THRESHOLDS:
        if points >= threshold:
            return Grade(letter)
    return Grade.D


@dataclass(frozen=True)
class TerminalSummary:
    """
    Plain key-value summary of a finished session.

    Attributes
    ----------
    glacier_name : str
        Name of the glacier played.
    outcome : str
        ``"collapsed"`` or ``"survived"``.
    year : int
        Calendar year at the end of the session.
    years_survived : int
        Years elapsed since the epoch.
    final_volume, final_stability, final_thickness : float
        Final physical readings.
    score : int
        Result of :func:`score`.
    grade : str
        Result of :func:`grade`.
    """

    glacier_name: str
    outcome: str
    year: int
    years_survived: int
    final_volume: float
    final_stability: float
    final_thickness: float
    score: int
    grade: str

    @classmethod
    def build(
        cls,
        glacier_name: str,
        outcome: str,
        year: int,
        epoch: int,
        final_volume: float,
        final_stability: float,
        final_thickness: float,
    ) -> "TerminalSummary":
        years = year - epoch
        points = score(years, final_volume, final_stability, final_thickness)
        return cls(
            glacier_name=glacier_name,
            outcome=outcome,
            year=year,
            years_survived=years,
            final_volume=final_volume,
            final_stability=final_stability,
            final_thickness=final_thickness,
            score=points,
            grade=grade(points).value,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_leaderboard_entry(self) -> Dict[str, Any]:
        """Payload for the leaderboard sink (integer readings)."""
        return {
            "glacierName": self.glacier_name,
            "yearsSurvived": self.years_survived,
            "finalIceVolume": math.floor(self.final_volume),
            "finalStability": math.floor(self.final_stability),
            "finalThickness": math.floor(self.final_thickness),
            "score": self.score,
        }

    def to_query_string(self) -> str:
        """URL-encoded payload for routing to the results view."""
        return urlencode({
            "outcome": self.outcome,
            "year": self.year,
            "glacier": self.glacier_name,
            "volume": self.final_volume,
            "stability": self.final_stability,
            "thickness": self.final_thickness,
        })

    @classmethod
    def from_query_string(cls, query: str, epoch: int = 2024) -> "TerminalSummary":
        """
        Rebuild a summary from :meth:`to_query_string` output.

        Score and grade are recomputed, never trusted from the query.
        Missing readings default to 0, a missing glacier name to
        ``"Unknown Glacier"``.
        """
        params = parse_qs(query.lstrip("?"))

        def first(key: str, default: Optional[str] = None) -> Optional[str]:
            values = params.get(key)
            return values[0] if values else default

        year_text = first("year")
        if year_text is None:
            raise ValueError("Results query is missing 'year'")

        return cls.build(
            glacier_name=first("glacier", "Unknown Glacier"),
            outcome=first("outcome", "survived"),
            year=int(float(year_text)),
            epoch=epoch,
            final_volume=float(first("volume", "0")),
            final_stability=float(first("stability", "0")),
            final_thickness=float(first("thickness", "0")),
        )
