"""
In-memory leaderboard sink for finished sessions.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from pathlib import Path
import logging

from glaciersim.core.scoring import TerminalSummary

logger = logging.getLogger(__name__)


ENTRY_FIELDS = (
    "glacierName",
    "yearsSurvived",
    "finalIceVolume",
    "finalStability",
    "finalThickness",
    "score",
)


class Leaderboard:
    """
    Collects leaderboard entries and ranks them by score.

    Entries use the external payload keys (``glacierName``,
    ``yearsSurvived``, ...) plus a ``playedAt`` ISO timestamp.
    """

    def __init__(self, entries: Optional[List[Dict[str, Any]]] = None):
        self.entries: List[Dict[str, Any]] = list(entries or [])

    def submit(self, entry: Dict[str, Any] | TerminalSummary) -> Dict[str, Any]:
        """
        Add one entry.

        Raises
        ------
        ValueError
            If a required field is missing.
        """
        if isinstance(entry, TerminalSummary):
            entry = entry.to_leaderboard_entry()

        missing = [key for key in ENTRY_FIELDS if key not in entry]
        if missing:
            raise ValueError(f"Leaderboard entry missing fields: {missing}")

        stored = {key: entry[key] for key in ENTRY_FIELDS}
        stored["playedAt"] = entry.get("playedAt") or datetime.now(timezone.utc).isoformat()
        self.entries.append(stored)

        logger.info(f"Leaderboard: {stored['glacierName']} scored {stored['score']}")
        return stored

    def top(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Best entries first."""
        return sorted(self.entries, key=lambda e: e["score"], reverse=True)[:limit]

    def to_csv(self, filepath: str | Path) -> None:
        import pandas as pd

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(self.entries, columns=list(ENTRY_FIELDS) + ["playedAt"]).to_csv(
            filepath, index=False
        )
        logger.info(f"Leaderboard written: {len(self.entries)} entries to {filepath}")

    @classmethod
    def from_csv(cls, filepath: str | Path) -> "Leaderboard":
        import pandas as pd

        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Leaderboard file not found: {filepath}")
        df = pd.read_csv(filepath)
        return cls(df.to_dict("records"))

    def __len__(self) -> int:
        return len(self.entries)
