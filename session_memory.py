# session_memory.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from logging_utils import utc_timestamp
from terminal_ui import format_number

# Same cap as the browser client's history panel.
MAX_HISTORY_ENTRIES = 50
RECENT_ENTRIES_LIMIT = 10


@dataclass
class HistoryEntry:
    expression: str
    result: float
    timestamp: str = field(default_factory=utc_timestamp)


@dataclass
class CalculationHistory:
    """
    Rolling, per-session list of successful calculations, newest first.
    """
    entries: List[HistoryEntry] = field(default_factory=list)
    max_entries: int = MAX_HISTORY_ENTRIES

    def add(self, expression: str, result: float) -> HistoryEntry:
        entry = HistoryEntry(expression=expression, result=result)
        self.entries.insert(0, entry)
        del self.entries[self.max_entries:]
        return entry

    def clear(self) -> None:
        self.entries.clear()

    def latest(self) -> Optional[HistoryEntry]:
        return self.entries[0] if self.entries else None

    def build_history_block(self, limit: int = RECENT_ENTRIES_LIMIT) -> str:
        """
        Human-readable list of the last `limit` calculations, for the CLI
        `!history` command.
        """
        lines = [
            f"{i}. {e.expression} = {format_number(e.result)}"
            for i, e in enumerate(self.entries[:limit], start=1)
        ]
        return "\n".join(lines)


# Global, per-process history instance
_global_history: CalculationHistory | None = None


def get_calculation_history() -> CalculationHistory:
    global _global_history
    if _global_history is None:
        _global_history = CalculationHistory()
    return _global_history


def reset_calculation_history() -> None:
    global _global_history
    _global_history = CalculationHistory()
