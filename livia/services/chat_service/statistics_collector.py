"""
Statistics Collector Module

Timing and size metrics for one chat exchange: time to the first streamed
fragment, total time, and how much text came back.
"""

import time
from typing import Dict, Any, Optional


class StatisticsCollector:
    """
    Collector for timing statistics during a chat exchange.

    Attributes:
        start_time (float): Timestamp when the request was issued
        first_fragment_time (float): Timestamp of the first content fragment
        end_time (float): Timestamp when the exchange finished
        fragments (int): Number of content fragments received
        characters (int): Number of content characters received
    """

    def __init__(self):
        self.start_time: Optional[float] = None
        self.first_fragment_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.fragments = 0
        self.characters = 0

    def start_timing(self):
        self.start_time = time.time()

    def mark_fragment(self, fragment: str):
        if self.first_fragment_time is None:
            self.first_fragment_time = time.time()
        self.fragments += 1
        self.characters += len(fragment)

    def mark_complete(self, text: Optional[str] = None):
        """Close the measurement; buffered exchanges pass their full text."""
        self.end_time = time.time()
        if text is not None and self.fragments == 0:
            self.fragments = 1
            self.characters = len(text)
            self.first_fragment_time = self.end_time

    def get_statistics(self) -> Dict[str, Any]:
        """
        Returns:
            Dict[str, Any]: time_to_first_fragment_ms, total_time_ms,
            fragments, characters, characters_per_sec. Empty dict if
            start_timing() was never called.
        """
        if not self.start_time:
            return {}

        end_time = self.end_time or time.time()
        total_time = end_time - self.start_time
        ttff = self.first_fragment_time - self.start_time if self.first_fragment_time else None

        return {
            "time_to_first_fragment_ms": int(ttff * 1000) if ttff is not None else None,
            "total_time_ms": int(total_time * 1000),
            "fragments": self.fragments,
            "characters": self.characters,
            "characters_per_sec": round(self.characters / total_time, 2) if total_time > 0 else 0,
        }
