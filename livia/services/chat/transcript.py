"""
Caller-visible transcript of exchanges.

Unlike ConversationHistory, the transcript also keeps failed and cancelled
exchanges together with their error text, so a client can offer to
regenerate them.
"""
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional


@dataclass
class Exchange:
    user_text: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    response_text: str = ""
    error: Optional[str] = None
    error_code: Optional[str] = None
    in_progress: bool = True
    created_at: float = field(default_factory=time.time)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def append(self, fragment: str):
        self.response_text += fragment

    def complete(self, response_text: str):
        self.response_text = response_text
        self.in_progress = False

    def fail(self, message: str, code: str):
        self.error = message
        self.error_code = code
        self.in_progress = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_text": self.user_text,
            # display text is trimmed, the committed history keeps the raw text
            "response_text": self.response_text.strip(),
            "error": self.error,
            "error_code": self.error_code,
            "in_progress": self.in_progress,
            "created_at": self.created_at,
        }


class Transcript:
    def __init__(self, greeting: Optional[str] = None, max_entries: int = 200):
        self.greeting = greeting
        self.max_entries = max_entries
        self._exchanges: List[Exchange] = []
        self._lock = threading.Lock()

    def start(self, user_text: str) -> Exchange:
        exchange = Exchange(user_text=user_text)
        with self._lock:
            self._exchanges.append(exchange)
            self._trim()
        return exchange

    def _trim(self):
        # oldest finished rows go first, rows still in flight are never dropped
        excess = len(self._exchanges) - self.max_entries
        if excess <= 0:
            return
        kept = []
        for exchange in self._exchanges:
            if excess > 0 and not exchange.in_progress:
                excess -= 1
                continue
            kept.append(exchange)
        self._exchanges = kept

    def clear(self) -> int:
        """Drop every finished row and return how many were removed."""
        with self._lock:
            kept = [exchange for exchange in self._exchanges if exchange.in_progress]
            removed = len(self._exchanges) - len(kept)
            self._exchanges = kept
        return removed

    def get(self, exchange_id: str) -> Optional[Exchange]:
        with self._lock:
            for exchange in self._exchanges:
                if exchange.id == exchange_id:
                    return exchange
        return None

    def remove(self, exchange_id: str) -> Optional[Exchange]:
        with self._lock:
            for index, exchange in enumerate(self._exchanges):
                if exchange.id == exchange_id:
                    return self._exchanges.pop(index)
        return None

    def last(self) -> Optional[Exchange]:
        with self._lock:
            return self._exchanges[-1] if self._exchanges else None

    def entries(self) -> List[Exchange]:
        with self._lock:
            return list(self._exchanges)

    def __len__(self) -> int:
        with self._lock:
            return len(self._exchanges)

    def to_list(self) -> List[Dict[str, Any]]:
        return [exchange.to_dict() for exchange in self.entries()]
