"""
Conversation history with a character budget.
"""
import threading
from typing import List, Sequence

from .models import ChatMessage


def content_length(messages: Sequence[ChatMessage]) -> int:
    """Total number of characters across message contents."""
    return sum(len(message.content) for message in messages)


class ConversationHistory:
    """
    Ordered user/assistant messages of one session, oldest first.

    The list is only changed by commit() and clear(). Building a request never
    mutates it, so a failed exchange leaves the history exactly as it was.
    """

    def __init__(self, budget_chars: int):
        if budget_chars <= 0:
            raise ValueError("budget_chars must be positive")
        self.budget_chars = budget_chars
        self._messages: List[ChatMessage] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def snapshot(self) -> List[ChatMessage]:
        with self._lock:
            return list(self._messages)

    def content_length(self) -> int:
        with self._lock:
            return content_length(self._messages)

    def build_messages(self, system: ChatMessage, user_text: str) -> List[ChatMessage]:
        """
        Assemble [system] + history + [user] within the budget.

        Oldest history entries are dropped from the outgoing list one at a time
        until the total fits. The system message and the new user message are
        never dropped; when history runs out and the total is still over budget
        the request is sent as is.
        """
        user = ChatMessage.user(user_text)
        with self._lock:
            window = list(self._messages)

        fixed = len(system.content) + len(user.content)
        total = fixed + content_length(window)
        start = 0
        while total > self.budget_chars and start < len(window):
            total -= len(window[start].content)
            start += 1

        return [system] + window[start:] + [user]

    def commit(self, user_text: str, assistant_text: str, system: ChatMessage = None):
        """
        Append one completed exchange as a single atomic update.

        With a system message given, the stored history also sheds its oldest
        entries until system + history fits the budget, keeping memory bounded.
        """
        with self._lock:
            self._messages.append(ChatMessage.user(user_text))
            self._messages.append(ChatMessage.assistant(assistant_text))

            if system is not None:
                total = len(system.content) + content_length(self._messages)
                drop = 0
                while total > self.budget_chars and drop < len(self._messages):
                    total -= len(self._messages[drop].content)
                    drop += 1
                if drop:
                    del self._messages[:drop]

    def clear(self):
        with self._lock:
            self._messages.clear()
