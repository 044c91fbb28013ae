"""
Chat Service Package

Modules:
- statistics_collector: timing metrics for one exchange
- chat_session: the conversation itself (history, budget, streaming and
  buffered requests, retry)

Usage:
    from livia.services.chat_service import ChatSession

    session = ChatSession.from_config(config_manager, httpx_client, credentials)
    async for fragment in session.send_streaming("What is a pulsar?"):
        print(fragment, end="")
"""

from .statistics_collector import StatisticsCollector
from .chat_session import ChatSession, ExchangeStream

__all__ = [
    "StatisticsCollector",
    "ChatSession",
    "ExchangeStream"
]
