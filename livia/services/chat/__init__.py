"""
Экспорт компонентов чат-сессии
"""

from .models import Role, ChatMessage
from .history import ConversationHistory, content_length
from .credential_cache import CredentialCache
from .parsed_event import ParsedStreamEvent
from .stream_parser import StreamLineParser, parse_line
from .transcript import Exchange, Transcript

__all__ = [
    'Role',
    'ChatMessage',
    'ConversationHistory',
    'content_length',
    'CredentialCache',
    'ParsedStreamEvent',
    'StreamLineParser',
    'parse_line',
    'Exchange',
    'Transcript'
]
