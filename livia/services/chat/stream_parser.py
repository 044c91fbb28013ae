"""
Разбор строк потокового ответа chat completion
"""
import json
from typing import Optional

from .parsed_event import ParsedStreamEvent, SSE_DATA_PREFIX
from ...core.logging import logger


def parse_line(line: str) -> Optional[ParsedStreamEvent]:
    """
    Parse one line of the response body.

    Returns None for lines without the literal "data: " prefix (comments,
    `event:` fields, blank keep-alive lines). Lines whose payload is not a
    JSON object come back as an invalid event instead of raising.
    """
    if not line.startswith(SSE_DATA_PREFIX):
        return None

    payload = line[len(SSE_DATA_PREFIX):]
    event = ParsedStreamEvent(raw=line)
    if event.is_done:
        return event

    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, ValueError) as e:
        event.is_valid = False
        event.error = str(e)
        return event

    if not isinstance(data, dict):
        event.is_valid = False
        event.error = f"expected JSON object, got {type(data).__name__}"
        return event

    event.data = data
    return event


class StreamLineParser:
    """
    Extracts content fragments from stream lines and keeps counters for logging.

    Malformed lines are noise: they are counted and skipped, never raised.
    """

    def __init__(self, request_id: str = "unknown"):
        self.request_id = request_id
        self.lines_seen = 0
        self.events_seen = 0
        self.malformed_lines = 0
        self.fragments = 0
        self.finish_reason: Optional[str] = None

    def feed(self, line: str) -> str:
        """Return the content fragment carried by the line, or ""."""
        self.lines_seen += 1
        event = parse_line(line)
        if event is None:
            return ""

        self.events_seen += 1
        if not event.is_valid:
            self.malformed_lines += 1
            logger.debug(
                f"Skipping malformed stream line: {event.error}",
                request_id=self.request_id,
                component="stream_parser"
            )
            return ""

        if event.error_payload:
            logger.warning(
                f"Stream carried an error event: {event.error_payload.get('message', event.error_payload)}",
                request_id=self.request_id,
                component="stream_parser"
            )
            return ""

        if event.finish_reason:
            self.finish_reason = event.finish_reason

        content = event.content
        if content:
            self.fragments += 1
        return content

    def stats(self) -> dict:
        return {
            "lines_seen": self.lines_seen,
            "events_seen": self.events_seen,
            "malformed_lines": self.malformed_lines,
            "fragments": self.fragments,
            "finish_reason": self.finish_reason,
        }
