"""
Chat Session Module

ChatSession owns one conversation with an OpenAI-compatible chat-completion
endpoint:
- builds requests from the system prompt, a budget-trimmed history and the
  new user message
- streams (`stream=true`) or buffers (`stream=false`) the reply
- commits the user/assistant pair to history only after a successful reply
- records every exchange, failed ones included, in a caller-visible transcript
  that supports retrying a failed exchange

Sends on one session are expected to be serialized by the caller.
"""

import asyncio
from typing import Any, AsyncGenerator, Dict, List, Optional

import httpx

from ...core.config_manager import ConfigManager
from ...core.error_handling import ErrorHandler, ErrorContext, ErrorType
from ...core.exceptions import ChatError
from ...core.logging import logger
from ..chat.credential_cache import CredentialCache
from ..chat.history import ConversationHistory
from ..chat.models import ChatMessage
from ..chat.stream_parser import StreamLineParser
from ..chat.transcript import Exchange, Transcript
from .statistics_collector import StatisticsCollector

DEFAULT_MAX_INPUT_CHARS = 40000
DEFAULT_HISTORY_BUDGET_CHARS = 16000 * 4
CANCELLED_MESSAGE = "Request cancelled"
CANCELLED_CODE = "cancelled"
DEFAULT_MAX_TRANSCRIPT_ENTRIES = 200


class ExchangeStream:
    """
    Async iterator over the content fragments of one streaming exchange.

    `exchange` is the transcript row, available before iteration starts.
    Iteration raises a ChatError subclass if the exchange fails.
    """

    def __init__(self, exchange: Exchange, generator: AsyncGenerator[str, None]):
        self.exchange = exchange
        self._generator = generator

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        return await self._generator.__anext__()

    async def aclose(self):
        await self._generator.aclose()
        # closing a stream that never started leaves the row open
        if self.exchange.in_progress:
            self.exchange.fail(CANCELLED_MESSAGE, CANCELLED_CODE)

    async def collect(self) -> str:
        """Drain the stream and return the full reply text."""
        return "".join([fragment async for fragment in self])


class ChatSession:
    """
    Bounded conversation with a chat-completion endpoint.

    Attributes:
        client (httpx.AsyncClient): shared HTTP client
        credentials (CredentialCache): bearer token source, single-flight
        history (ConversationHistory): committed user/assistant messages
        transcript (Transcript): every exchange as the caller sees it
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        credentials: CredentialCache,
        endpoint: str,
        model: str = "gpt-4o",
        temperature: float = 0.65,
        system_prompt: str = "",
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
        history_budget_chars: int = DEFAULT_HISTORY_BUDGET_CHARS,
        timeouts: Optional[Dict[str, float]] = None,
        greeting: Optional[str] = None,
        max_transcript_entries: int = DEFAULT_MAX_TRANSCRIPT_ENTRIES,
    ):
        self.client = client
        self.credentials = credentials
        self.endpoint = endpoint
        self.model = model
        self.temperature = temperature
        self.system_message = ChatMessage.system(system_prompt)
        self.max_input_chars = max_input_chars
        self.history = ConversationHistory(history_budget_chars)
        self.transcript = Transcript(greeting=greeting, max_entries=max_transcript_entries)

        timeouts = timeouts or {}
        self.timeout = httpx.Timeout(
            connect=timeouts.get("connect", 10.0),
            read=timeouts.get("read", 60.0),
            write=timeouts.get("write", 10.0),
            pool=timeouts.get("pool", 10.0),
        )

    @classmethod
    def from_config(cls, config_manager: ConfigManager, client: httpx.AsyncClient, credentials: CredentialCache) -> "ChatSession":
        chat = config_manager.chat
        return cls(
            client=client,
            credentials=credentials,
            endpoint=chat["endpoint"],
            model=chat["model"],
            temperature=float(chat["temperature"]),
            system_prompt=chat["system_prompt"],
            max_input_chars=int(chat["max_input_chars"]),
            history_budget_chars=int(chat["history_budget_chars"]),
            timeouts=chat.get("timeouts"),
            greeting=chat.get("greeting"),
            max_transcript_entries=int(chat.get("max_transcript_entries", DEFAULT_MAX_TRANSCRIPT_ENTRIES)),
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def send_streaming(self, user_text: str) -> ExchangeStream:
        """
        Start a streaming exchange.

        Returns an ExchangeStream yielding content fragments in arrival order.
        On normal end of the stream the concatenated reply is committed to
        history together with the user message. Any failure raises a
        ChatError from the iteration and leaves history untouched.

        Raises:
            EmptyMessageError: user_text is empty or whitespace
        """
        self._check_not_empty(user_text)
        exchange = self.transcript.start(user_text)
        return ExchangeStream(exchange, self._stream(exchange))

    async def send_buffered(self, user_text: str) -> str:
        """Send with `stream=false` and return the complete reply."""
        exchange = await self.send_buffered_exchange(user_text)
        return exchange.response_text

    async def send_buffered_exchange(self, user_text: str) -> Exchange:
        """
        Same as send_buffered, but returns the completed transcript row.

        Callers that share a session use the row to report which exchange
        the reply belongs to.
        """
        self._check_not_empty(user_text)
        exchange = self.transcript.start(user_text)
        await self._complete(exchange)
        return exchange

    def retry(self, exchange_id: str) -> ExchangeStream:
        """
        Resend the user text of a failed exchange as a new streaming exchange.

        The failed row is removed from the transcript. History needs no change
        because the failed exchange was never committed.
        """
        failed = self._take_failed_exchange(exchange_id)
        return self.send_streaming(failed.user_text)

    async def retry_buffered(self, exchange_id: str) -> str:
        exchange = await self.retry_buffered_exchange(exchange_id)
        return exchange.response_text

    async def retry_buffered_exchange(self, exchange_id: str) -> Exchange:
        failed = self._take_failed_exchange(exchange_id)
        return await self.send_buffered_exchange(failed.user_text)

    def clear_history(self):
        """Drop all committed messages. Requests already in flight still commit."""
        self.history.clear()
        logger.info("Conversation history cleared", component="chat_session")

    def clear_transcript(self) -> int:
        """Drop finished transcript rows; rows of exchanges in flight stay."""
        removed = self.transcript.clear()
        logger.info("Transcript cleared", component="chat_session", removed=removed)
        return removed

    def build_messages(self, user_text: str) -> List[ChatMessage]:
        return self.history.build_messages(self.system_message, user_text)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _context(self, exchange: Exchange) -> ErrorContext:
        return ErrorContext(
            request_id=exchange.id,
            exchange_id=exchange.id,
            component="chat_session",
            endpoint=self.endpoint
        )

    def _check_not_empty(self, user_text: str):
        if not user_text or not user_text.strip():
            raise ErrorHandler.handle_empty_message(ErrorContext(component="chat_session"))

    def _take_failed_exchange(self, exchange_id: str) -> Exchange:
        context = ErrorContext(request_id=exchange_id, exchange_id=exchange_id, component="chat_session")
        exchange = self.transcript.get(exchange_id)
        if exchange is None:
            raise ErrorHandler.handle_exchange_not_found(exchange_id, context)
        if not exchange.failed:
            raise ErrorHandler.handle_exchange_not_retryable(exchange_id, context)

        self.transcript.remove(exchange_id)
        logger.info("Retrying failed exchange", request_id=exchange_id, exchange_id=exchange_id, component="chat_session")
        return exchange

    async def _prepare(self, exchange: Exchange, stream: bool):
        """Size check, credential and request body, in that order."""
        context = self._context(exchange)
        length = len(exchange.user_text)
        if length > self.max_input_chars:
            raise ErrorHandler.handle_request_too_large(length, self.max_input_chars, context)

        if not self.credentials.has_token:
            logger.info("No cached credential, fetching before request", request_id=exchange.id, component="chat_session")
        token = await self.credentials.get_token(request_id=exchange.id)

        messages = self.build_messages(exchange.user_text)
        body = {
            "model": self.model,
            "temperature": self.temperature,
            "stream": stream,
            "messages": [message.to_dict() for message in messages],
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }

        logger.request(
            "Chat Completion Stream" if stream else "Chat Completion",
            request_id=exchange.id,
            model=self.model,
            exchange_id=exchange.id,
            messages_count=len(messages),
            history_messages=len(messages) - 2,
        )
        logger.debug_data(
            title="Chat Request Body",
            data=body,
            request_id=exchange.id,
            component="chat_session",
            data_flow="to_endpoint"
        )
        return headers, body

    def _bad_response(self, response: httpx.Response, context: ErrorContext) -> ChatError:
        if response.status_code == 401:
            self.credentials.invalidate()
        return ErrorHandler.handle_bad_response(response.status_code, response.text, context)

    def _commit(self, exchange: Exchange, response_text: str, statistics: StatisticsCollector):
        self.history.commit(exchange.user_text, response_text, system=self.system_message)
        exchange.complete(response_text)
        logger.response(
            "Chat Completion",
            request_id=exchange.id,
            exchange_id=exchange.id,
            processing_time_ms=statistics.get_statistics().get("total_time_ms"),
            statistics=statistics.get_statistics(),
            history_messages=len(self.history),
        )

    def _fail(self, exchange: Exchange, error: ChatError):
        error.exchange_id = exchange.id
        exchange.fail(error.message, error.error_code)

    def _fail_unexpected(self, exchange: Exchange, error: Exception):
        """Close the row of an exchange that died outside the ChatError taxonomy, so it can be retried."""
        message = ErrorType.INTERNAL_SERVER_ERROR.format_message(error_details=str(error) or type(error).__name__)
        exchange.fail(message, ErrorType.INTERNAL_SERVER_ERROR.code)
        logger.error(
            f"Chat exchange failed unexpectedly: {message}",
            exc_info=True,
            request_id=exchange.id,
            exchange_id=exchange.id,
            component="chat_session"
        )

    def _cancel(self, exchange: Exchange):
        exchange.fail(CANCELLED_MESSAGE, CANCELLED_CODE)
        logger.info("Chat exchange cancelled", request_id=exchange.id, exchange_id=exchange.id, component="chat_session")

    async def _stream(self, exchange: Exchange) -> AsyncGenerator[str, None]:
        statistics = StatisticsCollector()
        parser = StreamLineParser(request_id=exchange.id)
        fragments: List[str] = []
        context = self._context(exchange)

        try:
            headers, body = await self._prepare(exchange, stream=True)
            statistics.start_timing()
            try:
                async with self.client.stream("POST", self.endpoint, headers=headers, json=body, timeout=self.timeout) as response:
                    if not response.is_success:
                        # error body has to be read before it can be classified
                        await response.aread()
                        raise self._bad_response(response, context)

                    async for line in response.aiter_lines():
                        fragment = parser.feed(line)
                        if not fragment:
                            continue
                        fragments.append(fragment)
                        exchange.append(fragment)
                        statistics.mark_fragment(fragment)
                        yield fragment
            except httpx.RequestError as e:
                raise ErrorHandler.handle_transport_failure(e, context) from e
        except ChatError as e:
            self._fail(exchange, e)
            raise
        except (asyncio.CancelledError, GeneratorExit):
            self._cancel(exchange)
            raise
        except Exception as e:
            self._fail_unexpected(exchange, e)
            raise

        statistics.mark_complete()
        logger.debug_data(
            title="Stream Parser Statistics",
            data=parser.stats(),
            request_id=exchange.id,
            component="chat_session",
            data_flow="from_endpoint"
        )
        self._commit(exchange, "".join(fragments), statistics)

    async def _complete(self, exchange: Exchange) -> str:
        statistics = StatisticsCollector()
        context = self._context(exchange)

        try:
            headers, body = await self._prepare(exchange, stream=False)
            statistics.start_timing()
            try:
                response = await self.client.post(self.endpoint, headers=headers, json=body, timeout=self.timeout)
            except httpx.RequestError as e:
                raise ErrorHandler.handle_transport_failure(e, context) from e

            if not response.is_success:
                raise self._bad_response(response, context)

            response_text = self._decode_completion(response, context)
        except ChatError as e:
            self._fail(exchange, e)
            raise
        except asyncio.CancelledError:
            self._cancel(exchange)
            raise
        except Exception as e:
            self._fail_unexpected(exchange, e)
            raise

        statistics.mark_complete(response_text)
        self._commit(exchange, response_text, statistics)
        return response_text

    def _decode_completion(self, response: httpx.Response, context: ErrorContext) -> str:
        """Read choices[0].message.content from a buffered completion."""
        try:
            payload: Any = response.json()
        except ValueError as e:
            raise ErrorHandler.handle_decode_failure("response body is not JSON", context, e) from e

        logger.debug_data(
            title="Chat Response Body",
            data=payload,
            request_id=context.request_id,
            component="chat_session",
            data_flow="from_endpoint"
        )

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list):
            raise ErrorHandler.handle_decode_failure("missing 'choices' list", context)
        if not choices:
            return ""

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ErrorHandler.handle_decode_failure("missing 'choices[0].message.content'", context)
        return content
