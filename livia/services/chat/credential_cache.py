"""
In-memory bearer token cache with single-flight fetching.
"""
import asyncio
from typing import Optional

from ...core.logging import logger
from ...core.error_handling import ErrorHandler, ErrorContext
from ...providers.base import BaseCredentialProvider


def _consume_exception(task: asyncio.Task):
    # Marks the failure as retrieved when every waiter was cancelled
    if not task.cancelled():
        task.exception()


class CredentialCache:
    """
    Holds the token for the process lifetime, never on disk.

    States: absent (no token, no fetch), fetching (one shared task) and
    present (token cached). Every caller that finds the slot absent or
    fetching awaits the same task, so the provider sees one call no matter
    how many requests race; they all get its token or all fail with
    NoCredentialError.
    """

    def __init__(self, provider: BaseCredentialProvider):
        self.provider = provider
        self._token: Optional[str] = None
        self._inflight: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self.fetch_count = 0

    @property
    def has_token(self) -> bool:
        return self._token is not None

    @property
    def is_fetching(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def get_token(self, request_id: str = "credential") -> str:
        """
        Return the cached token, fetching it first when absent.

        Raises:
            NoCredentialError: the shared fetch failed
        """
        async with self._lock:
            if self._token is not None:
                return self._token
            if self._inflight is None or self._inflight.done():
                self._inflight = asyncio.ensure_future(self._fetch())
                self._inflight.add_done_callback(_consume_exception)
            task = self._inflight

        try:
            # shield: a cancelled caller must not cancel the fetch others wait on
            return await asyncio.shield(task)
        except Exception as e:
            # any provider failure, LiviaError or not, surfaces as NoCredential
            raise ErrorHandler.handle_no_credential(
                ErrorContext(request_id=request_id, component="credential_cache"),
                original_exception=e
            ) from e

    async def _fetch(self) -> str:
        self.fetch_count += 1
        logger.info("Fetching chat credential", component="credential_cache", provider=self.provider.name)
        try:
            token = await self.provider.fetch()
            if not token:
                raise ErrorHandler.handle_credential_fetch_error(
                    error_details="provider returned an empty token",
                    context=ErrorContext(request_id="credential", component="credential_cache")
                )
            self._token = token
            logger.info("Chat credential fetched", component="credential_cache", provider=self.provider.name)
            return token
        finally:
            self._inflight = None

    def invalidate(self):
        """Forget the cached token so the next request fetches a new one."""
        if self._token is not None:
            logger.info("Chat credential invalidated", component="credential_cache")
        self._token = None
