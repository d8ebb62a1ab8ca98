"""
Static translation tree loader.

Fetches ``GET /locales/{lang}/ui.json`` with httpx. This is the only
asynchronous, and the only cancellable, operation of the localization engine.

Last request wins: issuing a request cancels the in-flight one, and every
request carries a sequence number so a response that still arrives for a
superseded language is discarded rather than applied.
"""

import asyncio
import logging
from typing import Callable, List, Optional

import httpx

from langconf.settings import LocaleSettings, get_current_settings

logger = logging.getLogger(__name__)


class TranslationFetchFailure(Exception):
    """Network or parse error while fetching a static tree."""


class StaticTreeLoader:
    """Loads static translation trees over HTTP.

    Args:
        base_url: Origin the locale files are served from.
        client: Shared ``httpx.AsyncClient``; one is created (and owned) when omitted.
        settings: Locale settings; the thread's current settings by default.
    """

    def __init__(self, base_url: str = '', client: Optional[httpx.AsyncClient] = None,
                 settings: Optional[LocaleSettings] = None):
        self.base_url = base_url
        self._settings = settings or get_current_settings()
        self._client = client
        self._owns_client = client is None
        self._task: Optional[asyncio.Task] = None
        self._sequence = 0
        # Callbacks receive (lang, tree); tree is None when the fetch failed
        self._on_loaded_callbacks: List[Callable[[str, Optional[dict]], None]] = []

    def add_loaded_callback(self, callback: Callable[[str, Optional[dict]], None]) -> None:
        if callback not in self._on_loaded_callbacks:
            self._on_loaded_callbacks.append(callback)

    def remove_loaded_callback(self, callback: Callable[[str, Optional[dict]], None]) -> None:
        if callback in self._on_loaded_callbacks:
            self._on_loaded_callbacks.remove(callback)

    def _fire_loaded(self, lang: str, tree: Optional[dict]) -> None:
        for callback in list(self._on_loaded_callbacks):
            try:
                callback(lang, tree)
            except Exception as e:
                logger.warning(f"Error in loaded callback: {e}")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self._settings.fetch_timeout)
        return self._client

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def fetch(self, lang: str) -> dict:
        """Fetch the static tree for ``lang``.

        A missing file or any non-success status is an empty tree, not an error.

        Raises:
            TranslationFetchFailure: transport error or a body that is not JSON.
        """
        url = self._settings.locale_url(lang)
        try:
            response = await self._get_client().get(url)
        except httpx.HTTPError as e:
            raise TranslationFetchFailure(f"Fetching {url} failed: {e}") from e

        logger.debug(f"🌐 Static tree fetch for {lang}: status {response.status_code}")
        if not response.is_success:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise TranslationFetchFailure(f"{url} is not valid JSON: {e}") from e
        return data if isinstance(data, dict) else {}

    def request(self, lang: str) -> Optional[asyncio.Task]:
        """Start loading ``lang``, aborting any in-flight request first.

        Returns:
            The load task, or None when no event loop is running (the caller
            can await ``fetch`` directly instead).
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, static tree for {lang} not requested")
            return None

        self.cancel()
        self._sequence += 1
        self._task = loop.create_task(self._load(lang, self._sequence))
        return self._task

    async def _load(self, lang: str, sequence: int) -> Optional[dict]:
        try:
            tree = await self.fetch(lang)
        except asyncio.CancelledError:
            logger.debug(f"Static tree request for {lang} aborted")
            raise
        except TranslationFetchFailure as e:
            logger.warning(f"Static tree for {lang} unavailable, using inline translations only: {e}")
            tree = None

        if sequence != self._sequence:
            logger.debug(f"Discarding superseded static tree response for {lang}")
            return None
        logger.info(f"🌐 Static tree loaded for {lang}: {len(tree or {})} top-level keys")
        self._fire_loaded(lang, tree)
        return tree

    def cancel(self) -> None:
        """Abort the in-flight request, if any."""
        if self.in_flight:
            self._task.cancel()

    async def wait(self) -> Optional[dict]:
        """Wait for the latest request; None if it was aborted or superseded."""
        if self._task is None:
            return None
        try:
            return await self._task
        except asyncio.CancelledError:
            return None

    async def aclose(self) -> None:
        self.cancel()
        await self.wait()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
