"""Client for the scoring backend's /matches and skill lookup endpoints."""

import asyncio
from typing import Any, Callable, List, Optional

import requests

from .errors import FetchError, FormatError, HttpError, NetworkUnreachable
from .logger import get_logger
from .retry import exponential_backoff
from .schema import Entity, RawMatch, extract_matches

logger = get_logger()

DEFAULT_TIMEOUT = 15


class MatchFetcher:
    """
    One fetcher per backend. `load` is a single attempt; `load_with_retry`
    wraps it in the exponential backoff policy.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 3,
        base_delay: float = 1.0,
        session: Optional[requests.Session] = None,
        sleep: Optional[Callable] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.session = session or requests.Session()
        self._sleep = sleep

    @property
    def matches_url(self) -> str:
        return f"{self.base_url}/matches"

    def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        """GET a URL and decode JSON, mapping failures onto the fetch taxonomy."""
        try:
            resp = self.session.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise NetworkUnreachable(f"Unable to reach {url}: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise HttpError(resp.status_code, url)

        try:
            return resp.json()
        except ValueError as e:
            raise FormatError(f"Response from {url} is not valid JSON") from e

    def load(self) -> List[RawMatch]:
        """
        Fetch the raw match list once.

        Raises:
            NetworkUnreachable: No response from the backend
            HttpError: Non-2xx status
            FormatError: Body is not JSON or lacks a `matches` array
        """
        logger.record_fetch_attempt()
        try:
            matches = extract_matches(self._get_json(self.matches_url))
        except FetchError as e:
            logger.record_fetch_failure(type(e).__name__)
            logger.warning("Match fetch failed", url=self.matches_url, error=str(e))
            raise
        logger.debug("Raw data received", url=self.matches_url, count=len(matches))
        return matches

    async def load_async(self) -> List[RawMatch]:
        return await asyncio.to_thread(self.load)

    async def load_with_retry(self) -> List[RawMatch]:
        """
        Fetch with retries. Raises RetryError once every attempt has failed;
        its `last_exception` is the final FetchError.
        """
        def on_retry(attempt, exc, delay):
            logger.info(
                f"Retrying in {delay:g} seconds...",
                attempt=attempt + 1,
                of=self.max_retries + 1,
                error=str(exc),
            )

        retried = exponential_backoff(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            exceptions=(FetchError,),
            on_retry=on_retry,
            sleep=self._sleep,
        )(self.load_async)
        return await retried()

    def lookup_skill(self, skill: str) -> List[Entity]:
        """
        Freelancers the backend reports as having `skill`. Not retried.

        Raises:
            FetchError: On any transport, status or format problem
        """
        url = f"{self.base_url}/freelancers_with_skill"
        data = self._get_json(url, params={"skill": skill})
        if not isinstance(data, list):
            raise FormatError("Skill lookup did not return a list")
        return data

    async def lookup_skill_async(self, skill: str) -> List[Entity]:
        return await asyncio.to_thread(self.lookup_skill, skill)
