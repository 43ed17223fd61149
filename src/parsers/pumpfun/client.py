"""Pump.fun migrations API client for the newest migrated coins (bearer auth)."""

import asyncio

import httpx
from loguru import logger

from src.parsers.pumpfun.exceptions import (
    PumpfunAuthError,
    PumpfunFetchError,
    PumpfunResponseError,
)

BASE_URL = "https://api.pump.fun"
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]


class PumpfunClient:
    """Async HTTP client for the Pump.fun migrations feed."""

    def __init__(self, api_key: str, base_url: str = BASE_URL, timeout: float = 10.0) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def get_migrations(self, limit: int = 10) -> list[dict]:
        """Fetch the latest migrated coins, most recent first.

        Raises PumpfunFetchError (or a subclass) when the feed is unreachable,
        rejects the key, or returns something other than ``{"data": [...]}``.
        """
        params = {"limit": limit, "sort": "desc"}

        for attempt in range(MAX_RETRIES + 1):
            try:
                resp = await self._client.get("/migrations", params=params)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[PUMPFUN] {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise PumpfunFetchError(f"migrations unreachable: {type(e).__name__}: {e}") from e
            except httpx.HTTPError as e:
                raise PumpfunFetchError(f"migrations request failed: {e}") from e

            if resp.status_code == 429:
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[PUMPFUN] Rate limited, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise PumpfunFetchError("migrations rate limited")

            if resp.status_code in (401, 403):
                raise PumpfunAuthError(f"HTTP {resp.status_code}: API key rejected")

            if resp.status_code != 200:
                raise PumpfunFetchError(f"HTTP {resp.status_code}: {resp.text[:200]}")

            return _parse_migrations(resp)

        raise PumpfunFetchError("migrations retries exhausted")


def _parse_migrations(resp: httpx.Response) -> list[dict]:
    """Extract the ``data`` array, dropping entries that are not objects."""
    try:
        payload = resp.json()
    except ValueError as e:
        raise PumpfunResponseError(f"body is not JSON: {e}") from e

    if not isinstance(payload, dict):
        raise PumpfunResponseError("top-level response is not an object")

    data = payload.get("data")
    if not isinstance(data, list):
        raise PumpfunResponseError("response has no 'data' array")

    return [item for item in data if isinstance(item, dict)]
