"""Menu retrieval through ranked fallback tiers, and menu saving."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal

import httpx

from kassa.config import AppConfig
from kassa.data import BUNDLED_MENU
from kassa.errors import KassaError, NetworkFailure, Result, ShapeValidationError
from kassa.models import ItemId, MenuItem, MenuSnapshot
from kassa.normalizer import is_menu_payload, normalize
from kassa.persistence import KeyValueStore, read_cached_menu, write_cached_menu

logger = logging.getLogger(__name__)

MenuSource = Literal["primary", "cache", "static", "bundled"]
Tier = Callable[[], Awaitable[Result[MenuSnapshot]]]

LOCAL_SAVE_MESSAGE = "Menu was saved locally"


@dataclass(frozen=True)
class FetchOutcome:
    """Snapshot plus the tier that produced it."""

    snapshot: MenuSnapshot
    source: MenuSource


@dataclass(frozen=True)
class SaveResult:
    message: str
    snapshot: MenuSnapshot
    local_only: bool = False


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (ValueError, RecursionError):
        return None


def _error_message(payload: Any, default: str) -> str:
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return default


class MenuSync:
    """Talks to the remote menu store and falls back through cache, static and bundled menus."""

    def __init__(
        self,
        config: AppConfig,
        store: KeyValueStore,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=self.config.fetch_timeout_s,
            headers={"accept": "application/json"},
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request, cancelling it once the bounded wait runs out."""
        try:
            async with self._client() as client:
                return await asyncio.wait_for(
                    client.request(method, url, **kwargs),
                    timeout=self.config.fetch_timeout_s,
                )
        except asyncio.TimeoutError as exc:
            raise NetworkFailure(f"{method} {url} timed out after {self.config.fetch_timeout_s}s") from exc
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"{method} {url} failed: {exc}") from exc

    async def _fetch_document(self, url: str) -> MenuSnapshot:
        response = await self._request("GET", url)
        payload = _safe_json(response)
        if not response.is_success:
            raise NetworkFailure(_error_message(payload, f"Menu loading failed ({response.status_code})"))
        if not is_menu_payload(payload):
            raise ShapeValidationError(f"Invalid menu payload from {url}")
        return normalize(payload)

    # ----------------------------------------------------------------- tiers

    async def _remote_tier(self, url: str) -> Result[MenuSnapshot]:
        try:
            snapshot = await self._fetch_document(url)
        except KassaError as exc:
            return Result.fail(exc)
        except (ValueError, ArithmeticError, RecursionError) as exc:
            logger.warning("Unusable menu document from %s: %r", url, exc)
            return Result.fail(ShapeValidationError(f"Unusable menu document from {url}"))
        write_cached_menu(self.store, self.config.menu_cache_key, snapshot)
        return Result.ok(snapshot)

    async def _primary(self) -> Result[MenuSnapshot]:
        return await self._remote_tier(self.config.menu_url)

    async def _cache(self) -> Result[MenuSnapshot]:
        return read_cached_menu(self.store, self.config.menu_cache_key)

    async def _static(self) -> Result[MenuSnapshot]:
        return await self._remote_tier(self.config.static_menu_url)

    def tiers(self) -> list[tuple[MenuSource, Tier]]:
        return [
            ("primary", self._primary),
            ("cache", self._cache),
            ("static", self._static),
        ]

    async def fetch(self) -> FetchOutcome:
        """Try every tier in order; the bundled menu answers when all of them fail."""
        for source, attempt in self.tiers():
            result = await attempt()
            if result.is_ok and result.value is not None:
                logger.info("Menu loaded from %s tier: items=%d", source, len(result.value.items))
                return FetchOutcome(result.value, source)
            logger.warning("Menu %s tier failed: %s", source, result.error)
        return FetchOutcome(BUNDLED_MENU, "bundled")

    async def fetch_menu(self) -> MenuSnapshot:
        outcome = await self.fetch()
        return outcome.snapshot

    async def save_menu(self, items: list[MenuItem] | tuple[MenuItem, ...], active_order: list[ItemId] | tuple[ItemId, ...]) -> SaveResult:
        """Cache the menu locally, then push it to the remote store; never raises."""
        snapshot = normalize({"items": [item.to_dict() for item in items], "activeOrder": list(active_order)})
        write_cached_menu(self.store, self.config.menu_cache_key, snapshot)

        try:
            response = await self._request("PUT", self.config.menu_url, json=snapshot.to_dict())
            payload = _safe_json(response)
            if not response.is_success:
                raise NetworkFailure(_error_message(payload, f"Menu saving failed ({response.status_code})"))
        except NetworkFailure as exc:
            logger.warning("Menu save kept local only: %s", exc)
            return SaveResult(message=LOCAL_SAVE_MESSAGE, snapshot=snapshot, local_only=True)

        return SaveResult(message=_error_message(payload, "Menu updated"), snapshot=snapshot)
