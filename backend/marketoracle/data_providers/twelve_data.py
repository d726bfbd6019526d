from __future__ import annotations

import logging
from typing import Any

import httpx

from marketoracle.config import settings

logger = logging.getLogger(__name__)


def parse_price(payload: dict[str, Any]) -> float | None:
    raw = payload.get("price")
    if raw is None:
        return None
    try:
        price = float(raw)
    except (TypeError, ValueError):
        return None
    return price if price > 0 else None


class TwelveDataClient:
    """Latest equity quotes from Twelve Data's /price endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.twelve_data_base_url).rstrip("/")
        self.api_key = settings.twelve_data_api_key if api_key is None else api_key
        self.timeout = settings.market_data_timeout_seconds
        self._transport = transport

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "apikey": self.api_key}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(f"{self.base_url}/{path.lstrip('/')}", params=params)
            response.raise_for_status()
            data = response.json()
        return data if isinstance(data, dict) else {}

    async def get_price(self, symbol: str, asset_class: str = "equity") -> float | None:
        if not self.api_key:
            return None
        payload = await self._get("price", {"symbol": symbol.upper()})
        if payload.get("status") == "error":
            logger.warning("twelve data rejected symbol=%s code=%s message=%s", symbol, payload.get("code"), payload.get("message"))
            return None
        return parse_price(payload)
