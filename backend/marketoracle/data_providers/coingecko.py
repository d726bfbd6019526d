from __future__ import annotations

from typing import Any

import httpx

from marketoracle.config import settings

COIN_IDS = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "AVAX": "avalanche-2",
    "MATIC": "matic-network",
    "LINK": "chainlink",
    "XRP": "ripple",
    "DOGE": "dogecoin",
    "ADA": "cardano",
    "DOT": "polkadot",
    "SHIB": "shiba-inu",
    "LTC": "litecoin",
    "UNI": "uniswap",
    "ATOM": "cosmos",
    "XLM": "stellar",
    "PEPE": "pepe",
}


class CoinGeckoClient:
    """USD spot prices for digital assets, one /simple/price call per batch."""

    def __init__(self, base_url: str | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = (base_url or settings.coingecko_base_url).rstrip("/")
        self.timeout = settings.market_data_timeout_seconds
        self._transport = transport

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(f"{self.base_url}/{path.lstrip('/')}", params=params)
            response.raise_for_status()
            data = response.json()
        return data if isinstance(data, dict) else {}

    async def get_prices(self, symbols: list[str]) -> dict[str, float]:
        coin_by_symbol = {s.upper(): COIN_IDS[s.upper()] for s in symbols if s.upper() in COIN_IDS}
        if not coin_by_symbol:
            return {}

        data = await self._get(
            "simple/price",
            {"ids": ",".join(sorted(set(coin_by_symbol.values()))), "vs_currencies": "usd"},
        )
        prices: dict[str, float] = {}
        for symbol, coin_id in coin_by_symbol.items():
            usd = (data.get(coin_id) or {}).get("usd")
            if isinstance(usd, (int, float)) and usd > 0:
                prices[symbol] = float(usd)
        return prices

    async def get_price(self, symbol: str, asset_class: str = "crypto") -> float | None:
        return (await self.get_prices([symbol])).get(symbol.upper())
