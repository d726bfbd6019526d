from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from marketoracle.config import settings
from marketoracle.data_providers.coingecko import CoinGeckoClient
from marketoracle.data_providers.twelve_data import TwelveDataClient

logger = logging.getLogger(__name__)


class AssetClass(str, Enum):
    EQUITY = "equity"
    CRYPTO = "crypto"


class PriceProvider(Protocol):
    async def get_price(self, symbol: str, asset_class: str) -> float | None: ...


class BatchPriceProvider(PriceProvider, Protocol):
    async def get_prices(self, symbols: list[str]) -> dict[str, float]: ...


@dataclass
class PriceLookup:
    prices: dict[str, float] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)

    def get(self, symbol: str) -> float | None:
        return self.prices.get(symbol.upper())


def partition_symbols(requests: Iterable[tuple[str, str]]) -> tuple[list[str], list[str]]:
    """Split (symbol, asset_class) pairs into deduplicated equity and crypto symbol lists."""
    equities: dict[str, None] = {}
    cryptos: dict[str, None] = {}
    for symbol, asset_class in requests:
        key = symbol.strip().upper()
        if not key:
            continue
        if asset_class == AssetClass.CRYPTO.value:
            cryptos[key] = None
        else:
            equities[key] = None
    return list(equities), list(cryptos)


class PriceResolver:
    def __init__(
        self,
        equity_provider: PriceProvider | None = None,
        crypto_provider: BatchPriceProvider | None = None,
        equity_delay_seconds: float | None = None,
    ) -> None:
        self.equity_provider = equity_provider or TwelveDataClient()
        self.crypto_provider = crypto_provider or CoinGeckoClient()
        self.equity_delay_seconds = (
            settings.equity_request_delay_seconds if equity_delay_seconds is None else equity_delay_seconds
        )

    async def _equity_prices(self, symbols: list[str]) -> dict[str, float]:
        prices: dict[str, float] = {}
        for i, symbol in enumerate(symbols):
            try:
                price = await self.equity_provider.get_price(symbol, AssetClass.EQUITY.value)
            except Exception as exc:
                logger.warning("equity price lookup failed: symbol=%s error=%s", symbol, exc)
                price = None
            if price is not None and price > 0:
                prices[symbol] = float(price)
            if i < len(symbols) - 1 and self.equity_delay_seconds > 0:
                await asyncio.sleep(self.equity_delay_seconds)
        return prices

    async def _crypto_prices(self, symbols: list[str]) -> dict[str, float]:
        if not symbols:
            return {}
        try:
            found = await self.crypto_provider.get_prices(symbols)
        except Exception as exc:
            logger.warning("crypto batch price lookup failed: symbols=%s error=%s", len(symbols), exc)
            return {}
        return {s.upper(): float(p) for s, p in found.items() if p is not None and p > 0}

    async def resolve(self, requests: Iterable[tuple[str, str]]) -> PriceLookup:
        equities, cryptos = partition_symbols(requests)
        equity_prices, crypto_prices = await asyncio.gather(
            self._equity_prices(equities),
            self._crypto_prices(cryptos),
        )
        lookup = PriceLookup(prices={**equity_prices, **crypto_prices})
        lookup.missing = [s for s in [*equities, *cryptos] if s not in lookup.prices]
        logger.info(
            "price resolution complete: equities=%s cryptos=%s priced=%s missing=%s",
            len(equities),
            len(cryptos),
            len(lookup.prices),
            len(lookup.missing),
        )
        return lookup
