"""Shared market query used by every view, with one normalization rule."""

from __future__ import annotations

import logging

from .market_client import MarketAPIClient
from .models import Market


class MarketRepository:
    """Fetches the market collection and enforces unique ``marketId`` values."""

    def __init__(self, client: MarketAPIClient, logger: logging.Logger) -> None:
        self.client = client
        self.logger = logger

    def fetch_all(self, authenticated: bool = True) -> list[Market]:
        markets = self.client.list_markets(authenticated=authenticated)
        return self.normalize(markets)

    def normalize(self, markets: list[Market]) -> list[Market]:
        """Drop later duplicates of a ``marketId``, keeping server order."""
        seen: set[str] = set()
        unique: list[Market] = []
        for market in markets:
            if market.market_id in seen:
                self.logger.warning(
                    "Duplicate marketId %s in market list; keeping first entry.",
                    market.market_id,
                )
                continue
            seen.add(market.market_id)
            unique.append(market)
        return unique
