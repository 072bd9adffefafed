"""Result declaration view: pick a market and post its open/close results."""

from __future__ import annotations

import logging

from ..exceptions import MarketAPIError, MarketLookupError
from ..market_client import MarketAPIClient
from ..models import Market, result_label
from ..repository import MarketRepository
from .models import ViewState
from .notices import NoticeFeed

DECLARE_SUCCESS_MESSAGE = "Game results updated successfully!"
DECLARE_FAILURE_MESSAGE = "Failed to update game results. Please try again!"


class ResultDeclarationView:
    def __init__(
        self,
        *,
        client: MarketAPIClient,
        logger: logging.Logger,
        repository: MarketRepository | None = None,
        notices: NoticeFeed | None = None,
    ) -> None:
        self.client = client
        self.logger = logger
        self.repository = repository or MarketRepository(client, logger)
        self.notices = notices or NoticeFeed()
        self.state = ViewState.LOADING
        self.error: str | None = None
        self.markets: list[Market] = []
        self.selected_market_id: str | None = None
        self.open_result = ""
        self.close_result = ""

    def load(self) -> ViewState:
        self.state = ViewState.LOADING
        try:
            # The public list endpoint is read without credentials here.
            self.markets = self.repository.fetch_all(authenticated=False)
        except MarketAPIError as exc:
            self.state = ViewState.FAILED
            self.error = "Failed to load markets"
            self.logger.error("Result view load failed: %s", exc.message)
            return self.state
        self.selected_market_id = self.markets[0].market_id if self.markets else None
        self.state = ViewState.READY
        self.error = None
        return self.state

    @property
    def selected_market(self) -> Market | None:
        if self.selected_market_id is None:
            return None
        return next(
            (m for m in self.markets if m.market_id == self.selected_market_id), None
        )

    def select(self, market_id: str) -> bool:
        if not any(m.market_id == market_id for m in self.markets):
            self.notices.error(f"Market {market_id} not found.")
            return False
        self.selected_market_id = market_id
        return True

    def submit(self) -> bool:
        """Post results for the selected market. Inputs are sent as typed."""
        try:
            market = self._require_selected()
        except MarketLookupError as exc:
            self.logger.error("Declare results aborted: %s", exc)
            self.notices.error(str(exc))
            return False

        try:
            self.client.declare_results(
                market.market_id,
                self.open_result,
                self.close_result,
            )
        except MarketAPIError as exc:
            self.logger.warning(
                "Declare results for %s failed: %s", market.market_id, exc.message
            )
            self.notices.error(DECLARE_FAILURE_MESSAGE)
            return False

        self.notices.info(DECLARE_SUCCESS_MESSAGE)
        return True

    def detail_lines(self) -> list[tuple[str, str]]:
        """Label/value pairs describing the selected market, results last."""
        market = self.selected_market
        if market is None:
            return []
        lines = [
            ("Market ID", market.market_id),
            ("Name", market.name),
            ("Open Time", market.open_time),
            ("Close Time", market.close_time),
            ("Betting Status", "Open" if market.is_betting_open else "Closed"),
        ]
        lines.extend(
            (result_label(key), value) for key, value in market.display_results().items()
        )
        return lines

    def _require_selected(self) -> Market:
        market = self.selected_market
        if market is None:
            raise MarketLookupError(
                f"Selected market {self.selected_market_id or '-'} is not available."
            )
        return market
