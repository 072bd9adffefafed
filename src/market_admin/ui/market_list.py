"""Market list view: load, toggle betting, delete, and add markets."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..exceptions import MarketAPIError
from ..market_client import MarketAPIClient
from ..models import Market, MarketDraft
from ..repository import MarketRepository
from .create_form import MarketCreateForm
from .models import ViewState
from .notices import NoticeFeed

DELETE_CONFIRM_PROMPT = "Are you sure you want to delete this market?"


class MarketListView:
    """Holds the admin's local copy of the market collection.

    Local state changes only after the server confirms a mutation; nothing is
    flipped or removed optimistically.
    """

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
        self.adding = False

    def load(self) -> ViewState:
        """Fetch the collection (authenticated). Success -> READY, failure -> FAILED."""
        self.state = ViewState.LOADING
        try:
            self.markets = self.repository.fetch_all(authenticated=True)
        except MarketAPIError as exc:
            self.state = ViewState.FAILED
            self.error = exc.message or "Failed to fetch markets"
            self.logger.error("Market list load failed: %s", self.error)
            return self.state
        self.state = ViewState.READY
        self.error = None
        return self.state

    def find(self, market_id: str) -> Market | None:
        return next((m for m in self.markets if m.market_id == market_id), None)

    def find_row(self, row_id: str) -> Market | None:
        return next((m for m in self.markets if m.id == row_id), None)

    def toggle(self, market_id: str, current: bool | None = None) -> bool:
        """Flip betting for ``market_id``; return whether the server accepted it."""
        market = self.find(market_id)
        if market is None:
            self.logger.error("Toggle requested for unknown market %s", market_id)
            self.notices.error("Market not found.")
            return False
        if current is None:
            current = market.is_betting_open
        desired = not current

        try:
            self.client.set_betting_open(market_id, desired)
        except MarketAPIError as exc:
            self.notices.error(f"Failed to toggle market: {exc.message}")
            return False

        self.markets = [
            m.model_copy(update={"is_betting_open": desired, "open_betting": desired})
            if m.market_id == market_id
            else m
            for m in self.markets
        ]
        state_text = "open" if desired else "closed"
        self.notices.info(f"Betting {state_text} for {market.name or market_id}.")
        return True

    def delete(self, row_id: str, confirm: Callable[[str], bool]) -> bool:
        """Delete the row with view-model id ``row_id`` once ``confirm`` agrees.

        The row is removed only after the server confirms, so a failed delete
        leaves the list untouched and needs no rollback.
        """
        if self.find_row(row_id) is None:
            self.logger.error("Delete requested for unknown market row %s", row_id)
            self.notices.error("Market not found.")
            return False
        if not confirm(DELETE_CONFIRM_PROMPT):
            self.logger.info("Delete of %s cancelled by operator", row_id)
            return False
        try:
            self.client.delete_market(row_id)
        except MarketAPIError as exc:
            self.notices.error(f"Failed to delete market: {exc.message}")
            return False

        self.markets = [m for m in self.markets if m.id != row_id]
        self.notices.info("Market deleted successfully.")
        return True

    def add_market(self, form: MarketCreateForm) -> bool:
        """Submit the create form; on success refetch the whole list."""
        if self.adding:
            self.notices.warn("A market is already being added.")
            return False
        saved = form.submit(self._save_market)
        if form.error and not saved:
            self.notices.error(form.error)
        return saved

    def _save_market(self, draft: MarketDraft) -> None:
        self.adding = True
        try:
            created = self.client.create_market(draft)
        finally:
            self.adding = False
        if created is not None and created.market_id != draft.market_id:
            self.logger.info(
                "Server assigned marketId %s (provisional %s)",
                created.market_id,
                draft.market_id,
            )
        # Server records are authoritative; refetch instead of merging locally.
        self.load()
