"""Market list view: load states, toggle, delete, and add flows."""

from __future__ import annotations

import logging
from typing import Any

from market_admin.exceptions import MarketAPIError
from market_admin.models import Market, MarketDraft
from market_admin.ui.create_form import MarketCreateForm
from market_admin.ui.market_list import DELETE_CONFIRM_PROMPT, MarketListView
from market_admin.ui.models import ViewState


class FakeMarketClient:
    """Records calls; ``fail`` maps an operation name to the error it raises."""

    def __init__(self, records: list[dict[str, Any]]) -> None:
        self.records = records
        self.calls: list[tuple[Any, ...]] = []
        self.fail: dict[str, MarketAPIError] = {}

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail:
            raise self.fail[name]

    def list_markets(self, authenticated: bool = True) -> list[Market]:
        self.calls.append(("list_markets", authenticated))
        self._maybe_fail("list_markets")
        return [Market.model_validate(record) for record in self.records]

    def set_betting_open(self, market_id: str, desired: bool) -> None:
        self.calls.append(("set_betting_open", market_id, desired))
        self._maybe_fail("set_betting_open")

    def delete_market(self, market_id: str) -> None:
        self.calls.append(("delete_market", market_id))
        self._maybe_fail("delete_market")

    def create_market(self, draft: MarketDraft) -> Market | None:
        self.calls.append(("create_market", draft))
        self._maybe_fail("create_market")
        self.records.append({"_id": "new", "marketId": "MKT-SERVER01", "name": draft.name})
        return None


def _records() -> list[dict[str, Any]]:
    return [
        {"_id": "r1", "marketId": "M1", "name": "Kalyan", "isBettingOpen": False},
        {"_id": "r2", "marketId": "M2", "name": "Milan", "isBettingOpen": True},
        {"_id": "r3", "marketId": "M3", "name": "Rajdhani", "isBettingOpen": True},
    ]


def _view(records: list[dict[str, Any]] | None = None) -> tuple[MarketListView, FakeMarketClient]:
    client = FakeMarketClient(_records() if records is None else records)
    view = MarketListView(client=client, logger=logging.getLogger("test.list_view"))
    return view, client


def test_load_success_is_ready_and_authenticated() -> None:
    view, client = _view()
    assert view.state is ViewState.LOADING
    assert view.load() is ViewState.READY
    assert [m.market_id for m in view.markets] == ["M1", "M2", "M3"]
    assert client.calls == [("list_markets", True)]


def test_load_failure_is_failed_with_message() -> None:
    view, client = _view()
    client.fail["list_markets"] = MarketAPIError("Network Error")
    assert view.load() is ViewState.FAILED
    assert view.error == "Network Error"
    assert view.markets == []


def test_load_drops_duplicate_market_ids() -> None:
    records = _records() + [{"_id": "r9", "marketId": "M1", "name": "dupe"}]
    view, _ = _view(records)
    view.load()
    assert [m.id for m in view.markets] == ["r1", "r2", "r3"]


def test_toggle_sends_negated_flag_and_updates_locally() -> None:
    view, client = _view([{"_id": "r1", "marketId": "M1", "isBettingOpen": False}])
    view.load()
    assert view.toggle("M1", False) is True
    assert client.calls[-1] == ("set_betting_open", "M1", True)
    market = view.find("M1")
    assert market is not None
    assert market.is_betting_open is True
    assert market.open_betting is True
    # No refetch after a toggle.
    assert [c[0] for c in client.calls].count("list_markets") == 1


def test_toggle_twice_restores_original_state() -> None:
    view, client = _view()
    view.load()
    assert view.toggle("M2") is True
    assert view.toggle("M2") is True
    market = view.find("M2")
    assert market is not None and market.is_betting_open is True
    assert client.calls[1:] == [
        ("set_betting_open", "M2", False),
        ("set_betting_open", "M2", True),
    ]


def test_toggle_unknown_market_aborts_without_request() -> None:
    view, client = _view()
    view.load()
    assert view.toggle("NOPE") is False
    assert client.calls == [("list_markets", True)]
    assert view.notices.latest is not None
    assert view.notices.latest.message == "Market not found."
    assert view.state is ViewState.READY


def test_toggle_failure_leaves_state_unchanged() -> None:
    view, client = _view()
    view.load()
    client.fail["set_betting_open"] = MarketAPIError("Forbidden", status_code=403)
    assert view.toggle("M1") is False
    market = view.find("M1")
    assert market is not None and market.is_betting_open is False
    assert view.notices.latest is not None
    assert view.notices.latest.message == "Failed to toggle market: Forbidden"
    assert view.state is ViewState.READY


def test_delete_requires_confirmation() -> None:
    view, client = _view()
    view.load()
    prompts: list[str] = []

    def decline(question: str) -> bool:
        prompts.append(question)
        return False

    assert view.delete("r2", confirm=decline) is False
    assert prompts == [DELETE_CONFIRM_PROMPT]
    assert len(view.markets) == 3
    assert all(call[0] != "delete_market" for call in client.calls)


def test_delete_removes_exactly_one_row_after_success() -> None:
    view, client = _view()
    view.load()
    assert view.delete("r2", confirm=lambda _q: True) is True
    assert client.calls[-1] == ("delete_market", "r2")
    assert [m.id for m in view.markets] == ["r1", "r3"]
    assert view.notices.latest is not None
    assert view.notices.latest.message == "Market deleted successfully."


def test_delete_failure_keeps_row_in_place() -> None:
    view, client = _view()
    view.load()
    client.fail["delete_market"] = MarketAPIError("Market has open bets")
    assert view.delete("r2", confirm=lambda _q: True) is False
    assert [m.id for m in view.markets] == ["r1", "r2", "r3"]
    assert view.notices.latest is not None
    assert view.notices.latest.message == "Failed to delete market: Market has open bets"


def test_market_with_null_fields_is_listed_and_toggleable() -> None:
    view, client = _view(
        [{"_id": "r9", "marketId": "M9", "name": None, "openTime": None, "isBettingOpen": None}]
    )
    assert view.load() is ViewState.READY
    assert [m.market_id for m in view.markets] == ["M9"]
    assert view.toggle("M9") is True
    assert client.calls[-1] == ("set_betting_open", "M9", True)


def test_delete_unknown_row_never_prompts() -> None:
    view, client = _view()
    view.load()
    prompts: list[str] = []
    assert view.delete("missing", confirm=lambda q: prompts.append(q) or True) is False
    assert prompts == []
    assert all(call[0] != "delete_market" for call in client.calls)


def test_add_market_refetches_and_closes_form() -> None:
    view, client = _view()
    view.load()
    form = MarketCreateForm(name="Night", open_time="21:00", close_time="23:15")
    assert view.add_market(form) is True
    assert form.is_open is False
    assert view.adding is False
    draft = client.calls[1][1]
    assert draft.open_time == "9:00 PM"
    assert draft.close_time == "11:15 PM"
    assert [c[0] for c in client.calls] == ["list_markets", "create_market", "list_markets"]
    assert view.find("MKT-SERVER01") is not None


def test_add_market_closes_form_even_if_refetch_fails() -> None:
    view, client = _view()
    view.load()
    original_create = client.create_market

    def create_then_break_listing(draft: MarketDraft) -> Market | None:
        result = original_create(draft)
        client.fail["list_markets"] = MarketAPIError("Service Unavailable")
        return result

    client.create_market = create_then_break_listing  # type: ignore[method-assign]
    form = MarketCreateForm(name="Night", open_time="21:00", close_time="23:15")
    assert view.add_market(form) is True
    assert form.is_open is False
    assert view.state is ViewState.FAILED


def test_add_market_failure_keeps_form_open_and_skips_refetch() -> None:
    view, client = _view()
    view.load()
    client.fail["create_market"] = MarketAPIError("Invalid time window")
    form = MarketCreateForm(name="Night", open_time="21:00", close_time="23:15")
    assert view.add_market(form) is False
    assert form.is_open is True
    assert form.error == "Failed to add market: Invalid time window"
    assert view.adding is False
    assert [c[0] for c in client.calls] == ["list_markets", "create_market"]
    assert len(view.markets) == 3


def test_add_market_rejected_while_busy() -> None:
    view, client = _view()
    view.load()
    view.adding = True
    form = MarketCreateForm(name="Night", open_time="21:00", close_time="23:15")
    assert view.add_market(form) is False
    assert form.is_open is True
    assert all(call[0] != "create_market" for call in client.calls)
