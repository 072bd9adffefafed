"""Operator CLI: list, toggle, add, delete markets and declare results."""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.prompt import Confirm

from .config import Settings, load_settings
from .exceptions import ConfigError, JournalError, TokenStoreError
from .journal import JournalWriter
from .log_setup import setup_logger
from .market_client import MarketAPIClient
from .token_store import FileTokenStore, StaticTokenProvider, TokenProvider
from .ui import (
    MarketCreateForm,
    MarketListView,
    NoticeFeed,
    ResultDeclarationView,
    TerminalRenderer,
    ViewState,
)

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_CONFIG = 2
EXIT_JOURNAL = 3
EXIT_LOAD_FAILED = 4
EXIT_ACTION_FAILED = 5
EXIT_LOOKUP_FAILED = 6
EXIT_UNEXPECTED = 99


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="market-admin",
        description="Administer betting markets through the remote market API.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show all markets with betting status and results.")

    toggle = sub.add_parser("toggle", help="Open or close betting on a market.")
    toggle.add_argument("market_id", help="marketId of the market to toggle.")

    add = sub.add_parser("add", help="Create a new market, then reload the list.")
    add.add_argument("--name", required=True)
    add.add_argument("--open", dest="open_time", required=True, help="Open time, HH:MM 24-hour.")
    add.add_argument(
        "--close", dest="close_time", required=True, help="Close time, HH:MM 24-hour."
    )
    add.add_argument("--betting-open", action="store_true", help="Open betting immediately.")

    delete = sub.add_parser("delete", help="Delete a market by its row id.")
    delete.add_argument("row_id", help="Row id shown in the ID column (backend _id).")
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt.")

    declare = sub.add_parser("declare", help="Declare open/close results for a market.")
    declare.add_argument("--market", dest="market_id", default=None, help="Defaults to first.")
    declare.add_argument("--open-result", required=True)
    declare.add_argument("--close-result", required=True)

    show = sub.add_parser("show", help="Show one market's details and results.")
    show.add_argument("--market", dest="market_id", default=None, help="Defaults to first.")

    set_token = sub.add_parser("set-token", help="Store the bearer token for later calls.")
    set_token.add_argument("token")
    sub.add_parser("clear-token", help="Remove the stored bearer token.")
    return parser


def build_token_provider(settings: Settings) -> TokenProvider:
    if settings.market_auth_token:
        return StaticTokenProvider(settings.market_auth_token)
    return FileTokenStore(settings.market_token_store_path, key=settings.market_token_key)


def build_client(settings: Settings, logger: logging.Logger) -> MarketAPIClient:
    return MarketAPIClient(
        base_url=settings.api_base_url,
        token_provider=build_token_provider(settings),
        logger=logger,
        timeout_seconds=settings.market_api_timeout_seconds,
    )


def confirm_prompt(question: str) -> bool:
    return Confirm.ask(question, default=False)


class _Session:
    """Per-run wiring: journal, notices, renderer."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        console: Console,
        journal: JournalWriter | None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.renderer = TerminalRenderer(console)
        self.journal = journal
        self.notices = NoticeFeed(max_notices=settings.notice_max_events)

    def record(self, event_type: str, payload: dict[str, Any]) -> None:
        if self.journal is None:
            return
        try:
            self.journal.write_event(event_type, payload=payload)
        except JournalError as exc:
            self.logger.error("Failed to write %s event to journal: %s", event_type, exc)

    def load_list(self, client: MarketAPIClient) -> MarketListView | None:
        view = MarketListView(client=client, logger=self.logger, notices=self.notices)
        if view.load() is ViewState.FAILED:
            self.record("market_load_failed", {"view": "list", "error": view.error})
            self.renderer.render_market_list(view)
            return None
        self.record("markets_loaded", {"view": "list", "count": len(view.markets)})
        return view

    def load_results(self, client: MarketAPIClient) -> ResultDeclarationView | None:
        view = ResultDeclarationView(client=client, logger=self.logger, notices=self.notices)
        if view.load() is ViewState.FAILED:
            self.record("market_load_failed", {"view": "results", "error": view.error})
            self.renderer.render_results_view(view)
            return None
        self.record("markets_loaded", {"view": "results", "count": len(view.markets)})
        return view

    def failed(self, action: str, target: str | None) -> None:
        latest = self.notices.latest
        self.record(
            "action_failed",
            {"action": action, "target": target, "notice": latest.message if latest else None},
        )


def _run_list(session: _Session, client: MarketAPIClient, args: argparse.Namespace) -> int:
    del args
    view = session.load_list(client)
    if view is None:
        return EXIT_LOAD_FAILED
    session.renderer.render_market_list(view)
    return EXIT_OK


def _run_toggle(session: _Session, client: MarketAPIClient, args: argparse.Namespace) -> int:
    view = session.load_list(client)
    if view is None:
        return EXIT_LOAD_FAILED
    ok = view.toggle(args.market_id)
    session.renderer.render_notices(session.notices)
    if not ok:
        session.failed("toggle", args.market_id)
        return EXIT_LOOKUP_FAILED if view.find(args.market_id) is None else EXIT_ACTION_FAILED
    market = view.find(args.market_id)
    session.record(
        "betting_toggled",
        {"market_id": args.market_id, "is_betting_open": market.is_betting_open if market else None},
    )
    session.renderer.render_market_list(view)
    return EXIT_OK


def _run_add(session: _Session, client: MarketAPIClient, args: argparse.Namespace) -> int:
    view = session.load_list(client)
    if view is None:
        return EXIT_LOAD_FAILED
    form = MarketCreateForm(
        name=args.name,
        open_time=args.open_time,
        close_time=args.close_time,
        is_betting_open=args.betting_open,
        logger=session.logger,
    )
    if not view.add_market(form):
        session.renderer.render_form_error(form.error or "Failed to add market.")
        session.failed("add", args.name)
        return EXIT_ACTION_FAILED
    draft = form.submitted
    session.record(
        "market_created",
        {
            "name": draft.name if draft else args.name,
            "provisional_market_id": draft.market_id if draft else None,
            "open_time": draft.open_time if draft else None,
            "close_time": draft.close_time if draft else None,
        },
    )
    # The form is closed even if the refetch failed; the list shows the outcome.
    session.renderer.render_market_list(view)
    return EXIT_OK


def _run_delete(session: _Session, client: MarketAPIClient, args: argparse.Namespace) -> int:
    view = session.load_list(client)
    if view is None:
        return EXIT_LOAD_FAILED
    confirmed = False

    def _confirm(question: str) -> bool:
        nonlocal confirmed
        confirmed = True if args.yes else confirm_prompt(question)
        return confirmed

    ok = view.delete(args.row_id, confirm=_confirm)
    if not ok and view.find_row(args.row_id) is None:
        session.renderer.render_notices(session.notices)
        session.failed("delete", args.row_id)
        return EXIT_LOOKUP_FAILED
    if not confirmed:
        session.logger.info("Delete aborted by operator.")
        return EXIT_ABORTED
    session.renderer.render_notices(session.notices)
    if not ok:
        session.failed("delete", args.row_id)
        return EXIT_ACTION_FAILED
    session.record("market_deleted", {"row_id": args.row_id})
    session.renderer.render_market_list(view)
    return EXIT_OK


def _select(session: _Session, view: ResultDeclarationView, market_id: str | None) -> bool:
    if market_id is None or view.select(market_id):
        return True
    session.renderer.render_notices(session.notices)
    return False


def _run_declare(session: _Session, client: MarketAPIClient, args: argparse.Namespace) -> int:
    view = session.load_results(client)
    if view is None:
        return EXIT_LOAD_FAILED
    if not _select(session, view, args.market_id):
        session.failed("declare", args.market_id)
        return EXIT_LOOKUP_FAILED
    view.open_result = args.open_result
    view.close_result = args.close_result
    ok = view.submit()
    session.renderer.render_notices(session.notices)
    if not ok:
        session.failed("declare", view.selected_market_id)
        return EXIT_LOOKUP_FAILED if view.selected_market is None else EXIT_ACTION_FAILED
    session.record(
        "results_declared",
        {
            "market_id": view.selected_market_id,
            "open_result": view.open_result,
            "close_result": view.close_result,
        },
    )
    session.renderer.render_results_view(view)
    return EXIT_OK


def _run_show(session: _Session, client: MarketAPIClient, args: argparse.Namespace) -> int:
    view = session.load_results(client)
    if view is None:
        return EXIT_LOAD_FAILED
    if not _select(session, view, args.market_id):
        return EXIT_LOOKUP_FAILED
    session.renderer.render_results_view(view)
    return EXIT_OK


_COMMANDS = {
    "list": _run_list,
    "toggle": _run_toggle,
    "add": _run_add,
    "delete": _run_delete,
    "declare": _run_declare,
    "show": _run_show,
}


def _run_token_command(
    settings: Settings, console: Console, args: argparse.Namespace
) -> int:
    store = FileTokenStore(settings.market_token_store_path, key=settings.market_token_key)
    if args.command == "set-token":
        store.set_token(args.token)
        console.print(f"Token stored in {store.path}.")
    elif store.clear_token():
        console.print("Stored token removed.")
    else:
        console.print("No stored token.")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Run one console command."""
    args = build_parser().parse_args(argv)
    session_id = uuid.uuid4().hex[:12]
    logger = setup_logger(context={"session_id": session_id, "command": args.command})
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return EXIT_CONFIG
    logger = setup_logger(level=settings.log_level)

    if args.command in {"set-token", "clear-token"}:
        try:
            return _run_token_command(settings, console, args)
        except TokenStoreError as exc:
            logger.error("Token store failure: %s", exc)
            return EXIT_ACTION_FAILED

    journal: JournalWriter | None = None
    if settings.journal_enabled:
        try:
            journal = JournalWriter(journal_dir=settings.journal_dir, session_id=session_id)
        except JournalError as exc:
            logger.error("Failed to initialize journal: %s", exc)
            return EXIT_JOURNAL

    session = _Session(settings, logger, console, journal)
    session.record("startup", {"command": args.command, **settings.safe_summary()})
    exit_code = EXIT_OK
    try:
        with build_client(settings, logger) as client:
            exit_code = _COMMANDS[args.command](session, client, args)
    except TokenStoreError as exc:
        exit_code = EXIT_ACTION_FAILED
        logger.error("Token store failure: %s", exc)
    except Exception as exc:  # pragma: no cover - last-resort guard for the CLI
        exit_code = EXIT_UNEXPECTED
        logger.exception("Unexpected failure: %s", exc)
    finally:
        session.record("shutdown", {"exit_code": exit_code})
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
