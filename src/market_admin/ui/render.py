"""Rich rendering for the console views."""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import RESULT_KEYS, Market, result_label
from .market_list import MarketListView
from .models import ViewState
from .notices import NoticeFeed
from .results_view import ResultDeclarationView

_SEVERITY_STYLES = {"INFO": "green", "WARN": "yellow", "ERROR": "red"}


class TerminalRenderer:
    """Draws views onto a ``rich`` console."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def render_market_list(self, view: MarketListView) -> None:
        if view.state is ViewState.LOADING:
            self.console.print("Loading markets...")
            return
        if view.state is ViewState.FAILED:
            self.console.print(f"[red]Error loading markets: {escape(view.error or '')}[/red]")
            return
        self.console.print(self.build_markets_table(view.markets, adding=view.adding))

    def render_results_view(self, view: ResultDeclarationView) -> None:
        if view.state is ViewState.LOADING:
            self.console.print("Loading...")
            return
        if view.state is ViewState.FAILED:
            self.console.print(f"[red]Error: {escape(view.error or '')}[/red]")
            return
        lines = view.detail_lines()
        if not lines:
            self.console.print("No market selected.")
            return
        self.console.print(self.build_detail_panel(lines))

    def render_notices(self, notices: NoticeFeed, *, limit: int = 5) -> None:
        items = notices.snapshot()[-limit:]
        if not items:
            return
        text = Text()
        for index, notice in enumerate(items):
            if index:
                text.append("\n")
            style = _SEVERITY_STYLES[notice.severity]
            text.append(f"{notice.severity:<5} ", style=f"bold {style}")
            text.append(notice.message)
            if notice.count > 1:
                text.append(f" (x{notice.count})", style="dim")
        border = "red" if any(n.severity == "ERROR" for n in items) else "green"
        self.console.print(Panel(text, title="Notices", border_style=border))

    def render_form_error(self, message: str) -> None:
        self.console.print(Panel(Text(message), title="Add Market", border_style="red"))

    @staticmethod
    def build_markets_table(markets: list[Market], *, adding: bool = False) -> Table:
        title = "Markets (adding...)" if adding else "Markets"
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("ID", overflow="fold")
        table.add_column("Market ID", overflow="fold")
        table.add_column("Name", overflow="fold")
        table.add_column("Open")
        table.add_column("Close")
        table.add_column("Betting")
        for key in RESULT_KEYS:
            table.add_column(result_label(key), justify="right")

        for market in markets:
            results = market.display_results()
            betting = "[green]Open[/green]" if market.is_betting_open else "[red]Closed[/red]"
            table.add_row(
                escape(market.id),
                escape(market.market_id),
                escape(market.name),
                escape(market.open_time) or "-",
                escape(market.close_time) or "-",
                betting,
                *(escape(results[key]) for key in RESULT_KEYS),
            )
        if not markets:
            table.add_row("-", "-", "No markets", *("-" for _ in range(3 + len(RESULT_KEYS))))
        return table

    @staticmethod
    def build_detail_panel(lines: list[tuple[str, str]]) -> Panel:
        details = Table.grid(padding=(0, 1))
        details.add_column(style="bold")
        details.add_column()
        results = Table.grid(padding=(0, 1))
        results.add_column(style="bold")
        results.add_column(justify="right")
        # The first five rows describe the market; the rest are results.
        for label, value in lines[:5]:
            details.add_row(f"{label}:", escape(value) if value else "-")
        for label, value in lines[5:]:
            results.add_row(f"{label}:", escape(value))
        body = Group(details, Text("Results:", style="bold underline"), results)
        return Panel(body, title="Market Details", border_style="blue")
