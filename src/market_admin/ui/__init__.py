"""Console views and their terminal rendering."""

from .create_form import MarketCreateForm, generate_market_id, to_twelve_hour
from .market_list import MarketListView
from .models import Notice, ViewState
from .notices import NoticeFeed
from .render import TerminalRenderer
from .results_view import ResultDeclarationView

__all__ = [
    "MarketCreateForm",
    "MarketListView",
    "Notice",
    "NoticeFeed",
    "ResultDeclarationView",
    "TerminalRenderer",
    "ViewState",
    "generate_market_id",
    "to_twelve_hour",
]
