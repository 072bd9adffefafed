"""Shared typed models for markets and the payloads sent to the admin API."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

RESULT_PLACEHOLDER = "---"
RESULT_KEYS: tuple[str, ...] = (
    "openNumber",
    "closeNumber",
    "openSingleDigit",
    "closeSingleDigit",
    "jodiResult",
)

_CAMEL_BOUNDARY_RE = re.compile(r"([A-Z])")


def result_label(key: str) -> str:
    """Turn a camelCase result key into a spaced label: ``jodiResult`` -> ``Jodi Result``."""
    spaced = _CAMEL_BOUNDARY_RE.sub(r" \1", key).strip()
    return spaced[:1].upper() + spaced[1:]


class Market(BaseModel):
    """One market as returned by ``GET /markets``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    market_id: str = Field(alias="marketId")
    name: str = ""
    open_time: str = Field(default="", alias="openTime")
    close_time: str = Field(default="", alias="closeTime")
    is_betting_open: bool = Field(default=False, alias="isBettingOpen")
    open_betting: bool | None = Field(default=None, alias="openBetting")
    results: dict[str, str] = Field(default_factory=dict)
    record_id: str | None = Field(default=None, alias="_id")

    @field_validator("name", "open_time", "close_time", mode="before")
    @classmethod
    def null_text_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_betting_open", mode="before")
    @classmethod
    def null_flag_to_closed(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("results", mode="before")
    @classmethod
    def drop_unset_results(cls, value: Any) -> Any:
        """Keep only result keys that carry a real value."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        return {
            str(key): str(item)
            for key, item in value.items()
            if item is not None and str(item).strip() not in {"", RESULT_PLACEHOLDER}
        }

    @property
    def id(self) -> str:
        """View-model row id: the backend ``_id``, or ``marketId`` when absent."""
        return self.record_id or self.market_id

    @property
    def type(self) -> str:
        return self.market_id

    def display_results(self) -> dict[str, str]:
        """Recognized result keys with placeholders filled in, then any extra keys."""
        shown = {key: self.results.get(key) or RESULT_PLACEHOLDER for key in RESULT_KEYS}
        for key, value in self.results.items():
            if key not in shown:
                shown[key] = value
        return shown


class MarketDraft(BaseModel):
    """Create payload for ``POST /admin/add-market``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    open_time: str = Field(alias="openTime")
    close_time: str = Field(alias="closeTime")
    is_betting_open: bool = Field(default=False, alias="isBettingOpen")
    market_id: str = Field(alias="marketId")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class DeclareResultsRequest(BaseModel):
    """Body for ``POST /admin/markets/declare-results``."""

    model_config = ConfigDict(populate_by_name=True)

    market_id: str = Field(alias="marketId")
    open_result: str = Field(alias="openResult")
    close_result: str = Field(alias="closeResult")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
