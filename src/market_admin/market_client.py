"""HTTP adapter for the remote market admin API."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .exceptions import MarketAPIError
from .models import DeclareResultsRequest, Market, MarketDraft
from .redaction import sanitize_text
from .token_store import TokenProvider

MARKETS_ENDPOINT = "/markets"
ADD_MARKET_ENDPOINT = "/admin/add-market"
MARKET_ENDPOINT_TEMPLATE = "/admin/markets/{market_id}"
DECLARE_RESULTS_ENDPOINT = "/admin/markets/declare-results"

GENERIC_FAILURE_MESSAGE = "Request to market API failed."


class MarketAPIClient:
    """Thin request/response wrapper: one HTTP call per operation, no retries."""

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        logger: logging.Logger,
        timeout_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.token_provider = token_provider
        self.logger = logger
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Accept": "application/json",
                "User-Agent": "market-admin/0.1",
            },
        )

    def __enter__(self) -> MarketAPIClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close underlying HTTP client."""
        self._client.close()

    def list_markets(self, authenticated: bool = True) -> list[Market]:
        """Fetch every market. No pagination or filtering; malformed records are skipped."""
        payload = self._request_json("GET", MARKETS_ENDPOINT, authenticated=authenticated)
        markets: list[Market] = []
        for record in self._extract_records(payload):
            try:
                markets.append(Market.model_validate(record))
            except ValidationError as exc:
                self.logger.warning(
                    "Skipping malformed market record %r: %s",
                    record.get("marketId") or record.get("_id"),
                    exc.errors()[0]["msg"] if exc.errors() else exc,
                )
        self.logger.info("Fetched %d markets", len(markets))
        return markets

    def create_market(self, draft: MarketDraft) -> Market | None:
        payload = self._request_json(
            "POST",
            ADD_MARKET_ENDPOINT,
            json_body=draft.to_payload(),
        )
        self.logger.info("Market created: name=%r provisional_id=%s", draft.name, draft.market_id)
        return self._parse_created_market(payload)

    def set_betting_open(self, market_id: str, desired: bool) -> None:
        # Server keeps openBetting in step with isBettingOpen.
        self._request_json(
            "PUT",
            self._market_endpoint(market_id),
            json_body={"isBettingOpen": desired},
        )
        self.logger.info("Betting for market %s set to %s", market_id, desired)

    def delete_market(self, market_id: str) -> None:
        self._request_json("DELETE", self._market_endpoint(market_id))
        self.logger.info("Market %s deleted", market_id)

    def declare_results(self, market_id: str, open_result: str, close_result: str) -> None:
        body = DeclareResultsRequest(
            market_id=market_id,
            open_result=open_result,
            close_result=close_result,
        )
        self._request_json("POST", DECLARE_RESULTS_ENDPOINT, json_body=body.to_payload())
        self.logger.info("Results declared for market %s", market_id)

    def _request_json(
        self,
        method: str,
        endpoint: str,
        json_body: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        headers: dict[str, str] = {}
        if authenticated:
            headers.update(self._build_auth_headers())
        try:
            response = self._client.request(
                method=method,
                url=endpoint,
                json=json_body,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            # Transport/protocol errors: connect failures, timeouts, decoding.
            self.logger.warning(
                "Market API %s %s failed: %s",
                method,
                endpoint,
                type(exc).__name__,
                extra={"event_fields": {"method": method, "endpoint": endpoint}},
            )
            raise MarketAPIError(
                sanitize_text(str(exc)) or GENERIC_FAILURE_MESSAGE
            ) from exc

        if response.is_error:
            message = self._server_message(response) or (
                f"{GENERIC_FAILURE_MESSAGE} (HTTP {response.status_code})"
            )
            self.logger.warning(
                "Market API %s %s returned %d: %s",
                method,
                endpoint,
                response.status_code,
                message,
                extra={
                    "event_fields": {
                        "method": method,
                        "endpoint": endpoint,
                        "status_code": response.status_code,
                    }
                },
            )
            raise MarketAPIError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # Some admin endpoints answer with plain text on success.
            return None

    def _build_auth_headers(self) -> dict[str, str]:
        """Bearer header from the injected provider; a missing token is left to the server."""
        token = self.token_provider.get_token()
        if not token:
            self.logger.debug("No bearer token available; sending request unauthenticated.")
            return {}
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _market_endpoint(market_id: str) -> str:
        if not market_id:
            raise MarketAPIError("market_id must not be empty.")
        return MARKET_ENDPOINT_TEMPLATE.format(market_id=quote(market_id, safe=""))

    @staticmethod
    def _server_message(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            for key in ("message", "error"):
                value = body.get(key)
                if isinstance(value, str) and value.strip():
                    return sanitize_text(value.strip())
        return None

    @staticmethod
    def _extract_records(payload: Any) -> list[dict[str, Any]]:
        if isinstance(payload, list):
            records = payload
        elif isinstance(payload, dict) and isinstance(payload.get("markets"), list):
            records = payload["markets"]
        else:
            raise MarketAPIError("Unexpected markets response; expected a list of markets.")
        return [record for record in records if isinstance(record, dict)]

    def _parse_created_market(self, payload: Any) -> Market | None:
        candidate = payload
        if isinstance(payload, dict) and isinstance(payload.get("market"), dict):
            candidate = payload["market"]
        if not isinstance(candidate, dict) or "marketId" not in candidate:
            return None
        try:
            return Market.model_validate(candidate)
        except ValidationError as exc:
            self.logger.warning("Create response did not parse as a market: %s", exc)
            return None
