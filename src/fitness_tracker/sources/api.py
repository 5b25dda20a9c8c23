"""Cliente HTTP del webhook de eventos y métricas corporales."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date
from typing import Any

import requests

from fitness_tracker.model import BodyStatRecord, ClassifiedEntry, Event, EventKind
from fitness_tracker.sources.base import ApiError, ApiSettings, AuthError, DataSource
from fitness_tracker.timeparse import format_date_for_api, parse_local_instant
from fitness_tracker.weekly import WEEK_LENGTH

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]


class FitnessApi(DataSource):
    """Events / body-stats webhook client."""

    def __init__(
        self,
        settings: ApiSettings,
        session: requests.Session | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        super().__init__(settings)
        self._session = session or requests.Session()
        self._token_provider = token_provider

    def validate(self) -> None:
        """Validate that the base URL is http(s)."""
        if not self._settings.base_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid API URL: {self._settings.base_url!r}")

    def _url(self, path: str) -> str:
        return f"{self._settings.base_url.rstrip('/')}/{path}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        logger.debug("%s %s %s", method, url, kwargs.get("params", ""))
        try:
            response = self._session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self._settings.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise ApiError(f"Request to {url} failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthError(f"Not authorized ({response.status_code}) for {url}")
        if not response.ok:
            raise ApiError(
                f"{method} {url} returned {response.status_code}: {response.text[:200]}"
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON from {url}") from exc

    def fetch_events(self, day: date) -> list[Event]:
        """Fetch all events of a calendar day.

        Returns:
            Events in payload order; unknown kinds are skipped.

        Raises:
            ApiError: On network, HTTP or payload-shape failure.
        """
        payload = self._request("GET", "events", params={"date": format_date_for_api(day)})
        return parse_events_payload(payload)

    def fetch_body_stats(self, start: date) -> list[BodyStatRecord]:
        """Fetch body-stat records for the 7 days starting at ``start``."""
        payload = self._request(
            "GET",
            "body-stats",
            params={"start": format_date_for_api(start), "days": WEEK_LENGTH},
        )
        return parse_body_stats_payload(payload)

    def submit_body_stats(self, entries: Sequence[ClassifiedEntry], day: date) -> None:
        """Send classified entries for ``day``."""
        body = {
            "date": format_date_for_api(day),
            "items": [
                {
                    "type": e.type.canonical_name,
                    "unit": e.type.unit,
                    "value": e.value,
                    "comment": e.comment,
                }
                for e in entries
            ],
        }
        self._request("POST", "body-stats", json=body)

    def login(self, username: str, password: str) -> str:
        """Exchange credentials for a bearer token.

        Raises:
            AuthError: If the credentials are rejected or no token comes back.
        """
        payload = self._request(
            "POST", "login", json={"username": username, "password": password}
        )
        token = payload.get("token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthError("Login response did not include a token")
        return token


def parse_events_payload(payload: Any) -> list[Event]:
    """Parse ``[{"items": [{"type", "desc", "timestamp"}, ...]}]``."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ApiError("Events payload must be a list")
    if not payload:
        return []
    first = payload[0]
    items = first.get("items") if isinstance(first, dict) else None
    if not items:
        return []
    if not isinstance(items, list):
        raise ApiError("Events payload items must be a list")

    out: list[Event] = []
    for item in items:
        event = _item_to_event(item)
        if event is not None:
            out.append(event)
    return out


def _item_to_event(item: Any) -> Event | None:
    if not isinstance(item, dict):
        logger.warning("Skipping non-object event item: %r", item)
        return None
    try:
        kind = EventKind(item.get("type"))
    except ValueError:
        logger.warning("Skipping event of unknown type %r", item.get("type"))
        return None
    try:
        at = parse_local_instant(str(item.get("timestamp", "")))
    except ValueError:
        logger.warning("Skipping event with invalid timestamp %r", item.get("timestamp"))
        return None
    return Event(kind=kind, text=str(item.get("desc") or ""), at=at)


def parse_body_stats_payload(payload: Any) -> list[BodyStatRecord]:
    """Parse a list of ``{type, value, comment, epoch}`` objects."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ApiError("Body-stats payload must be a list")
    out: list[BodyStatRecord] = []
    for item in payload:
        if not isinstance(item, dict) or item.get("epoch") is None or not item.get("type"):
            logger.warning("Skipping malformed body-stat record: %r", item)
            continue
        try:
            epoch = int(item["epoch"])
        except (TypeError, ValueError):
            logger.warning("Skipping body-stat record with invalid epoch: %r", item)
            continue
        out.append(
            BodyStatRecord(
                type=str(item["type"]),
                value=str(item.get("value", "")),
                comment=str(item.get("comment") or ""),
                epoch=epoch,
            )
        )
    return out
