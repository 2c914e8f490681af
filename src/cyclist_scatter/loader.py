"""Retrieve the raw cyclist dataset from the network or a local JSON file."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, Protocol, Union

import requests

from .mapper import RawRecord

__all__ = [
    "DEFAULT_DATA_URL",
    "DEFAULT_TIMEOUT",
    "Err",
    "FetchFailure",
    "FetchResult",
    "Ok",
    "fetch_plot_data",
    "load_records",
    "load_records_from_json",
]

logger = logging.getLogger(__name__)

DEFAULT_DATA_URL = (
    "https://raw.githubusercontent.com/freeCodeCamp/ProjectReferenceData/master/cyclist-data.json"
)
DEFAULT_TIMEOUT = 30.0

FailureKind = Literal["transport", "empty_payload"]


@dataclass(frozen=True)
class FetchFailure:
    """Why no dataset could be produced."""

    kind: FailureKind
    message: str
    source: str


@dataclass(frozen=True)
class Ok:
    records: list[RawRecord]

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    failure: FetchFailure

    @property
    def ok(self) -> bool:
        return False


FetchResult = Union[Ok, Err]


class HttpSession(Protocol):
    def get(self, url: str, *, timeout: Optional[float] = ...) -> Any: ...


def _transport_failure(source: str, exc: BaseException) -> Err:
    logger.error("Failed to retrieve plot data from %s: %s", source, exc)
    return Err(FetchFailure(kind="transport", message=str(exc), source=source))


def _empty_payload(source: str, reason: str = "no data in response") -> Err:
    logger.error("Failed to retrieve plot data from %s: %s", source, reason)
    return Err(FetchFailure(kind="empty_payload", message=reason, source=source))


def _records_from_payload(payload: Any, source: str) -> FetchResult:
    if not isinstance(payload, list):
        return _empty_payload(source, "expected a JSON array of records")
    if not payload:
        return _empty_payload(source)
    logger.debug("Retrieved %d raw records from %s", len(payload), source)
    return Ok(records=payload)


def fetch_plot_data(
    url: str = DEFAULT_DATA_URL,
    *,
    session: Optional[HttpSession] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> FetchResult:
    """Issue a single GET for ``url`` and return the decoded record list.

    Transport errors and empty payloads are logged and reported as :class:`Err`;
    nothing is raised and nothing is retried.
    """

    owns_session = session is None
    client = session if session is not None else requests.Session()
    logger.debug("Fetching plot data from %s (timeout=%s)", url, timeout)
    try:
        try:
            response = client.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            return _transport_failure(url, exc)

        if not response.content:
            return _empty_payload(url)
        try:
            payload = response.json()
        except ValueError:
            return _empty_payload(url, "response body is not valid JSON")
        return _records_from_payload(payload, url)
    finally:
        if owns_session:
            client.close()


def load_records_from_json(path: str | Path) -> FetchResult:
    """Read records in the same wire format from a local JSON file."""

    file_path = Path(path)
    source = str(file_path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        return _transport_failure(source, exc)

    if not text.strip():
        return _empty_payload(source)
    try:
        payload = json.loads(text)
    except ValueError:
        return _empty_payload(source, "file is not valid JSON")
    return _records_from_payload(payload, source)


def load_records(
    source: str,
    *,
    session: Optional[HttpSession] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> FetchResult:
    """Dispatch ``source`` to the HTTP fetcher or the local file reader."""

    if source.lower().startswith(("http://", "https://")):
        return fetch_plot_data(source, session=session, timeout=timeout)
    return load_records_from_json(Path(source).expanduser())
