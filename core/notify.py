from __future__ import annotations

from typing import List, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.models import NotificationPayload
from log import get_logger

log = get_logger(__name__)


class NotificationError(RuntimeError):
    """Outbound delivery failed (transport error or non-success response)."""


class Sink(Protocol):
    def send(self, payload: NotificationPayload) -> None: ...


def build_session() -> requests.Session:
    """
    Session with a small retry budget for POSTs. Only connect errors and 429
    responses are retried: in both cases the message was not accepted.
    """
    session = requests.Session()
    retries = Retry(
        total=3,
        connect=3,
        read=0,
        status=2,
        backoff_factor=0.5,
        status_forcelist=[429],
        allowed_methods=frozenset({"POST"}),
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retries)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def render_text(payload: NotificationPayload) -> str:
    """Plain-text rendering for chat sinks and logs."""
    lines = []
    if payload.mention:
        lines.append(payload.mention)
    lines.append(payload.title)
    if payload.description:
        lines.append(payload.description)
    for f in payload.fields:
        lines.append(f"• {f.name}: {f.value}")
    for label, url in payload.links.items():
        if url:
            lines.append(f"{label}: {url}")
    return "\n".join(lines)


class LogSink:
    """Used when no outbound channel is configured."""

    def send(self, payload: NotificationPayload) -> None:
        log.info("alert_unsent", title=payload.title, mention=bool(payload.mention))


class FanoutSink:
    """Deliver to every sink; fails only if all of them fail."""

    def __init__(self, sinks: List[Sink]):
        self.sinks = list(sinks)

    def send(self, payload: NotificationPayload) -> None:
        errors = []
        for s in self.sinks:
            try:
                s.send(payload)
            except NotificationError as e:
                log.warning("sink_failed", sink=type(s).__name__, error=str(e))
                errors.append(e)
        if self.sinks and len(errors) == len(self.sinks):
            raise NotificationError("; ".join(str(e) for e in errors))
