from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from core.models import NotificationPayload
from core.notify import NotificationError, build_session

MAX_FIELDS = 25     # Discord embed limit


def build_embed_message(payload: NotificationPayload) -> Dict[str, Any]:
    link_lines = [f"[{label}]({url})" for label, url in payload.links.items() if url]
    description = "\n".join(x for x in (payload.description, " · ".join(link_lines)) if x)

    embed: Dict[str, Any] = {
        "title": payload.title,
        "color": payload.color,
        "fields": [
            {"name": f.name, "value": f.value or "—", "inline": f.inline}
            for f in payload.fields[:MAX_FIELDS]
        ],
    }
    if description:
        embed["description"] = description
    if payload.footer:
        embed["footer"] = {"text": payload.footer}

    msg: Dict[str, Any] = {"embeds": [embed]}
    if payload.mention:
        msg["content"] = payload.mention
    return msg


class DiscordWebhookClient:
    def __init__(self, webhook_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.webhook_url = webhook_url.strip()
        self.timeout = float(timeout)
        self.session = session or build_session()

    def send(self, payload: NotificationPayload) -> None:
        try:
            r = self.session.post(self.webhook_url, json=build_embed_message(payload), timeout=self.timeout)
        except requests.RequestException as e:
            raise NotificationError(f"discord webhook transport error: {e}") from e
        if not r.ok:
            raise NotificationError(f"discord webhook failed: {r.status_code} {r.text[:200]}")
