from typing import Optional

import requests

from core.models import NotificationPayload
from core.notify import NotificationError, build_session, render_text

MAX_MSG_CHARS = 3500


class TelegramClient:
    def __init__(self, bot_token: str, chat_id: int, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.bot_token = bot_token.strip()
        self.chat_id = int(chat_id)
        self.timeout = float(timeout)
        self.base = f"https://api.telegram.org/bot{self.bot_token}"
        self.session = session or build_session()

    def send(self, payload: NotificationPayload) -> None:
        text = render_text(payload)
        if len(text) > MAX_MSG_CHARS:
            text = text[: MAX_MSG_CHARS - 1] + "…"
        try:
            r = self.session.post(
                f"{self.base}/sendMessage",
                json={
                    "chat_id": self.chat_id,
                    "text": text,
                    "disable_notification": not payload.mention,
                    "disable_web_page_preview": True,
                },
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise NotificationError(f"telegram send failed: {e}") from e
        if not data.get("ok"):
            raise NotificationError(f"telegram rejected message: {data}")
