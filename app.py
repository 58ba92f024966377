# app.py
import asyncio
import json
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
import uvicorn

import config
from chains.solana_helius import as_event_list
from core.cooldown import CooldownGate
from core.discord_client import DiscordWebhookClient
from core.engine import AlertEngine
from core.notify import FanoutSink, LogSink
from core.telegram_client import TelegramClient
from log import get_logger, setup_logging
from watchlist import WatchListProvider, WatchListUnavailable

log = get_logger(__name__)


# ============================================================
# WIRING
# ============================================================

def build_sink():
    sinks = []
    if config.DISCORD_WEBHOOK_URL:
        sinks.append(DiscordWebhookClient(config.DISCORD_WEBHOOK_URL, timeout=config.SEND_TIMEOUT))
    if config.TELEGRAM_BOT_TOKEN and config.TELEGRAM_CHAT_ID:
        try:
            chat_id = int(config.TELEGRAM_CHAT_ID)
        except ValueError as e:
            raise config.ConfigError("TELEGRAM_CHAT_ID must be an integer.") from e
        sinks.append(TelegramClient(config.TELEGRAM_BOT_TOKEN, chat_id, timeout=config.SEND_TIMEOUT))
    if not sinks:
        return LogSink()
    if len(sinks) == 1:
        return sinks[0]
    return FanoutSink(sinks)


def build_engine() -> AlertEngine:
    thresholds = config.load_thresholds()
    provider = WatchListProvider(config.TRACKED_WALLETS_FILE, ttl_seconds=config.WATCHLIST_TTL_SECONDS)
    return AlertEngine(
        watchlist=provider.get,
        sink=build_sink(),
        cooldown=CooldownGate(thresholds.cooldown_seconds),
        thresholds=thresholds,
        bands=config.load_score_bands(),
        ping_text=config.PING_TEXT,
    )


# ============================================================
# HELPERS
# ============================================================

def _normalize_auth_header(value: str) -> str:
    v = (value or "").strip()
    if v.lower().startswith("bearer "):
        v = v[7:].strip()
    return v


# ============================================================
# FASTAPI APP
# ============================================================

def create_app(engine: Optional[AlertEngine] = None, auth_header: Optional[str] = None) -> FastAPI:
    engine = engine or build_engine()
    expected_auth = _normalize_auth_header(config.HELIUS_AUTH_HEADER if auth_header is None else auth_header)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config.LOG_LEVEL)
        log.info("service_started", thresholds=str(engine.thresholds), sink=type(engine.sink).__name__)
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.engine = engine

    @app.get("/", response_class=PlainTextResponse)
    def root_get():
        return "ok"

    @app.get("/health")
    def health():
        return {"ok": True}

    async def helius_webhook(request: Request):
        # Verify authHeader -> Authorization echo
        if expected_auth:
            got = _normalize_auth_header(request.headers.get("Authorization", ""))
            if got != expected_auth:
                raise HTTPException(status_code=401, detail="Unauthorized")

        try:
            payload = json.loads(await request.body() or b"null")
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON")

        events = as_event_list(payload)
        try:
            # engine is sync (requests + locks); keep it off the event loop
            summary = await asyncio.to_thread(engine.process_batch, events)
        except WatchListUnavailable as e:
            log.error("watchlist_unavailable", error=str(e))
            raise HTTPException(status_code=503, detail="Watch list unavailable")

        return {"ok": True, **summary.as_dict()}

    app.add_api_route("/helius", helius_webhook, methods=["POST"])
    app.add_api_route("/api/helius", helius_webhook, methods=["POST"])
    return app


app = create_app()


if __name__ == "__main__":
    # Local runs only; Helius needs a public HTTPS URL.
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
