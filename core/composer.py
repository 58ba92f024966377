from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from core.models import AlertDecision, Leg, NormalizedEvent, NotificationField, NotificationPayload
from links import (
    explorer_account_link,
    explorer_token_link,
    explorer_tx_link,
    phantom_fungible_link_solana,
    short_addr,
)

ACTION_COLORS = {
    "BUY": 0x2ECC71,
    "SELL": 0xE74C3C,
    "SWAP": 0xF1C40F,
}

MAX_DESCRIPTION_CHARS = 500


def _truncate(s: str, n: int) -> str:
    return s if len(s) <= n else s[: n - 1] + "…"


def fmt_signed(x: float, places: int) -> str:
    return f"{x:+,.{places}f}"


def fmt_amount(x: float) -> str:
    n = abs(x)
    if n >= 1e9:
        return f"{x / 1e9:.2f}B"
    if n >= 1e6:
        return f"{x / 1e6:.2f}M"
    if n >= 1e3:
        return f"{x / 1e3:.2f}K"
    return f"{x:.6g}"


def fmt_leg(leg: Optional[Leg]) -> str:
    if leg is None:
        return "—"
    name = leg.symbol or short_addr(leg.asset_id)
    return f"{fmt_amount(leg.amount)} {name} (`{short_addr(leg.asset_id)}`)"


def fmt_footer(ev: NormalizedEvent) -> str:
    footer = f"sig {short_addr(ev.signature)}"
    if ev.timestamp > 0:
        try:
            when = datetime.fromtimestamp(ev.timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return footer
        footer += f" · {when:%Y-%m-%d %H:%M:%S} UTC"
    return footer


def _focus_mint(decision: AlertDecision) -> str:
    # Token worth linking: what was bought on a BUY, what was sold otherwise.
    m = decision.movement
    first, second = (m.largest_in, m.largest_out) if decision.action != "SELL" else (m.largest_out, m.largest_in)
    for leg in (first, second):
        if leg and leg.asset_id:
            return leg.asset_id
    return ""


def compose_alert(
    decision: AlertDecision,
    ev: NormalizedEvent,
    ping_score: int = 0,
    ping_text: str = "",
) -> NotificationPayload:
    entity = decision.entity
    m = decision.movement

    fields = [
        NotificationField("Wallet", f"{entity.display_name} (`{short_addr(decision.actor)}`)", inline=False),
        NotificationField("Type", f"{ev.type}" + (f" via {ev.source}" if ev.source else "")),
        NotificationField("Score", str(decision.score)),
        NotificationField("SOL Δ", f"{fmt_signed(m.native_delta, 4)} SOL"),
        NotificationField("Stable Δ", fmt_signed(m.stable_delta, 2)),
        NotificationField("Largest in", fmt_leg(m.largest_in)),
        NotificationField("Largest out", fmt_leg(m.largest_out)),
    ]
    if decision.triggers:
        fields.append(NotificationField("Triggers", ", ".join(decision.triggers)))

    links = {}
    tx = explorer_tx_link(ev.signature)
    if tx:
        links["Solscan tx"] = tx
    links["Wallet"] = explorer_account_link(decision.actor)
    mint = _focus_mint(decision)
    if mint:
        links["Token"] = explorer_token_link(mint)
        links["Phantom"] = phantom_fungible_link_solana(mint)

    mention = ""
    if ping_text and ping_score > 0 and decision.score >= ping_score:
        mention = ping_text

    return NotificationPayload(
        title=f"{entity.icon} {entity.display_name} {decision.action}",
        description=_truncate(ev.description, MAX_DESCRIPTION_CHARS),
        fields=fields,
        links=links,
        color=ACTION_COLORS.get(decision.action, 0),
        mention=mention,
        footer=fmt_footer(ev),
    )
