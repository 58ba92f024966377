from __future__ import annotations

import math
from typing import Any, Dict, List

from core.models import FungibleTransfer, NativeTransfer, NormalizedEvent


UNKNOWN_TYPE = "UNKNOWN"
NO_SIGNATURE = "n/a"


def as_event_list(payload: Any) -> List[Dict[str, Any]]:
    """Helius can POST an array of txs, a single tx, or a wrapped list; be permissive."""
    if isinstance(payload, list):
        return [x for x in payload if isinstance(x, dict)]
    if isinstance(payload, dict):
        txs = payload.get("transactions")
        if isinstance(txs, list):
            return [x for x in txs if isinstance(x, dict)]
        return [payload]
    return []


def safe_get(d: Any, *path: Any, default: Any = None) -> Any:
    """Walk dict keys / list indexes; any miss returns default."""
    cur = d
    for p in path:
        if isinstance(p, int):
            if not isinstance(cur, list) or not (0 <= p < len(cur)):
                return default
        elif not isinstance(cur, dict) or p not in cur:
            return default
        cur = cur[p]
    return cur if cur is not None else default


def _first_str(*candidates: Any) -> str:
    for c in candidates:
        if isinstance(c, str) and c.strip():
            return c
    return ""


def _list_field(tx: Dict[str, Any], *keys: str) -> List[Dict[str, Any]]:
    for k in keys:
        v = tx.get(k)
        if isinstance(v, list):
            return [x for x in v if isinstance(x, dict)]
    return []


def _to_float(v: Any) -> float:
    # NaN, inf and booleans are malformed amounts, not values
    if isinstance(v, bool):
        return 0.0
    try:
        f = float(v or 0.0)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return f if math.isfinite(f) else 0.0


def _to_int(v: Any) -> int:
    if isinstance(v, bool):
        return 0
    if isinstance(v, int):
        return v
    return int(_to_float(v))


def _account_key(key: Any) -> str:
    # accountKeys entries are plain strings in raw payloads, {"pubkey": ...} in parsed ones
    if isinstance(key, dict):
        return _first_str(key.get("pubkey"))
    return _first_str(key)


def resolve_actor(tx: Dict[str, Any]) -> str:
    return _first_str(
        tx.get("actor"),
        tx.get("feePayer"),
        safe_get(tx, "accountData", 0, "account"),
        _account_key(safe_get(tx, "transaction", "message", "accountKeys", 0)),
    )


def resolve_signature(tx: Dict[str, Any]) -> str:
    return _first_str(
        tx.get("signature"),
        tx.get("transactionSignature"),
        safe_get(tx, "transaction", "signatures", 0),
    ) or NO_SIGNATURE


def resolve_type(tx: Dict[str, Any]) -> str:
    ttype = _first_str(tx.get("type"), tx.get("transactionType")) or UNKNOWN_TYPE
    return ttype.upper()


def normalize_event(tx: Any) -> NormalizedEvent:
    """
    Pull (signature, type, actor, transfers) out of an enhanced or raw Helius
    transaction. Never raises: anything missing or mis-shaped falls back to
    an empty value and is filtered out further down the pipeline.
    """
    if not isinstance(tx, dict):
        tx = {}

    native = [
        NativeTransfer(
            from_account=_first_str(n.get("fromUserAccount"), n.get("from")),
            to_account=_first_str(n.get("toUserAccount"), n.get("to")),
            amount=_to_int(n.get("amount")),
        )
        for n in _list_field(tx, "nativeTransfers")
    ]

    fungible = [
        FungibleTransfer(
            asset_id=_first_str(t.get("mint"), t.get("assetId")).strip(),
            from_account=_first_str(t.get("fromUserAccount"), t.get("from")),
            to_account=_first_str(t.get("toUserAccount"), t.get("to")),
            amount=_to_float(t.get("tokenAmount", t.get("amount"))),
            symbol=_first_str(t.get("tokenSymbol"), t.get("symbol")).upper(),
        )
        for t in _list_field(tx, "fungibleTransfers", "tokenTransfers")
    ]

    return NormalizedEvent(
        signature=resolve_signature(tx),
        type=resolve_type(tx),
        actor=resolve_actor(tx),
        native_transfers=native,
        fungible_transfers=fungible,
        timestamp=_to_int(tx.get("timestamp") or tx.get("blockTime")),
        description=_first_str(tx.get("description")).strip(),
        source=_first_str(tx.get("source")),
    )
