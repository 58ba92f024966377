from __future__ import annotations

from typing import AbstractSet, Optional

from core.models import FungibleTransfer, Leg, NetMovement, NormalizedEvent


def _leg(t: FungibleTransfer) -> Leg:
    return Leg(asset_id=t.asset_id, amount=t.amount, symbol=t.symbol)


def compute_net_movement(
    ev: NormalizedEvent,
    subject: str,
    stable_mints: AbstractSet[str],
    native_decimals: int = 9,
) -> NetMovement:
    """
    Net flows for subject: incoming positive, outgoing negative.

    Native amounts arrive in lamports and are scaled to SOL. Stable delta only
    counts mints in stable_mints. Largest in/out legs look at every fungible
    transfer; ties keep the first record seen. A transfer from subject to
    subject counts on both sides.
    """
    lamports = 0
    for n in ev.native_transfers:
        if not n.amount:
            continue
        if n.from_account == subject:
            lamports -= n.amount
        if n.to_account == subject:
            lamports += n.amount

    stable = 0.0
    largest_in: Optional[Leg] = None
    largest_out: Optional[Leg] = None

    for t in ev.fungible_transfers:
        if not t.amount:
            continue

        if t.to_account == subject:
            if t.asset_id in stable_mints:
                stable += t.amount
            if largest_in is None or t.amount > largest_in.amount:
                largest_in = _leg(t)

        if t.from_account == subject:
            if t.asset_id in stable_mints:
                stable -= t.amount
            if largest_out is None or t.amount > largest_out.amount:
                largest_out = _leg(t)

    return NetMovement(
        native_delta=lamports / float(10 ** native_decimals),
        stable_delta=stable,
        largest_in=largest_in,
        largest_out=largest_out,
    )


def classify_action(movement: NetMovement, native_dust: float = 0.0) -> str:
    """
    Quote assets are SOL and stables. Paying quote out only is a BUY,
    taking quote in only is a SELL, anything else is a SWAP. Native moves
    below native_dust (fees, rent) are ignored.
    """
    native = movement.native_delta if abs(movement.native_delta) >= native_dust else 0.0
    quote = [d for d in (native, movement.stable_delta) if d]

    if quote and all(d < 0 for d in quote):
        return "BUY"
    if quote and all(d > 0 for d in quote):
        return "SELL"
    return "SWAP"
