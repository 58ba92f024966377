from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple


Band = Tuple[float, int]        # (threshold, points)


@dataclass(frozen=True)
class TrackedEntity:
    """A wallet on the watch list."""
    address: str                # base58 wallet address, matched byte-for-byte
    display_name: str
    icon: str                   # emoji shown in the alert title


@dataclass(frozen=True)
class NativeTransfer:
    from_account: str
    to_account: str
    amount: int                 # smallest native unit (lamports)


@dataclass(frozen=True)
class FungibleTransfer:
    asset_id: str               # mint
    from_account: str
    to_account: str
    amount: float               # UI units (already decimals-adjusted)
    symbol: str = ""


@dataclass
class NormalizedEvent:
    signature: str              # "n/a" when the payload carries none
    type: str                   # upper-cased, "UNKNOWN" when absent
    actor: str                  # "" when unresolvable
    native_transfers: List[NativeTransfer] = field(default_factory=list)
    fungible_transfers: List[FungibleTransfer] = field(default_factory=list)
    timestamp: int = 0          # unix seconds (best effort)
    description: str = ""
    source: str = ""            # e.g. "JUPITER", "RAYDIUM"


@dataclass(frozen=True)
class Leg:
    asset_id: str
    amount: float
    symbol: str = ""


@dataclass
class NetMovement:
    native_delta: float = 0.0   # display units, signed
    stable_delta: float = 0.0   # display units, signed
    largest_in: Optional[Leg] = None
    largest_out: Optional[Leg] = None

    @property
    def largest_leg(self) -> float:
        sizes = [abs(leg.amount) for leg in (self.largest_in, self.largest_out) if leg]
        return max(sizes) if sizes else 0.0


@dataclass(frozen=True)
class Thresholds:
    min_native: float = 0.25
    min_stable: float = 0.0
    min_leg: float = 0.0
    cooldown_seconds: float = 600.0
    max_alerts_per_batch: int = 5       # <= 0 means no cap
    watch_types: FrozenSet[str] = frozenset({"SWAP"})   # empty means every type
    stable_mints: FrozenSet[str] = frozenset()
    ping_score: int = 6
    native_decimals: int = 9
    native_dust: float = 0.01           # ignored when classifying BUY/SELL


@dataclass(frozen=True)
class ScoreBands:
    native: Tuple[Band, ...] = ()
    stable: Tuple[Band, ...] = ()
    leg: Tuple[Band, ...] = ()
    leg_presence_points: int = 1


@dataclass
class AlertDecision:
    entity: TrackedEntity
    actor: str
    movement: NetMovement
    score: int
    action: str                 # "BUY" | "SELL" | "SWAP"
    triggers: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class NotificationField:
    name: str
    value: str
    inline: bool = True


@dataclass
class NotificationPayload:
    title: str
    description: str = ""
    fields: List[NotificationField] = field(default_factory=list)
    links: Dict[str, str] = field(default_factory=dict)     # label -> url
    color: int = 0
    mention: str = ""           # prepended outside the embed, e.g. "@here"
    footer: str = ""


@dataclass
class BatchSummary:
    received: int = 0
    type_matched: int = 0
    tracked: int = 0
    cooldown_suppressed: int = 0
    trigger_filtered: int = 0
    emitted: int = 0
    send_failures: int = 0
    errors: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)
