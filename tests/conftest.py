import pytest

from core.cooldown import CooldownGate
from core.engine import AlertEngine
from core.models import Thresholds, TrackedEntity
from core.notify import NotificationError
from watchlist import WatchList


W1 = "W1"
W2 = "W2"
USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
BONK = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


class RecordingSink:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def send(self, payload):
        self.sent.append(payload)
        if self.fail:
            raise NotificationError("webhook down")


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def swap_event(actor=W1, lamports=2_000_000_000, signature="sig1", **extra):
    ev = {
        "type": "SWAP",
        "signature": signature,
        "actor": actor,
        "nativeTransfers": [{"from": actor, "to": "X", "amount": lamports}],
    }
    ev.update(extra)
    return ev


@pytest.fixture
def watchlist():
    return WatchList([
        TrackedEntity(address=W1, display_name="Whale One", icon="🐋"),
        TrackedEntity(address=W2, display_name="Whale Two", icon="🦈"),
    ])


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_engine(watchlist, sink, clock):
    def _make(**overrides):
        t = dict(
            min_native=0.25,
            min_stable=0,
            min_leg=0,
            cooldown_seconds=600,
            max_alerts_per_batch=5,
            watch_types=frozenset({"SWAP"}),
            stable_mints=frozenset({USDC}),
            ping_score=6,
        )
        t.update(overrides)
        thresholds = Thresholds(**t)
        return AlertEngine(
            watchlist=lambda: watchlist,
            sink=sink,
            cooldown=CooldownGate(thresholds.cooldown_seconds),
            thresholds=thresholds,
            ping_text="@here",
            clock=clock,
        )
    return _make
