from __future__ import annotations

from dataclasses import dataclass

from core.models import NetMovement, Thresholds


@dataclass(frozen=True)
class TriggerResult:
    native: bool
    stable: bool
    leg: bool

    @property
    def fired(self) -> bool:
        return self.native or self.stable or self.leg

    def names(self) -> list[str]:
        return [n for n, hit in (("native", self.native), ("stable", self.stable), ("leg", self.leg)) if hit]


def _passes(magnitude: float, minimum: float) -> bool:
    # A threshold of 0 (or less) switches the dimension off, which lets it pass.
    if minimum <= 0:
        return True
    return abs(magnitude) >= minimum


def evaluate_triggers(movement: NetMovement, thresholds: Thresholds) -> TriggerResult:
    return TriggerResult(
        native=_passes(movement.native_delta, thresholds.min_native),
        stable=_passes(movement.stable_delta, thresholds.min_stable),
        leg=_passes(movement.largest_leg, thresholds.min_leg),
    )


def should_alert(movement: NetMovement, thresholds: Thresholds) -> bool:
    return evaluate_triggers(movement, thresholds).fired
