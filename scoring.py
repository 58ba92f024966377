# scoring.py
from __future__ import annotations

from typing import Iterable, Tuple

from core.models import Band, NetMovement, ScoreBands


# Ascending (threshold, points) ladders. Every band crossed adds its points,
# so a huge move collects the lower bands too.
DEFAULT_NATIVE_BANDS: Tuple[Band, ...] = ((1, 1), (5, 1), (10, 2), (25, 2), (50, 3))          # SOL
DEFAULT_STABLE_BANDS: Tuple[Band, ...] = ((500, 1), (2500, 1), (10000, 2), (50000, 2), (100000, 3))  # USD
DEFAULT_LEG_BANDS: Tuple[Band, ...] = ((1e3, 1), (1e4, 1), (1e5, 1), (1e6, 2), (1e7, 2))    # token units
DEFAULT_LEG_PRESENCE = 1

DEFAULT_BANDS = ScoreBands(
    native=DEFAULT_NATIVE_BANDS,
    stable=DEFAULT_STABLE_BANDS,
    leg=DEFAULT_LEG_BANDS,
    leg_presence_points=DEFAULT_LEG_PRESENCE,
)


def parse_bands(text: str) -> Tuple[Band, ...]:
    """
    "1:1,5:1,10:2" -> ((1.0, 1), (5.0, 1), (10.0, 2)), sorted by threshold.
    Negative points are rejected: they would make the score non-monotonic.
    """
    bands = []
    for chunk in (text or "").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        threshold, sep, points = chunk.partition(":")
        if not sep:
            raise ValueError(f"band {chunk!r} must look like threshold:points")
        t, p = float(threshold), int(points)
        if p < 0:
            raise ValueError(f"band {chunk!r} has negative points")
        bands.append((t, p))
    return tuple(sorted(bands))


def ladder_points(magnitude: float, bands: Iterable[Band]) -> int:
    m = abs(magnitude)
    return sum(max(0, points) for threshold, points in bands if m >= threshold)


def compute_score(movement: NetMovement, bands: ScoreBands = DEFAULT_BANDS) -> int:
    score = 0
    score += ladder_points(movement.native_delta, bands.native)
    score += ladder_points(movement.stable_delta, bands.stable)

    leg = movement.largest_leg
    score += ladder_points(leg, bands.leg)
    if leg > 0:
        score += max(0, bands.leg_presence_points)

    return int(score)
