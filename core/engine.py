from __future__ import annotations

import time
from typing import Any, Callable, Iterable

from chains.solana_helius import normalize_event
from core.composer import compose_alert
from core.cooldown import CooldownGate
from core.ledger import classify_action, compute_net_movement
from core.models import AlertDecision, BatchSummary, NormalizedEvent, ScoreBands, Thresholds
from core.notify import NotificationError, Sink
from core.triggers import evaluate_triggers
from log import get_logger
from scoring import DEFAULT_BANDS, compute_score
from watchlist import WatchList

log = get_logger(__name__)


class AlertEngine:
    """
    Runs one webhook batch through the filter chain:
    type -> tracked wallet -> cooldown -> triggers -> emit.

    Every filter drops the current event and moves on; nothing short of an
    unavailable watch list aborts the batch.
    """

    def __init__(
        self,
        watchlist: Callable[[], WatchList],
        sink: Sink,
        cooldown: CooldownGate,
        thresholds: Thresholds,
        bands: ScoreBands = DEFAULT_BANDS,
        ping_text: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self.watchlist = watchlist
        self.sink = sink
        self.cooldown = cooldown
        self.thresholds = thresholds
        self.bands = bands
        self.ping_text = ping_text
        self.clock = clock

    def _type_watched(self, ev: NormalizedEvent) -> bool:
        watched = self.thresholds.watch_types
        return not watched or ev.type in watched

    def process_batch(self, raw_events: Iterable[Any]) -> BatchSummary:
        events = list(raw_events)
        summary = BatchSummary(received=len(events))

        # Raises WatchListUnavailable; without the list nothing can be filtered.
        wl = self.watchlist()

        cap = self.thresholds.max_alerts_per_batch
        for i, raw in enumerate(events):
            if cap > 0 and summary.emitted >= cap:
                log.info("batch_cap_reached", cap=cap, skipped=len(events) - i)
                break
            try:
                self._process_one(raw, wl, summary)
            except Exception:
                summary.errors += 1
                log.exception("event_failed")

        log.info("batch_processed", **summary.as_dict())
        return summary

    def _process_one(self, raw: Any, wl: WatchList, summary: BatchSummary) -> None:
        ev = normalize_event(raw)

        if not self._type_watched(ev):
            return
        summary.type_matched += 1

        entity = wl.resolve(ev.actor)
        if entity is None:
            return
        summary.tracked += 1

        now = self.clock()
        if self.cooldown.is_suppressed(ev.actor, now):
            summary.cooldown_suppressed += 1
            log.debug("cooldown_suppressed", actor=ev.actor, signature=ev.signature)
            return

        t = self.thresholds
        movement = compute_net_movement(ev, ev.actor, t.stable_mints, t.native_decimals)
        triggers = evaluate_triggers(movement, t)
        if not triggers.fired:
            summary.trigger_filtered += 1
            return

        decision = AlertDecision(
            entity=entity,
            actor=ev.actor,
            movement=movement,
            score=compute_score(movement, self.bands),
            action=classify_action(movement, t.native_dust),
            triggers=triggers.names(),
        )
        payload = compose_alert(decision, ev, ping_score=t.ping_score, ping_text=self.ping_text)

        # Claim right before sending: the window starts on the attempt, delivered
        # or not, and a concurrent batch for the same wallet loses the race.
        if not self.cooldown.claim(ev.actor, now):
            summary.cooldown_suppressed += 1
            return

        summary.emitted += 1
        try:
            self.sink.send(payload)
        except NotificationError as e:
            summary.send_failures += 1
            log.warning("alert_failed", actor=ev.actor, signature=ev.signature, error=str(e))
            return

        log.info(
            "alert_sent",
            wallet=entity.display_name,
            action=decision.action,
            score=decision.score,
            signature=ev.signature,
        )
