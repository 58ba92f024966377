"""
Tests for batch processing: filter order, counters, cooldown and cap.
"""

import pytest

from core.models import BatchSummary
from watchlist import WatchListUnavailable

from conftest import BONK, USDC, W1, W2, RecordingSink, swap_event


class TestScenarios:

    def test_tracked_swap_emits_buy(self, make_engine, sink):
        engine = make_engine(min_native=0.25)
        summary = engine.process_batch([swap_event()])

        assert summary == BatchSummary(received=1, type_matched=1, tracked=1, emitted=1)
        assert len(sink.sent) == 1
        assert sink.sent[0].title == "🐋 Whale One BUY"
        fields = {f.name: f.value for f in sink.sent[0].fields}
        assert fields["SOL Δ"] == "-2.0000 SOL"

    def test_disabled_dimensions_pass_through(self, make_engine, sink):
        engine = make_engine(min_native=5, min_stable=0, min_leg=0)
        summary = engine.process_batch([swap_event()])
        assert summary.emitted == 1
        assert summary.trigger_filtered == 0

    def test_trigger_filtered(self, make_engine, sink):
        engine = make_engine(min_native=5, min_stable=500, min_leg=1000)
        summary = engine.process_batch([swap_event()])
        assert summary.trigger_filtered == 1
        assert summary.emitted == 0
        assert sink.sent == []


class TestFilters:

    def test_untracked_and_unwatched_types(self, make_engine, sink):
        engine = make_engine()
        summary = engine.process_batch([
            swap_event(actor="stranger"),
            swap_event(type="TRANSFER"),
            {"type": "SWAP"},
            "garbage",
        ])
        assert summary.received == 4
        assert summary.type_matched == 2
        assert summary.tracked == 0
        assert summary.emitted == 0

    def test_type_match_is_case_insensitive(self, make_engine):
        summary = make_engine().process_batch([swap_event(type="swap")])
        assert summary.emitted == 1

    def test_empty_watch_types_accepts_everything(self, make_engine):
        summary = make_engine(watch_types=frozenset()).process_batch([swap_event(type="TRANSFER")])
        assert summary.emitted == 1

    def test_watchlist_unavailable_is_fatal(self, make_engine, sink):
        engine = make_engine()

        def broken():
            raise WatchListUnavailable("gone")

        engine.watchlist = broken
        with pytest.raises(WatchListUnavailable):
            engine.process_batch([swap_event()])
        assert sink.sent == []


class TestCooldown:

    def test_same_wallet_within_window_alerts_once(self, make_engine, sink, clock):
        engine = make_engine(cooldown_seconds=600)
        summary = engine.process_batch([swap_event(signature="a"), swap_event(signature="b")])
        assert summary.emitted == 1
        assert summary.cooldown_suppressed == 1

        clock.advance(300)
        assert engine.process_batch([swap_event(signature="c")]).cooldown_suppressed == 1

    def test_spaced_beyond_window_both_emit(self, make_engine, sink, clock):
        engine = make_engine(cooldown_seconds=600)
        engine.process_batch([swap_event(signature="a")])
        clock.advance(601)
        engine.process_batch([swap_event(signature="b")])
        assert len(sink.sent) == 2

    def test_cooldown_is_per_wallet(self, make_engine, sink):
        summary = make_engine().process_batch([swap_event(actor=W1), swap_event(actor=W2)])
        assert summary.emitted == 2

    def test_cooldown_checked_before_triggers(self, make_engine, sink):
        engine = make_engine(min_native=1, min_stable=1e9, min_leg=1e9)
        summary = engine.process_batch([
            swap_event(signature="big"),
            swap_event(signature="tiny", lamports=1),
        ])
        assert summary.emitted == 1
        assert summary.cooldown_suppressed == 1
        assert summary.trigger_filtered == 0

    def test_filtered_event_does_not_start_cooldown(self, make_engine, sink):
        engine = make_engine(min_native=1, min_stable=1e9, min_leg=1e9)
        summary = engine.process_batch([
            swap_event(signature="tiny", lamports=1),
            swap_event(signature="big"),
        ])
        assert summary.trigger_filtered == 1
        assert summary.emitted == 1

    def test_disabled_cooldown(self, make_engine, sink):
        summary = make_engine(cooldown_seconds=0).process_batch([swap_event(), swap_event()])
        assert summary.emitted == 2


class TestCapAndFailures:

    def test_cap_limits_alerts(self, make_engine, sink):
        engine = make_engine(max_alerts_per_batch=2, cooldown_seconds=0)
        summary = engine.process_batch([swap_event(signature=str(i)) for i in range(5)])
        assert summary.received == 5
        assert summary.emitted == 2
        assert len(sink.sent) == 2

    def test_no_cap_when_zero(self, make_engine):
        engine = make_engine(max_alerts_per_batch=0, cooldown_seconds=0)
        assert engine.process_batch([swap_event() for _ in range(7)]).emitted == 7

    def test_send_failure_still_starts_cooldown(self, make_engine, watchlist, clock):
        engine = make_engine()
        engine.sink = RecordingSink(fail=True)
        summary = engine.process_batch([swap_event(signature="a"), swap_event(signature="b")])
        assert summary.emitted == 1
        assert summary.send_failures == 1
        assert summary.cooldown_suppressed == 1
        assert engine.cooldown.last_alert(W1) == clock.now

    def test_unexpected_error_does_not_abort_batch(self, make_engine, sink):
        engine = make_engine()

        class Exploding(RecordingSink):
            def send(self, payload):
                if not self.sent:
                    self.sent.append(payload)
                    raise KeyError("boom")
                super().send(payload)

        engine.sink = Exploding()
        summary = engine.process_batch([swap_event(actor=W1), swap_event(actor=W2)])
        assert summary.errors == 1
        assert len(engine.sink.sent) == 2


class TestMovementFromTokens:

    def test_stable_sell_with_largest_legs(self, make_engine, sink):
        ev = {
            "type": "SWAP",
            "signature": "sell1",
            "feePayer": W1,
            "nativeTransfers": [{"fromUserAccount": W1, "toUserAccount": "fee", "amount": 5000}],
            "tokenTransfers": [
                {"mint": BONK, "fromUserAccount": W1, "toUserAccount": "pool", "tokenAmount": 2_000_000, "tokenSymbol": "BONK"},
                {"mint": USDC, "fromUserAccount": "pool", "toUserAccount": W1, "tokenAmount": 1200, "tokenSymbol": "USDC"},
            ],
        }
        summary = make_engine(min_native=1, min_stable=1000, min_leg=1e9).process_batch([ev])
        assert summary.emitted == 1
        p = sink.sent[0]
        assert p.title.endswith("SELL")
        fields = {f.name: f.value for f in p.fields}
        assert fields["Stable Δ"] == "+1,200.00"
        assert fields["Triggers"] == "stable"
