"""
Tests for DistributionEngine.

Covers profit clamping, pool truncation, geometric weights (oldest first),
floor shares, dust accounting and the NFR_ENGINE_TRACE record.
"""

import logging

import pytest

from nfr_engines.distribution import DistributionEngine
from nfr_engines.tracer import sale_fingerprint
from nfr_kernel.domain.fixed_point import ONE, ZERO, FixedPoint
from nfr_kernel.domain.records import FRParameters, RoyaltyRecord
from nfr_kernel.exceptions import InvariantViolationError


def _record(window, *, percent="0.16", ratio="1.19", last="0", generations=10):
    params = FRParameters.of(generations, percent, ratio)
    return RoyaltyRecord.initial(params, window[0]).evolve(
        last_sold_price=FixedPoint.of(last),
        owner_amount=len(window),
        addresses_in_fr=tuple(window),
    )


class TestProfitAndPool:
    def test_profit_is_difference(self):
        """Test profit is sale price minus last sold price."""
        assert DistributionEngine.profit(FixedPoint.of("1.5"), ONE) == FixedPoint.of("0.5")

    def test_loss_clamps_to_zero(self):
        """Test a sale below the last price has zero profit."""
        assert DistributionEngine.profit(FixedPoint.of("0.5"), ONE) == ZERO

    def test_pool_is_percent_of_profit(self):
        """Test the pool is the configured share of profit."""
        assert DistributionEngine.pool(ONE, FixedPoint.of("0.16")) == FixedPoint.of("0.16")

    def test_pool_truncates(self):
        """Test the pool is floored to the smallest unit."""
        assert DistributionEngine.pool(FixedPoint.from_raw(3), FixedPoint.of("0.5")).raw == 1


class TestWeights:
    def test_newest_weighs_one(self):
        """Test the newest window position weighs exactly one."""
        weights = DistributionEngine.weights(FixedPoint.of("1.19"), 3)
        assert weights[-1] == ONE

    def test_oldest_first_geometric(self):
        """Test weights grow geometrically toward the oldest position."""
        weights = DistributionEngine.weights(FixedPoint.of("1.19"), 3)
        assert weights == (FixedPoint.of("1.4161"), FixedPoint.of("1.19"), ONE)

    def test_ratio_one_is_flat(self):
        """Test a ratio of one gives equal weights."""
        assert DistributionEngine.weights(ONE, 4) == (ONE, ONE, ONE, ONE)

    def test_empty(self):
        """Test an empty window has no weights."""
        assert DistributionEngine.weights(ONE, 0) == ()


class TestDistribute:
    def setup_method(self):
        self.engine = DistributionEngine()

    def test_single_owner_receives_whole_pool(self):
        """Test a one-owner window receives the whole pool."""
        result = self.engine.distribute(record=_record(["minter"]), sale_price=ONE)

        assert result.profit == ONE
        assert result.pool == FixedPoint.of("0.16")
        assert len(result.shares) == 1
        assert result.amount_for("minter") == FixedPoint.of("0.16")
        assert result.dust == ZERO

    def test_no_profit_no_shares(self):
        """Test a loss produces no pool and no shares."""
        record = _record(["minter", "alice"], last="1")
        result = self.engine.distribute(record=record, sale_price=FixedPoint.of("0.5"))

        assert not result.has_royalty
        assert result.pool == ZERO
        assert result.shares == ()
        assert result.previous_price == ONE

    def test_equal_sale_price_no_royalty(self):
        """Test reselling at the same price produces no royalty."""
        record = _record(["minter", "alice"], last="1")
        result = self.engine.distribute(record=record, sale_price=ONE)
        assert result.pool == ZERO

    def test_oldest_position_gets_largest_share(self):
        """Test the oldest owner receives the largest share."""
        window = ["a", "b", "c", "d"]
        result = self.engine.distribute(record=_record(window), sale_price=FixedPoint.of(10))

        amounts = [s.amount for s in result.shares]
        assert amounts == sorted(amounts, reverse=True)
        assert amounts[0] > amounts[-1]
        assert [s.owner for s in result.shares] == window

    def test_equal_weights_leave_dust(self):
        """Test an indivisible pool leaves dust in custody."""
        record = _record(["a", "b", "c"], percent="1", ratio="1")
        result = self.engine.distribute(record=record, sale_price=ONE)

        assert result.pool == ONE
        for share in result.shares:
            assert share.amount.raw == 333_333_333_333_333_333
        assert result.allocated.raw == 999_999_999_999_999_999
        assert result.dust.raw == 1

    def test_allocated_plus_dust_is_pool(self):
        """Test allocated shares plus dust equal the pool."""
        record = _record(["a", "b", "c", "d", "e", "f", "g"], ratio="1.37")
        result = self.engine.distribute(record=record, sale_price=FixedPoint.of("7.77"))

        assert result.allocated + result.dust == result.pool
        assert result.dust.raw < len(result.shares)

    def test_repeated_owner_accumulates(self):
        """Test an owner holding several positions is credited for each."""
        record = _record(["a", "b", "a"], percent="1", ratio="1")
        result = self.engine.distribute(record=record, sale_price=FixedPoint.of(3))
        assert result.amount_for("a") == FixedPoint.of(2)
        assert result.amount_for("b") == ONE

    def test_record_not_mutated(self):
        """Test distribute leaves the input record unchanged."""
        record = _record(["a", "b"])
        before = record.as_tuple()
        self.engine.distribute(record=record, sale_price=FixedPoint.of(5))
        assert record.as_tuple() == before

    def test_empty_window_is_invariant_violation(self):
        """Test distributing over an empty window is an invariant violation."""
        with pytest.raises(InvariantViolationError):
            self.engine.distribute(record=RoyaltyRecord.empty(), sale_price=ONE)


class TestEngineTrace:
    def test_trace_carries_result_fingerprint(self, caplog):
        """The trace record and the result share one input fingerprint."""
        caplog.set_level(logging.INFO, logger="nfr_kernel")
        result = DistributionEngine().distribute(record=_record(["a"]), sale_price=ONE)

        traces = [r for r in caplog.records if r.getMessage() == "NFR_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0].engine_name == "distribution"
        assert traces[0].input_fingerprint == result.input_fingerprint
        assert len(result.input_fingerprint) == 16

    def test_fingerprint_ignores_amount_spelling(self):
        """Equal amounts written differently fingerprint the same."""
        record = _record(["a", "b"])
        assert sale_fingerprint(record, FixedPoint.of("1.0")) == sale_fingerprint(record, ONE)

    def test_fingerprint_tracks_window_and_price(self):
        """A different window or price gives a different fingerprint."""
        base = sale_fingerprint(_record(["a", "b"]), ONE)
        assert sale_fingerprint(_record(["a", "c"]), ONE) != base
        assert sale_fingerprint(_record(["a", "b"]), FixedPoint.of(2)) != base
        assert sale_fingerprint(_record(["a", "b"], last="0.5"), ONE) != base

    def test_zero_profit_result_is_fingerprinted(self):
        """Results without a royalty still carry their fingerprint."""
        record = _record(["a"], last="2")
        result = DistributionEngine().distribute(record=record, sale_price=ONE)
        assert result.input_fingerprint == sale_fingerprint(record, ONE)
