"""
Hypothesis-based property tests.

Boundaries fuzzed here:
- Distribution: arbitrary window sizes, ratios, percents and prices
- Generation window: arbitrary sequences of priced and zero-profit transfers
- Custody: value held always equals pooled royalty minus claims paid

Boundaries not fuzzed here (covered by explicit tests):
- Authorization and listing state machine (test_sale_orchestrator)
- Rail failures and rollback (test_sale_orchestrator, test_kernel_stores)
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from nfr_engines.distribution import DistributionEngine
from nfr_kernel.domain.fixed_point import SCALE, ZERO, FixedPoint, fixed_sum
from nfr_kernel.domain.records import FRParameters, RoyaltyRecord
from nfr_services.custody import CustodyAccount
from nfr_services.registry import InMemoryAssetRegistry
from nfr_services.sale_orchestrator import SaleOrchestrator

percents = st.integers(min_value=1, max_value=SCALE).map(FixedPoint.from_raw)
ratios = st.integers(min_value=SCALE, max_value=3 * SCALE).map(FixedPoint.from_raw)
prices = st.integers(min_value=0, max_value=1_000 * SCALE).map(FixedPoint.from_raw)
owners = st.sampled_from(["alice", "bob", "carol", "dave", "erin", "frank"])


@st.composite
def records(draw):
    generations = draw(st.integers(min_value=1, max_value=20))
    window = draw(st.lists(owners, min_size=1, max_size=generations))
    params = FRParameters(generations, draw(percents), draw(ratios))
    return RoyaltyRecord.initial(params, window[0]).evolve(
        last_sold_price=draw(prices),
        owner_amount=len(window),
        addresses_in_fr=tuple(window),
    )


class TestDistributionProperties:
    @given(record=records(), sale_price=prices)
    @settings(max_examples=200, deadline=None)
    def test_shares_never_exceed_pool(self, record, sale_price):
        """Shares, dust and pool always balance."""
        result = DistributionEngine().distribute(record=record, sale_price=sale_price)

        assert result.allocated == fixed_sum(s.amount for s in result.shares)
        assert result.allocated <= result.pool
        assert result.allocated + result.dust == result.pool
        assert result.pool <= result.profit

    @given(record=records(), sale_price=prices)
    @settings(max_examples=200, deadline=None)
    def test_dust_below_one_unit_per_position(self, record, sale_price):
        """Dust is below one base unit per window position."""
        result = DistributionEngine().distribute(record=record, sale_price=sale_price)
        assert result.dust.raw < max(1, len(result.shares))

    @given(record=records(), sale_price=prices)
    @settings(max_examples=200, deadline=None)
    def test_older_positions_never_get_less(self, record, sale_price):
        """Shares never increase from oldest to newest."""
        result = DistributionEngine().distribute(record=record, sale_price=sale_price)
        amounts = [s.amount for s in result.shares]
        assert amounts == sorted(amounts, reverse=True)

    @given(record=records(), sale_price=prices)
    @settings(max_examples=100, deadline=None)
    def test_no_royalty_without_profit(self, record, sale_price):
        """No profit means no pool and no shares."""
        result = DistributionEngine().distribute(record=record, sale_price=sale_price)
        if sale_price <= record.last_sold_price:
            assert result.pool == ZERO
            assert result.shares == ()


transfers = st.lists(
    st.tuples(owners, st.one_of(st.none(), prices)),
    max_size=25,
)


class TestOrchestratorProperties:
    @given(
        generations=st.integers(min_value=1, max_value=12),
        percent=percents,
        ratio=ratios,
        steps=transfers,
    )
    @settings(max_examples=75, deadline=None)
    def test_window_and_custody_invariants(self, generations, percent, ratio, steps):
        """Window bound and custody balance hold across any transfer sequence."""
        registry, custody = InMemoryAssetRegistry(), CustodyAccount()
        orchestrator = SaleOrchestrator(registry, custody)
        asset_id = orchestrator.mint("minter", "minter", generations, percent, ratio)

        for buyer, price in steps:
            seller = registry.owner_of(asset_id)
            if price is None:
                orchestrator.transfer_zero_profit(seller, seller, buyer, asset_id)
            else:
                orchestrator.transfer_with_price(seller, seller, buyer, asset_id, price, price)

            record = orchestrator.selector.record(asset_id)
            assert len(record.addresses_in_fr) == min(record.owner_amount, generations)
            assert record.addresses_in_fr[-1] == buyer

        assert orchestrator.retrieve_fr_info(asset_id)[4] == len(steps) + 1
        assert orchestrator.selector.audit_invariants() == []
        summary = orchestrator.selector.custody_summary()
        assert custody.held == summary.total_pooled

        claimed = ZERO
        for owner in ["minter", "alice", "bob", "carol", "dave", "erin", "frank"]:
            if orchestrator.retrieve_allotted_fr(owner).is_positive:
                claimed = claimed + orchestrator.release_fr(owner)

        assert claimed == summary.total_allotted
        assert custody.held == summary.total_pooled - claimed
