"""
Records -- immutable royalty and listing state per asset.

Responsibility:
    Defines FRParameters (the validated triple chosen at mint),
    RoyaltyRecord (generation window and sale history of one asset) and
    ListingEntry (the asset's current offer). Stores hold these values and
    replace them wholesale on every mutation.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - FRParameters: num_generations > 0, 0 < percent_of_profit <= 1,
      successive_ratio >= 1. Violations raise InvalidParametersError.
    - RoyaltyRecord.addresses_in_fr is a tuple, oldest first.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from nfr_kernel.domain.fixed_point import ONE, ZERO, FixedPoint, Fraction
from nfr_kernel.exceptions import InvalidParametersError

AssetId = int
OwnerId = str

MAX_GENERATIONS = 2**32 - 1


@dataclass(frozen=True, slots=True)
class FRParameters:
    """
    Validated FR configuration of an asset.

    Contract:
        Construction validates all three fields; an instance is always legal.
    Guarantees:
        - ``0 < num_generations <= MAX_GENERATIONS``
        - ``0 < percent_of_profit <= 1``
        - ``successive_ratio >= 1``
    """

    num_generations: int
    percent_of_profit: Fraction
    successive_ratio: Fraction

    def __post_init__(self) -> None:
        if isinstance(self.num_generations, bool) or not isinstance(self.num_generations, int):
            raise InvalidParametersError(
                "num_generations", repr(self.num_generations), "must be an integer"
            )
        if not 0 < self.num_generations <= MAX_GENERATIONS:
            raise InvalidParametersError(
                "num_generations", str(self.num_generations), "must be in [1, 2**32-1]"
            )

        percent = _as_fraction("percent_of_profit", self.percent_of_profit)
        if percent.is_zero or percent > ONE:
            raise InvalidParametersError(
                "percent_of_profit", str(percent), "must be in (0, 1]"
            )
        object.__setattr__(self, "percent_of_profit", percent)

        ratio = _as_fraction("successive_ratio", self.successive_ratio)
        if ratio < ONE:
            raise InvalidParametersError(
                "successive_ratio", str(ratio), "must be at least 1"
            )
        object.__setattr__(self, "successive_ratio", ratio)

    @classmethod
    def of(cls, num_generations, percent_of_profit, successive_ratio) -> FRParameters:
        """Build from loosely typed input (str/Decimal/FixedPoint fractions)."""
        return cls(
            num_generations=num_generations,
            percent_of_profit=percent_of_profit,
            successive_ratio=successive_ratio,
        )


def _as_fraction(name: str, value) -> FixedPoint:
    try:
        return FixedPoint.of(value)
    except (TypeError, ValueError) as e:
        raise InvalidParametersError(name, repr(value), str(e)) from e


@dataclass(frozen=True, slots=True)
class RoyaltyRecord:
    """
    FR state of one asset.

    Contract:
        A zero-valued record (``RoyaltyRecord.empty()``) stands for "no
        record": never minted, or burned.
    Guarantees:
        - ``addresses_in_fr`` is ordered oldest first.
    Non-goals:
        - Does not enforce the window bound itself; RoyaltyStore does.
    """

    num_generations: int = 0
    percent_of_profit: Fraction = ZERO
    successive_ratio: Fraction = ZERO
    last_sold_price: FixedPoint = ZERO
    owner_amount: int = 0
    addresses_in_fr: tuple[OwnerId, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> RoyaltyRecord:
        return cls()

    @classmethod
    def initial(cls, params: FRParameters, initial_owner: OwnerId) -> RoyaltyRecord:
        return cls(
            num_generations=params.num_generations,
            percent_of_profit=params.percent_of_profit,
            successive_ratio=params.successive_ratio,
            last_sold_price=ZERO,
            owner_amount=1,
            addresses_in_fr=(initial_owner,),
        )

    @property
    def exists(self) -> bool:
        return self.num_generations > 0

    @property
    def parameters(self) -> FRParameters:
        return FRParameters(
            num_generations=self.num_generations,
            percent_of_profit=self.percent_of_profit,
            successive_ratio=self.successive_ratio,
        )

    def evolve(self, **changes) -> RoyaltyRecord:
        return replace(self, **changes)

    def as_tuple(self) -> tuple:
        """(numGenerations, percentOfProfit, successiveRatio, lastSoldPrice,
        ownerAmount, addressesInFR) projection."""
        return (
            self.num_generations,
            self.percent_of_profit,
            self.successive_ratio,
            self.last_sold_price,
            self.owner_amount,
            list(self.addresses_in_fr),
        )


@dataclass(frozen=True, slots=True)
class ListingEntry:
    """Current offer for an asset. The zero entry means unlisted."""

    price: FixedPoint = ZERO
    seller: OwnerId | None = None
    active: bool = False

    @classmethod
    def empty(cls) -> ListingEntry:
        return cls()

    def as_tuple(self) -> tuple:
        return (self.price, self.seller, self.active)
