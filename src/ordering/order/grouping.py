"""How committed lines are split into orders.

- SingleOrderGrouping ("single", default): everything in one order
- GroupBySeller ("seller"): one order per seller; house items together
- GroupByItemType ("item_type"): products and services in separate orders

Groups come back in the order their first line appears, and lines keep
their cart order within a group.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from shared.config import get_settings


@dataclass(frozen=True)
class CommittedLine:
    """A line whose stock has been taken and whose price is fixed."""

    item_id: str
    item_type: str
    name: str
    unit_price: Decimal
    quantity: int
    seller_id: str | None = None


class GroupingPolicy(ABC):
    @abstractmethod
    def group(self, lines: Sequence[CommittedLine]) -> list[list[CommittedLine]]:
        """Partition ``lines`` into non-empty groups, one order each."""


def _partition(lines: Sequence[CommittedLine], key: Callable[[CommittedLine], object]) -> list[list[CommittedLine]]:
    groups: dict[object, list[CommittedLine]] = {}
    for line in lines:
        groups.setdefault(key(line), []).append(line)
    return list(groups.values())


class SingleOrderGrouping(GroupingPolicy):
    def group(self, lines):
        return [list(lines)] if lines else []


class GroupBySeller(GroupingPolicy):
    def group(self, lines):
        return _partition(lines, lambda line: line.seller_id)


class GroupByItemType(GroupingPolicy):
    def group(self, lines):
        return _partition(lines, lambda line: line.item_type)


_POLICIES = {
    "single": SingleOrderGrouping,
    "seller": GroupBySeller,
    "item_type": GroupByItemType,
}

_current_policy: GroupingPolicy | None = None


def get_grouping_policy() -> GroupingPolicy:
    """Return the active grouping policy, chosen by ORDER_GROUPING on first use."""
    global _current_policy
    if _current_policy is None:
        name = get_settings().order_grouping.lower()
        if name not in _POLICIES:
            raise ValueError(f"Unknown order grouping policy: {name}")
        _current_policy = _POLICIES[name]()
    return _current_policy


def set_grouping_policy(policy: GroupingPolicy) -> None:
    """Override the active grouping policy (useful for tests)."""
    global _current_policy
    _current_policy = policy


def reset_grouping_policy() -> None:
    global _current_policy
    _current_policy = None
