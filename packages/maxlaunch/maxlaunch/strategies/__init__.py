"""Window acquisition strategies."""

from maxlaunch.strategies.base import AcquisitionStrategy, Outcome, StrategyResult, poll_cycles
from maxlaunch.strategies.by_active import ActiveChangeCounter, ByActiveChangeCountStrategy
from maxlaunch.strategies.by_name import ByNameStrategy
from maxlaunch.strategies.by_viewable import ByViewableSetStrategy, TrackedWindowSet

__all__ = [
    "AcquisitionStrategy",
    "ActiveChangeCounter",
    "ByActiveChangeCountStrategy",
    "ByNameStrategy",
    "ByViewableSetStrategy",
    "Outcome",
    "StrategyResult",
    "TrackedWindowSet",
    "poll_cycles",
]
