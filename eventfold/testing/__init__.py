from .aggregate_scenario import AggregateScenario
from .core import Scenario

__all__ = [
    "AggregateScenario",
    "Scenario",
]
