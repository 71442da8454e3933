"""logone core: decoding, unit state and policy."""

from logone.core.attributor import FailureAttributor
from logone.core.decoder import decode_line, strip_ansi
from logone.core.stats_aggregator import StatsAggregator
from logone.core.targets import ActiveTargets
from logone.core.unit_registry import UnitRegistry

__all__ = [
    "ActiveTargets",
    "FailureAttributor",
    "StatsAggregator",
    "UnitRegistry",
    "decode_line",
    "strip_ansi",
]
