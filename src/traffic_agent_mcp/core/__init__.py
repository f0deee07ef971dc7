"""
Core modules of the traffic analyzer.

The core only sees TransferRecord objects and raw field tuples.
File formats and endpoint syntax stay in the parsers package.

engine and normalizer pull in the parsers, import them directly:
  from traffic_agent_mcp.core.engine import TrafficEngine
"""

from .models import TransferRecord
from .store import AggregateStore
from .mutual import MutualTransferDetector
from .report import ReportGenerator

__all__ = ["TransferRecord", "AggregateStore", "MutualTransferDetector", "ReportGenerator"]
