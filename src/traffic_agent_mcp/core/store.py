from __future__ import annotations
import math
from typing import Dict, List, Optional, Set, Tuple

from .models import UDP, TransferRecord


class AggregateStore:
    """
    In memory running aggregates for one pass over a capture log.

    Two kinds of updates:
      register_endpoints / count_session
        identity side, applied for every accepted record
      record
        metric side, applied only when byte_count and duration parsed

    Nothing is ever removed or corrected. Reports are pure reads.
    """

    def __init__(self) -> None:
        self.unique_macs: Set[str] = set()
        self.unique_ips: Set[str] = set()
        self.unique_mac_ip_pairs: Set[str] = set()

        self.total_bytes = 0
        self.total_time = 0.0
        self.total_udp_bytes = 0
        self.total_udp_time = 0.0

        self.peak_speed = 0.0
        self.peak_record: Optional[TransferRecord] = None

        # Keyed by source MAC only. Received traffic is not tracked per node.
        self.traffic_by_node: Dict[str, int] = {}
        self.time_by_node: Dict[str, float] = {}

        self.sessions_by_network: Dict[str, int] = {}

    def register_endpoints(self, record: TransferRecord) -> None:
        self.unique_macs.add(record.src_mac)
        self.unique_macs.add(record.dst_mac)
        self.unique_ips.add(record.src_ip)
        self.unique_ips.add(record.dst_ip)
        self.unique_mac_ip_pairs.add(f"{record.src_mac};{record.src_ip}")
        self.unique_mac_ip_pairs.add(f"{record.dst_mac};{record.dst_ip}")

    def count_session(self, network: str) -> None:
        self.sessions_by_network[network] = self.sessions_by_network.get(network, 0) + 1

    def record(self, record: TransferRecord) -> bool:
        """
        Apply the metric side of a record. Returns False when the record
        carries no valid metrics and nothing was changed.
        """
        if not record.metrics_valid:
            return False

        size = record.byte_count
        seconds = record.duration_seconds
        speed = size / seconds

        self.total_bytes += size
        self.total_time += seconds
        if record.protocol == UDP:
            self.total_udp_bytes += size
            self.total_udp_time += seconds

        # Strict comparison keeps the first record on ties.
        if self.peak_record is None or speed > self.peak_speed:
            self.peak_speed = speed
            self.peak_record = record

        node = record.src_mac
        self.traffic_by_node[node] = self.traffic_by_node.get(node, 0) + size
        self.time_by_node[node] = self.time_by_node.get(node, 0.0) + seconds
        return True

    def average_speed(self) -> float:
        return _ratio(self.total_bytes, self.total_time)

    def average_udp_speed(self) -> float:
        return _ratio(self.total_udp_bytes, self.total_udp_time)

    def node_speeds(self) -> Dict[str, float]:
        return {
            node: _ratio(size, self.time_by_node.get(node, 0.0))
            for node, size in self.traffic_by_node.items()
        }

    def top_nodes(self, n: int) -> List[Tuple[str, float]]:
        """
        Nodes ranked by bytes per second, descending.
        sorted() is stable, so equal speeds keep first seen order.
        """
        return sorted(self.node_speeds().items(), key=lambda x: x[1], reverse=True)[: max(n, 0)]

    def top_networks(self, n: int) -> List[Tuple[str, int]]:
        return sorted(self.sessions_by_network.items(), key=lambda x: x[1], reverse=True)[: max(n, 0)]


def _ratio(num: float, den: float) -> float:
    if den <= 0:
        return math.nan
    return num / den
