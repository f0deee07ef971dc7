from __future__ import annotations
import math
from typing import Any, Dict, List

from .mutual import MutualTransferDetector
from .store import AggregateStore


class ReportGenerator:
    """
    Read side of a run. Builds the final report from the store and the
    mutual detector without mutating either.

    Sections:
      unique          counts of MACs, IPs and MAC+IP pairs
      throughput      total bytes, time and average speed
      udp             the same for UDP plus the always at peak check
      peak            fastest single transfer
      top_nodes       source MACs ranked by bytes per second
      top_networks    class C style networks ranked by session count
      mutual_transfers  mac -> protocol -> partner -> line indices
      proxies         macs with more than one mutual partner
    """

    def __init__(self, store: AggregateStore, detector: MutualTransferDetector):
        self.store = store
        self.detector = detector

    def proxies(self) -> Dict[str, Dict[str, List[str]]]:
        """
        Proxy candidates: macs whose partner count, summed over protocols,
        is greater than one.
        """
        out: Dict[str, Dict[str, List[str]]] = {}
        for mac, by_protocol in self.detector.mutual_by_mac().items():
            partners = sum(len(by_partner) for by_partner in by_protocol.values())
            if partners > 1:
                out[mac] = {proto: sorted(by_partner) for proto, by_partner in by_protocol.items()}
        return out

    def build(self, top_nodes: int = 10, top_networks: int = 10) -> Dict[str, Any]:
        s = self.store

        avg_udp = s.average_udp_speed()
        peak = s.peak_record
        always_at_peak = (
            peak is not None and not math.isnan(avg_udp) and avg_udp >= s.peak_speed
        )

        mutual = {
            mac: {
                proto: {partner: [r.line_index for r in records] for partner, records in by_partner.items()}
                for proto, by_partner in by_protocol.items()
            }
            for mac, by_protocol in self.detector.mutual_by_mac().items()
        }

        return {
            "unique": {
                "macs": len(s.unique_macs),
                "ips": len(s.unique_ips),
                "mac_ip_pairs": len(s.unique_mac_ip_pairs),
            },
            "throughput": {
                "total_bytes": s.total_bytes,
                "total_time": s.total_time,
                "average_speed": s.average_speed(),
            },
            "udp": {
                "total_bytes": s.total_udp_bytes,
                "total_time": s.total_udp_time,
                "average_speed": avg_udp,
                "always_at_peak": always_at_peak,
            },
            "peak": {
                "speed": s.peak_speed if peak is not None else math.nan,
                "record": peak.to_dict() if peak is not None else None,
            },
            "top_nodes": [
                {"node": node, "speed": speed} for node, speed in s.top_nodes(top_nodes)
            ],
            "top_networks": [
                {"network": net, "sessions": count} for net, count in s.top_networks(top_networks)
            ],
            "mutual_transfers": mutual,
            "proxies": self.proxies(),
        }
