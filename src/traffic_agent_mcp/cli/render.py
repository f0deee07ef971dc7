from __future__ import annotations
import math
from typing import Any, Dict, List

SEPARATOR = "-------------------------------"


def _num(value: Any) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "n/a"
        return f"{value:.3f}"
    return str(value)


def render_report(report: Dict[str, Any]) -> str:
    """
    Console layout of a structured report. Formatting only.
    """
    lines: List[str] = []
    unique = report["unique"]
    lines += [
        "Q1:",
        f"Data contains {unique['macs']} unique MAC addresses",
        f"Data contains {unique['ips']} unique IP addresses",
        f"Data contains {unique['mac_ip_pairs']} unique MAC+IP address combinations",
        SEPARATOR,
    ]

    t = report["throughput"]
    lines += [
        "Q2:",
        f"{t['total_bytes']} bytes were sent in {_num(t['total_time'])} seconds.",
        f"Total average speed is {_num(t['average_speed'])} b/sec.",
        SEPARATOR,
    ]

    udp = report["udp"]
    peak = report["peak"]
    lines += [
        "Q3:",
        "UDP statistics:",
        f"{udp['total_bytes']} bytes sent in {_num(udp['total_time'])} sec.",
        f"Average UDP transfer speed is {_num(udp['average_speed'])} b/sec.",
        f"Total peak speed is {_num(peak['speed'])}.",
    ]
    rec = peak["record"]
    if rec is None:
        lines.append("No valid transfers, peak speed is undefined.")
    else:
        lines.append(
            "Peak speed was reached at transfer: "
            f"line {rec['line']} {rec['src_ip']}:{rec['src_port']} ({rec['src_mac']}) -> "
            f"{rec['dst_ip']}:{rec['dst_port']} ({rec['dst_mac']}) {rec['protocol']} "
            f"{rec['data_size']} bytes in {rec['time_interval']} sec"
        )
    lines += [
        f"Is UDP transfer always at peak speed: {'YES' if udp['always_at_peak'] else 'NO'}.",
        SEPARATOR,
    ]

    nodes = report["top_nodes"]
    lines.append("Q4:")
    lines.append(f"Top {len(nodes)} speediest nodes:")
    for i, row in enumerate(nodes, 1):
        lines.append(f"  {i:>2}. {row['node']}  {_num(row['speed'])} b/sec")
    lines.append(SEPARATOR)

    nets = report["top_networks"]
    lines.append("Q5:")
    lines.append(f"Top {len(nets)} class C networks by sessions count:")
    for i, row in enumerate(nets, 1):
        lines.append(f"  {i:>2}. {row['network']}  {row['sessions']}")
    lines.append(SEPARATOR)

    lines.append("Q6:")
    lines.append("Detected mutual transfers:")
    mutual = report["mutual_transfers"]
    if not mutual:
        lines.append("  none")
    for mac, by_protocol in mutual.items():
        for proto, by_partner in by_protocol.items():
            for partner, line_ids in by_partner.items():
                lines.append(f"  {mac} -> {partner} {proto}: lines {', '.join(map(str, line_ids))}")

    lines.append("Nodes with more than one mutual transfer (proxy candidates):")
    proxies = report["proxies"]
    if not proxies:
        lines.append("  none")
    for mac, by_protocol in proxies.items():
        partners = "; ".join(f"{proto}: {', '.join(macs)}" for proto, macs in by_protocol.items())
        lines.append(f"  {mac} communicated with {partners}")

    return "\n".join(lines)
