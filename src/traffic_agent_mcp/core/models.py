from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, Union

TCP = "TCP"
UDP = "UDP"

# Speed marker for records whose byte count or duration failed to parse.
INVALID = "INVALID"

# (src_mac, dst_mac, protocol), used by the transfer index and the mutual registry.
TransferKey = Tuple[str, str, str]

# (lower_mac, higher_mac, protocol), direction independent.
PairKey = Tuple[str, str, str]


@dataclass(frozen=True)
class TransferRecord:
    """
    Normalized transfer record produced from one line of the capture log.

    The aggregation and detection code works on TransferRecord objects only,
    never on raw field tuples.

    Fields:
      line_index
        Zero based position of the line in the input stream.
        Used as the dedupe key inside the mutual registry.

      src_mac, dst_mac
        Canonical MAC strings, for example 0A:0B:00:01:02:03.

      src_ip, dst_ip, src_port, dst_port
        Endpoint parts as returned by the endpoint parser.

      protocol
        TCP or UDP.

      byte_count, duration_seconds
        Positive metrics, or None when the raw value did not parse.
        A record with missing metrics still counts for identity reports
        and mutual detection, but never for throughput.
    """

    line_index: int
    src_mac: str
    dst_mac: str
    src_ip: str
    dst_ip: str
    src_port: int
    dst_port: int
    protocol: str
    byte_count: Optional[int] = None
    duration_seconds: Optional[float] = None

    @property
    def metrics_valid(self) -> bool:
        return self.byte_count is not None and self.duration_seconds is not None

    @property
    def speed(self) -> Union[float, str]:
        if not self.metrics_valid:
            return INVALID
        return self.byte_count / self.duration_seconds

    def transfer_key(self) -> TransferKey:
        return (self.src_mac, self.dst_mac, self.protocol)

    def reverse_key(self) -> TransferKey:
        return (self.dst_mac, self.src_mac, self.protocol)

    def pair_key(self) -> PairKey:
        low, high = sorted((self.src_mac, self.dst_mac))
        return (low, high, self.protocol)

    def key(self) -> str:
        """
        Human readable direction key, used in log lines.
        """
        return f"{self.src_mac}->{self.dst_mac}/{self.protocol}"

    def to_dict(self) -> dict:
        return {
            "line": self.line_index,
            "src_ip": self.src_ip,
            "src_port": self.src_port,
            "src_mac": self.src_mac,
            "dst_ip": self.dst_ip,
            "dst_port": self.dst_port,
            "dst_mac": self.dst_mac,
            "protocol": self.protocol,
            "data_size": self.byte_count,
            "time_interval": self.duration_seconds,
            "speed": self.speed,
        }
