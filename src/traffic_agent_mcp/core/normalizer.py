from __future__ import annotations
import logging
import math
import string
from typing import Callable, Optional, Sequence, Tuple

from traffic_agent_mcp.parsers.csv_log import RejectedRow
from traffic_agent_mcp.parsers.endpoint import split_endpoint

from .errors import (
    InvalidMetric,
    InvalidOctet,
    InvalidProtocolFlag,
    MalformedMac,
    ParseError,
    SubnetClassificationError,
)
from .models import TCP, UDP, TransferRecord

log = logging.getLogger(__name__)

FIELD_COUNT = 7

EndpointParser = Callable[[str, str], Tuple[str, int]]


def canonical_mac(mac: str, allow_empty_octets: bool = False, field: str = "mac") -> str:
    """
    Canonical MAC form: six uppercase two digit hex octets joined by colons.

      a:B:0:1:2:3 -> 0A:0B:00:01:02:03

    Canonicalizing an already canonical value returns it unchanged.
    An empty octet is rejected unless allow_empty_octets is set, in which
    case it reads as 00.
    """
    octets = (mac or "").strip().split(":")
    if len(octets) != 6:
        raise MalformedMac(field, f"cannot parse MAC {mac!r}: expected 6 octets, got {len(octets)}")

    out = []
    for octet in octets:
        if octet == "":
            if not allow_empty_octets:
                raise MalformedMac(field, f"cannot parse MAC {mac!r}: empty octet")
            octet = "0"
        if not all(c in string.hexdigits for c in octet):
            raise InvalidOctet(field, f"cannot parse MAC {mac!r}: bad hex octet {octet!r}")
        value = int(octet, 16)
        if value > 255:
            raise InvalidOctet(field, f"cannot parse MAC {mac!r}: octet {octet!r} out of range")
        out.append(f"{value:02X}")

    return ":".join(out)


def parse_protocol(flag: str) -> str:
    """
    The is_udp field must be the literal true or false.
    """
    if flag == "true":
        return UDP
    if flag == "false":
        return TCP
    raise InvalidProtocolFlag("is_udp", f"wrong protocol flag {flag!r}")


def parse_metrics(data_size: str, time_interval: str) -> Tuple[int, float]:
    try:
        byte_count = int(data_size)
    except (TypeError, ValueError):
        byte_count = 0
    if byte_count <= 0:
        raise InvalidMetric(
            "data_size", f"bytes number must be a positive integer, got {data_size!r}"
        )

    try:
        duration = float(time_interval)
    except (TypeError, ValueError):
        duration = math.nan
    if not math.isfinite(duration) or duration <= 0:
        raise InvalidMetric(
            "time_interval", f"transfer time must be a positive float, got {time_interval!r}"
        )

    return byte_count, duration


def is_class_c_style(ip: str) -> bool:
    """
    True when the first octet starts with the bits 110, i.e. 192.0.0.0/3.

    Only dotted quad IPv4 text is classified, anything else raises
    SubnetClassificationError.
    """
    parts = ip.split(".")
    if len(parts) != 4:
        raise SubnetClassificationError(f"invalid IPv4 address {ip!r}")

    octets = []
    for part in parts:
        if not (part.isascii() and part.isdigit()) or int(part) > 255:
            raise SubnetClassificationError(f"invalid IPv4 octet {part!r} in {ip!r}")
        octets.append(int(part))

    return (octets[0] >> 5) == 0b110


def subnet_id(ip: str) -> str:
    return ".".join(ip.split(".")[:3]) + ".0"


class RecordNormalizer:
    """
    Turns one raw seven field row into a TransferRecord.

    Structural problems (endpoints, MACs, protocol flag) reject the whole row
    with a ParseError. Metric problems only strip byte_count and
    duration_seconds, the record keeps its identity.

    On success the identity side effects are applied to the store:
      uniqueness sets for MACs, IPs and MAC+IP pairs
      class C session counts for both endpoints
    """

    def __init__(
        self,
        store,
        allow_empty_octets: bool = False,
        endpoint_parser: Optional[EndpointParser] = None,
    ):
        self.store = store
        self.allow_empty_octets = bool(allow_empty_octets)
        self.endpoint_parser: EndpointParser = endpoint_parser or split_endpoint

    def normalize(self, fields: Sequence[str], line_index: int) -> TransferRecord:
        if isinstance(fields, RejectedRow):
            raise ParseError("row", fields.reason)
        if len(fields) != FIELD_COUNT:
            raise ParseError("row", f"expected {FIELD_COUNT} fields, got {len(fields)}")

        src_ip_port, src_mac, dst_ip_port, dst_mac, is_udp, data_size, time_interval = fields

        src_ip, src_port = self.endpoint_parser(src_ip_port, "src_ip_port")
        dst_ip, dst_port = self.endpoint_parser(dst_ip_port, "dst_ip_port")

        src_mac = canonical_mac(src_mac, self.allow_empty_octets, field="src_mac")
        dst_mac = canonical_mac(dst_mac, self.allow_empty_octets, field="dst_mac")

        protocol = parse_protocol(is_udp)

        byte_count: Optional[int] = None
        duration: Optional[float] = None
        try:
            byte_count, duration = parse_metrics(data_size, time_interval)
        except InvalidMetric as e:
            log.warning("line %d: %s, record excluded from throughput", line_index, e)

        record = TransferRecord(
            line_index=line_index,
            src_mac=src_mac,
            dst_mac=dst_mac,
            src_ip=src_ip,
            dst_ip=dst_ip,
            src_port=src_port,
            dst_port=dst_port,
            protocol=protocol,
            byte_count=byte_count,
            duration_seconds=duration,
        )

        self.store.register_endpoints(record)
        for ip in (src_ip, dst_ip):
            self._count_session(ip, line_index)

        return record

    def _count_session(self, ip: str, line_index: int) -> None:
        try:
            if is_class_c_style(ip):
                self.store.count_session(subnet_id(ip))
        except SubnetClassificationError as e:
            log.warning("line %d: error updating network session count: %s", line_index, e)
