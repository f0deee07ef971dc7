from __future__ import annotations
from typing import List, Optional


class TrafficError(Exception):
    """
    Base class for every error raised while reading a capture log.
    """


class ParseError(TrafficError):
    """
    A raw field could not be turned into part of a TransferRecord.

    field
      Name of the offending input field, for example src_mac or is_udp.
    """

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class MalformedMac(ParseError):
    pass


class InvalidOctet(ParseError):
    pass


class MalformedEndpoint(ParseError):
    pass


class InvalidProtocolFlag(ParseError):
    pass


class InvalidMetric(ParseError):
    pass


class SubnetClassificationError(TrafficError):
    pass


class MutualValidationError(TrafficError):
    """
    Raised when the two sides of a mutual registration do not describe
    the same MAC pair and protocol. Carries every violation found.
    """

    def __init__(self, src_mac: str, dst_mac: str, violations: List[str]):
        super().__init__(
            f"invalid mutual communication {src_mac} <-> {dst_mac}: "
            f"{len(violations)} violation(s)"
        )
        self.src_mac = src_mac
        self.dst_mac = dst_mac
        self.violations = list(violations)


class InputOpenError(TrafficError):
    def __init__(self, path: str, reason: Optional[BaseException] = None):
        super().__init__(f"cannot open input file {path}: {reason}")
        self.path = path
        self.reason = reason
