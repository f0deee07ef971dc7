from __future__ import annotations
import ipaddress
from typing import Tuple

from traffic_agent_mcp.core.errors import MalformedEndpoint


def split_endpoint(value: str, field: str = "endpoint") -> Tuple[str, int]:
    """
    Split an endpoint string into (ip, port).

    Accepted forms:
      192.168.1.5:443
      [2001:db8::1]:443

    IPv6 addresses must be bracketed, otherwise the port separator is
    ambiguous. The returned ip is the compressed textual form.
    """
    raw = (value or "").strip()

    if raw.startswith("["):
        host, sep, port_text = raw[1:].partition("]:")
        if not sep:
            raise MalformedEndpoint(field, f"bad bracketed endpoint {value!r}")
    else:
        host, sep, port_text = raw.rpartition(":")
        if not sep or ":" in host:
            raise MalformedEndpoint(field, f"expected ip:port, got {value!r}")

    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        raise MalformedEndpoint(field, f"bad ip address {host!r}") from None

    if not (port_text.isascii() and port_text.isdigit()):
        raise MalformedEndpoint(field, f"bad port {port_text!r}")
    port = int(port_text)
    if port > 65535:
        raise MalformedEndpoint(field, f"port out of range {port}")

    return str(ip), port
