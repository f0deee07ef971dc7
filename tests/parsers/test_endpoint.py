import pytest

from traffic_agent_mcp.core.errors import MalformedEndpoint
from traffic_agent_mcp.parsers.endpoint import split_endpoint


def test_split_ipv4():
    assert split_endpoint("192.168.1.5:443") == ("192.168.1.5", 443)


def test_split_bracketed_ipv6():
    assert split_endpoint("[2001:0db8::1]:8080") == ("2001:db8::1", 8080)


@pytest.mark.parametrize(
    "value",
    ["192.168.1.5", "192.168.1.5:", "192.168.1.5:http", "300.1.1.1:80", "1.2.3.4:70000", "2001:db8::1:80", "[::1]80", ""],
)
def test_split_rejects(value):
    with pytest.raises(MalformedEndpoint) as exc:
        split_endpoint(value, field="src_ip_port")
    assert exc.value.field == "src_ip_port"
