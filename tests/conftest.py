import pytest

from traffic_agent_mcp.core.engine import TrafficEngine
from traffic_agent_mcp.core.models import TCP, TransferRecord
from traffic_agent_mcp.core.mutual import MutualTransferDetector
from traffic_agent_mcp.core.store import AggregateStore

MAC_A = "AA:AA:AA:AA:AA:01"
MAC_B = "BB:BB:BB:BB:BB:02"
MAC_C = "CC:CC:CC:CC:CC:03"


@pytest.fixture
def store():
    return AggregateStore()


@pytest.fixture
def detector():
    return MutualTransferDetector()


@pytest.fixture
def engine():
    return TrafficEngine()


@pytest.fixture
def make_record():
    counter = {"line": 0}

    def _make(src=MAC_A, dst=MAC_B, protocol=TCP, size=100, seconds=1.0, line=None,
              src_ip="10.0.0.1", dst_ip="10.0.0.2"):
        if line is None:
            line = counter["line"]
            counter["line"] += 1
        return TransferRecord(
            line_index=line,
            src_mac=src,
            dst_mac=dst,
            src_ip=src_ip,
            dst_ip=dst_ip,
            src_port=1111,
            dst_port=443,
            protocol=protocol,
            byte_count=size,
            duration_seconds=seconds,
        )

    return _make


def row(src="192.168.1.5:1111", src_mac="aa:aa:aa:aa:aa:01", dst="10.0.0.2:443",
        dst_mac="bb:bb:bb:bb:bb:02", is_udp="false", size="100", seconds="1.0"):
    return [src, src_mac, dst, dst_mac, is_udp, size, seconds]


@pytest.fixture
def make_row():
    return row


@pytest.fixture
def sample_log(tmp_path):
    lines = [
        "192.168.1.5:1111;aa:aa:aa:aa:aa:1;10.0.0.2:443;bb:bb:bb:bb:bb:2;false;1000;2.0",
        "10.0.0.2:443;BB:BB:BB:BB:BB:02;192.168.1.5:1111;AA:AA:AA:AA:AA:01;false;500;1.0",
        "",
        "192.168.1.5:1111;aa:aa:aa:aa:aa:1;192.168.2.9:53;cc:cc:cc:cc:cc:3;true;300;0.5",
        "192.168.2.9:53;cc:cc:cc:cc:cc:3;192.168.1.5:1111;aa:aa:aa:aa:aa:1;true;100;0.5",
        "not-an-endpoint;aa:aa:aa:aa:aa:1;10.0.0.2:443;bb:bb:bb:bb:bb:2;false;1;1",
        "10.0.0.2:443;bb:bb:bb:bb:bb:2;10.0.0.9:80;dd:dd:dd:dd:dd:4;false;abc;1.0",
    ]
    path = tmp_path / "traf.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def oversized_log(tmp_path):
    good = "192.168.1.5:1111;aa:aa:aa:aa:aa:1;10.0.0.2:443;bb:bb:bb:bb:bb:2;false;1000;2.0"
    huge = f"192.168.1.5:1111;{'a' * 200_000};10.0.0.2:443;bb:bb:bb:bb:bb:2;false;1;1"
    path = tmp_path / "oversized.txt"
    path.write_text("\n".join([good, huge, good]) + "\n", encoding="utf-8")
    return path
