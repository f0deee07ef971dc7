import asyncio

from traffic_agent_mcp.core.models import TCP, UDP
from traffic_agent_mcp.core.mutual import PairStatus
from traffic_agent_mcp.parsers.csv_log import aread_rows

A = "AA:AA:AA:AA:AA:01"
B = "BB:BB:BB:BB:BB:02"
C = "CC:CC:CC:CC:CC:03"


def test_process_runs_whole_pipeline(engine, make_row):
    engine.process(make_row())
    engine.process(make_row(src="10.0.0.2:443", src_mac=B, dst="192.168.1.5:1111", dst_mac=A))

    assert engine.store.total_bytes == 200
    assert engine.detector.status_of(A, B, TCP) is PairStatus.MUTUAL
    assert engine.status()["accepted"] == 2


def test_dropped_row_still_advances_line(engine, make_row):
    assert engine.process(make_row(src_mac="garbage")) is None
    rec = engine.process(make_row())

    assert rec.line_index == 1
    status = engine.status()
    assert status["lines"] == 2
    assert status["dropped"] == 1
    assert engine.store.unique_macs == {A, B}


def test_metric_invalid_record_still_detects_mutual(engine, make_row):
    engine.process(make_row(size="0"))
    engine.process(make_row(src="10.0.0.2:443", src_mac=B, dst="192.168.1.5:1111", dst_mac=A))

    assert engine.store.total_bytes == 100
    assert engine.status()["metric_invalid"] == 1
    assert engine.detector.status_of(A, B, TCP) is PairStatus.MUTUAL


def test_mac_count_bounded_by_records(engine, make_row):
    rows = [
        make_row(src_mac=f"0:0:0:0:0:{i:x}", dst_mac=f"1:0:0:0:0:{i:x}", dst=f"192.168.7.{i}:80")
        for i in range(20)
    ]
    engine.ingest(rows)
    assert len(engine.store.unique_macs) <= 2 * 20
    assert len(engine.store.unique_mac_ip_pairs) <= 2 * 20
    assert engine.store.sessions_by_network["192.168.7.0"] == 20
    assert engine.store.sessions_by_network["192.168.1.0"] == 20


def test_ingest_file(engine, sample_log):
    accepted = engine.ingest_file(str(sample_log))

    assert accepted == 5
    status = engine.status()
    assert status["lines"] == 6
    assert status["dropped"] == 1
    assert status["metric_invalid"] == 1
    assert engine.detector.status_of(A, B, TCP) is PairStatus.MUTUAL
    assert engine.detector.status_of(A, C, UDP) is PairStatus.MUTUAL


def test_missing_file_is_not_fatal(engine, tmp_path):
    assert engine.ingest_file(str(tmp_path / "missing.txt")) == 0
    status = engine.status()
    assert status["lines"] == 0
    assert len(status["errors"]) == 1


def test_ingest_file_async(engine, sample_log):
    accepted = asyncio.run(engine.ingest_file_async(str(sample_log)))
    assert accepted == 5
    assert engine.store.total_bytes == 1900


def test_async_stop_between_records(engine, sample_log):
    async def run():
        stop = asyncio.Event()
        seen = 0

        async def rows():
            nonlocal seen
            async for r in aread_rows(str(sample_log)):
                seen += 1
                if seen == 3:
                    stop.set()
                yield r

        return await engine.ingest_async(rows(), stop=stop)

    accepted = asyncio.run(run())
    assert accepted == 2
    assert engine.status()["lines"] == 2


def test_async_missing_file_is_not_fatal(engine, tmp_path):
    assert asyncio.run(engine.ingest_file_async(str(tmp_path / "nope.txt"))) == 0
    assert engine.status()["errors"]


def test_oversized_field_drops_only_that_line(engine, oversized_log):
    accepted = engine.ingest_file(str(oversized_log))

    assert accepted == 2
    status = engine.status()
    assert status["lines"] == 3
    assert status["dropped"] == 1
    assert engine.store.total_bytes == 2000


def test_oversized_field_async(engine, oversized_log):
    assert asyncio.run(engine.ingest_file_async(str(oversized_log))) == 2
    assert engine.status()["dropped"] == 1


def test_async_file_source_closed_on_stop(engine, make_row, monkeypatch):
    import traffic_agent_mcp.core.engine as engine_mod

    closed = []

    async def rows(path, delimiter):
        try:
            for _ in range(5):
                yield make_row()
        finally:
            closed.append(path)

    monkeypatch.setattr(engine_mod, "aread_rows", rows)

    async def run():
        stop = asyncio.Event()
        stop.set()
        accepted = await engine.ingest_file_async("traf.txt", stop=stop)
        return accepted, list(closed)

    accepted, closed_before_loop_exit = asyncio.run(run())
    assert accepted == 0
    assert closed_before_loop_exit == ["traf.txt"]
