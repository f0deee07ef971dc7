from __future__ import annotations
import asyncio
import csv
from typing import AsyncIterator, Iterable, Iterator, List

from traffic_agent_mcp.core.errors import InputOpenError

DEFAULT_DELIMITER = ";"


class RejectedRow(list):
    """
    Stand-in for a line the tokenizer could not split, for example a field
    over the csv field size limit. It is empty and carries the reason, so the
    engine drops it as one bad record and keeps counting lines.
    """

    def __init__(self, reason: str):
        super().__init__()
        self.reason = reason


def iter_rows(lines: Iterable[str], delimiter: str = DEFAULT_DELIMITER) -> Iterator[List[str]]:
    """
    Tokenize log lines. Blank lines are skipped and do not count as records.
    A line that fails to tokenize yields a RejectedRow and the stream goes on.
    """
    reader = csv.reader(lines, delimiter=delimiter)
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            yield RejectedRow(f"line {reader.line_num}: {e}")
            continue

        if not row or all(not cell.strip() for cell in row):
            continue
        yield [cell.strip() for cell in row]


def read_rows(path: str, delimiter: str = DEFAULT_DELIMITER) -> Iterator[List[str]]:
    """
    Stream rows from a log file.

    The file is opened eagerly so an unreadable path fails with
    InputOpenError before the first row is requested.
    """
    try:
        handle = open(path, "r", encoding="utf-8", errors="replace", newline="")
    except OSError as e:
        raise InputOpenError(path, e) from e

    def _rows() -> Iterator[List[str]]:
        with handle:
            yield from iter_rows(handle, delimiter)

    return _rows()


async def aread_rows(
    path: str,
    delimiter: str = DEFAULT_DELIMITER,
    chunk_hint: int = 64 * 1024,
) -> AsyncIterator[List[str]]:
    """
    Async row source. The blocking reads run in a worker thread in chunks,
    the event loop only ever waits at the chunk boundary.
    """
    try:
        handle = await asyncio.to_thread(
            open, path, "r", encoding="utf-8", errors="replace", newline=""
        )
    except OSError as e:
        raise InputOpenError(path, e) from e

    try:
        while True:
            lines = await asyncio.to_thread(handle.readlines, chunk_hint)
            if not lines:
                break
            for row in iter_rows(lines, delimiter):
                yield row
    finally:
        handle.close()
