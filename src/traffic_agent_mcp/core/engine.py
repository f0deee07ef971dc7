from __future__ import annotations
import asyncio
from contextlib import aclosing
import logging
from typing import Any, AsyncIterable, Dict, Iterable, List, Optional, Sequence

from traffic_agent_mcp.parsers.csv_log import DEFAULT_DELIMITER, aread_rows, read_rows

from .errors import InputOpenError, ParseError
from .models import TransferRecord
from .mutual import MutualTransferDetector
from .normalizer import RecordNormalizer
from .store import AggregateStore

log = logging.getLogger(__name__)


class TrafficEngine:
    """
    Single pass reducer over capture log rows.

    Each row goes through the whole pipeline before the next one is read:
      1. RecordNormalizer builds the TransferRecord and updates identity sets
      2. AggregateStore applies the metric side
      3. MutualTransferDetector indexes the record and checks for back talk

    All state is owned by the engine. There is exactly one writer, so no
    locking is used anywhere.
    """

    def __init__(
        self,
        store: Optional[AggregateStore] = None,
        detector: Optional[MutualTransferDetector] = None,
        allow_empty_octets: bool = False,
    ):
        self.store = store or AggregateStore()
        self.detector = detector or MutualTransferDetector()
        self.normalizer = RecordNormalizer(self.store, allow_empty_octets=allow_empty_octets)

        self._next_line = 0
        self._accepted = 0
        self._dropped = 0
        self._metric_invalid = 0
        self.errors: List[str] = []

    def process(
        self, fields: Sequence[str], line_index: Optional[int] = None
    ) -> Optional[TransferRecord]:
        """
        Run one row end to end. Returns None when the row was dropped.
        The line counter advances either way.
        """
        index = self._next_line if line_index is None else int(line_index)
        self._next_line = max(self._next_line, index + 1)

        try:
            record = self.normalizer.normalize(fields, index)
        except ParseError as e:
            self._dropped += 1
            log.warning("error parsing transfer data at line %d: %s", index, e)
            return None

        self._accepted += 1
        if not self.store.record(record):
            self._metric_invalid += 1
        self.detector.observe(record)
        return record

    def ingest(self, rows: Iterable[Sequence[str]]) -> int:
        """
        Process every row of an iterable. Returns the number of accepted records.
        """
        accepted = 0
        for fields in rows:
            if self.process(fields) is not None:
                accepted += 1
        return accepted

    async def ingest_async(
        self,
        rows: AsyncIterable[Sequence[str]],
        stop: Optional[asyncio.Event] = None,
    ) -> int:
        """
        Async variant of ingest.

        The stop event is only checked between records, a record that has
        started is always applied completely.
        """
        accepted = 0
        async for fields in rows:
            if stop is not None and stop.is_set():
                log.info("ingestion stopped at line %d", self._next_line)
                break
            if self.process(fields) is not None:
                accepted += 1
        return accepted

    def ingest_file(self, path: str, delimiter: str = DEFAULT_DELIMITER) -> int:
        """
        Stream a log file. An unreadable file is logged and recorded in
        errors, the engine state stays as it was.
        """
        try:
            rows = read_rows(path, delimiter)
        except InputOpenError as e:
            self._input_failed(e)
            return 0
        return self.ingest(rows)

    async def ingest_file_async(
        self,
        path: str,
        delimiter: str = DEFAULT_DELIMITER,
        stop: Optional[asyncio.Event] = None,
    ) -> int:
        """
        Async variant of ingest_file. The row source is closed as soon as
        ingestion ends, including an early stop.
        """
        try:
            async with aclosing(aread_rows(path, delimiter)) as rows:
                return await self.ingest_async(rows, stop=stop)
        except InputOpenError as e:
            self._input_failed(e)
            return 0

    def _input_failed(self, error: InputOpenError) -> None:
        log.error("error opening the input file %s: %s", error.path, error.reason)
        self.errors.append(str(error))

    def status(self) -> Dict[str, Any]:
        """
        Counters for the current run. Fast and side effect free.
        """
        return {
            "lines": self._next_line,
            "accepted": self._accepted,
            "dropped": self._dropped,
            "metric_invalid": self._metric_invalid,
            "mutual_pairs": self.detector.mutual_pair_count(),
            "errors": list(self.errors),
        }
