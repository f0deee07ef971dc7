from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .dedupe import LineDeduper
from .errors import MutualValidationError
from .models import PairKey, TransferKey, TransferRecord

log = logging.getLogger(__name__)


class PairStatus(str, Enum):
    ONE_SIDED = "one_sided"
    MUTUAL = "mutual"


@dataclass
class PairState:
    """
    Detection state for one unordered MAC pair under one protocol.

    completed_at
      Line index of the record that made the pair mutual.
    """

    key: PairKey
    status: PairStatus
    completed_at: Optional[int] = None


def validate_mutual(
    src_mac: str,
    src_records: Sequence[TransferRecord],
    dst_mac: str,
    dst_records: Sequence[TransferRecord],
) -> None:
    """
    Check that both sides describe the same pair and protocol.
    Raises MutualValidationError listing every violation found.
    """
    violations: List[str] = []

    if not src_records:
        violations.append("source records are empty")
    if not dst_records:
        violations.append("destination records are empty")

    reference = (list(src_records) + list(dst_records))[:1]
    protocol = reference[0].protocol if reference else None

    for side, records, origin, target in (
        ("src", src_records, src_mac, dst_mac),
        ("dst", dst_records, dst_mac, src_mac),
    ):
        for r in records:
            if r.src_mac != origin:
                violations.append(
                    f"{side} record {r.line_index} must originate from {origin}, found {r.src_mac}"
                )
            if r.dst_mac != target:
                violations.append(
                    f"{side} record {r.line_index} must be directed to {target}, found {r.dst_mac}"
                )
            if r.protocol != protocol:
                violations.append(
                    f"{side} record {r.line_index} must use protocol {protocol}, found {r.protocol}"
                )

    if violations:
        raise MutualValidationError(src_mac, dst_mac, violations)


class MutualTransferDetector:
    """
    Finds MAC pairs that talk in both directions under the same protocol.

    State:
      transfers
        (src_mac, dst_mac, protocol) -> every record sent in that direction.
        Complete history, appended for every record, never pruned.

      pairs
        (low_mac, high_mac, protocol) -> PairState. One entry per unordered
        pair, ONE_SIDED until back talk is seen, then MUTUAL for good.

      mutual_transfers
        (mac, partner_mac, protocol) -> confirmed records sent from mac to
        partner. Deduplicated by line index.

    Transition rule:
      A record whose reverse direction already has history moves its pair
      from ONE_SIDED to MUTUAL. Registration runs once at that moment and
      promotes the new record plus the whole back talk history. After that,
      every record of the pair is appended to the registry directly, so the
      registry holds all traffic of the pair from both directions.
    """

    def __init__(self, deduper: Optional[LineDeduper] = None) -> None:
        self.transfers: Dict[TransferKey, List[TransferRecord]] = {}
        self.pairs: Dict[PairKey, PairState] = {}
        self.mutual_transfers: Dict[TransferKey, List[TransferRecord]] = {}
        self.deduper = deduper or LineDeduper()
        self.aborted = 0

    def observe(self, record: TransferRecord) -> bool:
        """
        Feed one record. Returns True when the mutual registry changed.
        The forward index insert happens regardless of the outcome.
        """
        changed = False
        pair_key = record.pair_key()
        state = self.pairs.get(pair_key)

        if state is None:
            self.pairs[pair_key] = PairState(key=pair_key, status=PairStatus.ONE_SIDED)
        elif state.status is PairStatus.MUTUAL:
            changed = self._register_side(record.src_mac, [record], record.dst_mac)
        else:
            back_talk = self.transfers.get(record.reverse_key(), [])
            if back_talk:
                log.info(
                    "two-sided activity detected: %s <-> %s (%s) at line %d",
                    record.src_mac,
                    record.dst_mac,
                    record.protocol,
                    record.line_index,
                )
                log.debug("known back talk: %s", [r.to_dict() for r in back_talk])
                if self.register_mutual(record.src_mac, [record], record.dst_mac, back_talk):
                    state.status = PairStatus.MUTUAL
                    state.completed_at = record.line_index
                    changed = True

        self.transfers.setdefault(record.transfer_key(), []).append(record)
        return changed

    def register_mutual(
        self,
        src_mac: str,
        src_records: Sequence[TransferRecord],
        dst_mac: str,
        dst_records: Sequence[TransferRecord],
    ) -> bool:
        """
        Validate both sides, then register each one. On any violation
        nothing is registered and False is returned.
        """
        try:
            validate_mutual(src_mac, src_records, dst_mac, dst_records)
        except MutualValidationError as e:
            log.error("errors registering communication %s <-> %s:", src_mac, dst_mac)
            for violation in e.violations:
                log.error("  %s", violation)
            log.warning("mutual transfer registration aborted")
            self.aborted += 1
            return False

        self._register_side(src_mac, src_records, dst_mac)
        self._register_side(dst_mac, dst_records, src_mac)
        return True

    def _register_side(
        self, mac: str, records: Sequence[TransferRecord], partner: str
    ) -> bool:
        key = (mac, partner, records[0].protocol)
        registered = self.mutual_transfers.setdefault(key, [])

        changed = False
        for r in records:
            if self.deduper.should_add(key, r.line_index):
                registered.append(r)
                changed = True
            else:
                log.warning(
                    "record %d %s already registered in the mutual registry",
                    r.line_index,
                    r.key(),
                )
        return changed

    def status_of(self, mac_a: str, mac_b: str, protocol: str) -> Optional[PairStatus]:
        low, high = sorted((mac_a, mac_b))
        state = self.pairs.get((low, high, protocol))
        return state.status if state else None

    def history(self, src_mac: str, dst_mac: str, protocol: str) -> List[TransferRecord]:
        return list(self.transfers.get((src_mac, dst_mac, protocol), []))

    def mutual_by_mac(self) -> Dict[str, Dict[str, Dict[str, List[TransferRecord]]]]:
        """
        Nested view mac -> protocol -> partner -> records, macs sorted.
        """
        out: Dict[str, Dict[str, Dict[str, List[TransferRecord]]]] = {}
        for (mac, partner, protocol), records in sorted(self.mutual_transfers.items()):
            out.setdefault(mac, {}).setdefault(protocol, {})[partner] = list(records)
        return out

    def mutual_pair_count(self) -> int:
        return sum(1 for s in self.pairs.values() if s.status is PairStatus.MUTUAL)
