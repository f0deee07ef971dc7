from __future__ import annotations
from typing import Dict, Hashable, Set


class LineDeduper:
    """
    Remembers which line indices were already accepted under a key.

    Example:
      The mutual registry may be asked to register the same record twice,
      once as fresh traffic and once as back talk. Only the first call
      should append it.
    """

    def __init__(self) -> None:
        self.seen: Dict[Hashable, Set[int]] = {}

    def should_add(self, key: Hashable, line_index: int) -> bool:
        """
        True means the line is new for this key and is now marked as seen.
        False means it was registered before.
        """
        lines = self.seen.setdefault(key, set())
        if line_index in lines:
            return False
        lines.add(line_index)
        return True
