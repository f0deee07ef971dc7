from __future__ import annotations
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

DEFAULT_INPUT_FILE = "traf.txt"


def _positive_int(name: str, value: Any) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if n < 1:
        raise ValueError(f"{name} must be at least 1, got {n}")
    return n


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ReportSettings:
    """
    Runtime configuration for one analysis run.

      input_file
        Log file analyzed when no path is given.

      delimiter
        Field separator of the log.

      top_nodes, top_networks
        Length of the ranking lists in the report.

      allow_empty_octets
        Read an empty MAC octet as 00 instead of rejecting the record.

      log_level
        Level passed to setup_logging by the entry points.
    """

    input_file: str = DEFAULT_INPUT_FILE
    delimiter: str = ";"
    top_nodes: int = 10
    top_networks: int = 10
    allow_empty_octets: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReportSettings":
        """
        Build settings from TRAFFIC_* environment variables.

        Example:
          export TRAFFIC_INPUT=/var/log/traf.txt
          export TRAFFIC_TOP_NODES=5
          traffic-report
        """
        env = os.environ if environ is None else environ
        settings = cls()
        settings.update(
            input_file=env.get("TRAFFIC_INPUT"),
            delimiter=env.get("TRAFFIC_DELIMITER"),
            top_nodes=env.get("TRAFFIC_TOP_NODES"),
            top_networks=env.get("TRAFFIC_TOP_NETWORKS"),
            allow_empty_octets=env.get("TRAFFIC_ALLOW_EMPTY_OCTETS"),
            log_level=env.get("TRAFFIC_LOG_LEVEL"),
        )
        return settings

    def update(
        self,
        input_file: Optional[str] = None,
        delimiter: Optional[str] = None,
        top_nodes: Optional[Any] = None,
        top_networks: Optional[Any] = None,
        allow_empty_octets: Optional[Any] = None,
        log_level: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Change settings at runtime, None leaves a value untouched.
        Exposed as an MCP tool by the server.
        """
        if input_file is not None:
            self.input_file = str(input_file)
        if delimiter is not None:
            if len(delimiter) != 1:
                raise ValueError(f"delimiter must be a single character, got {delimiter!r}")
            self.delimiter = delimiter
        if top_nodes is not None:
            self.top_nodes = _positive_int("top_nodes", top_nodes)
        if top_networks is not None:
            self.top_networks = _positive_int("top_networks", top_networks)
        if allow_empty_octets is not None:
            self.allow_empty_octets = _flag(allow_empty_octets)
        if log_level is not None:
            self.log_level = str(log_level).upper()

        return self.as_dict()

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
