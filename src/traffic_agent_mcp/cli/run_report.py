from __future__ import annotations
import argparse
from typing import List, Optional

from traffic_agent_mcp.cli.render import render_report
from traffic_agent_mcp.core.engine import TrafficEngine
from traffic_agent_mcp.core.logs import setup_logging
from traffic_agent_mcp.core.report import ReportGenerator
from traffic_agent_mcp.core.settings import ReportSettings


def build_parser(default_input: str) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="traffic-report",
        description="Traffic report analyzer for ';' separated capture logs.",
    )
    ap.add_argument(
        "in_file",
        metavar="in-file",
        nargs="?",
        default=default_input,
        help=f"input report file to parse (default: {default_input})",
    )
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    """
    Analyze one log file and print the console report.

    Settings other than the input path come from TRAFFIC_* env vars.
    Example:
      TRAFFIC_TOP_NODES=5 traffic-report traf.txt

    Always returns 0, an unreadable file yields an empty report.
    """
    settings = ReportSettings.from_env()
    args = build_parser(settings.input_file).parse_args(argv)
    setup_logging(settings.log_level)

    engine = TrafficEngine(allow_empty_octets=settings.allow_empty_octets)
    engine.ingest_file(args.in_file, delimiter=settings.delimiter)

    report = ReportGenerator(engine.store, engine.detector).build(
        top_nodes=settings.top_nodes,
        top_networks=settings.top_networks,
    )
    print(render_report(report))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
