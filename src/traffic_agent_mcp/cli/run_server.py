from __future__ import annotations
from traffic_agent_mcp.core.logs import setup_logging
from traffic_agent_mcp.core.server import TrafficMCPServer
from traffic_agent_mcp.core.settings import ReportSettings


def main() -> None:
    """
    Start the MCP server. Configuration comes from TRAFFIC_* env vars.

    Example:
      export TRAFFIC_INPUT=/var/log/traf.txt
      export TRAFFIC_TOP_NETWORKS=20
      python -m traffic_agent_mcp.cli.run_server
    """
    settings = ReportSettings.from_env()
    setup_logging(settings.log_level)

    server = TrafficMCPServer(settings=settings)
    server.run()


if __name__ == "__main__":
    main()
