from __future__ import annotations
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from .engine import TrafficEngine
from .report import ReportGenerator
from .settings import ReportSettings


class TrafficMCPServer:
    """
    MCP server around the traffic engine.

    Responsibilities:
      Run one fresh engine per analysis request
      Keep the last report for follow up questions
      Expose runtime settings as a tool
    """

    def __init__(self, settings: Optional[ReportSettings] = None):
        self.settings = settings or ReportSettings.from_env()
        self.mcp = FastMCP("traffic_agent_mcp")
        self._last: Dict[str, Any] = {}

        self._register_core_tools()

    async def analyze(self, path: Optional[str] = None) -> Dict[str, Any]:
        """
        Analyze one log file. Reads go through the async row source so the
        server event loop is never blocked on file I/O.
        """
        target = path or self.settings.input_file
        engine = TrafficEngine(allow_empty_octets=self.settings.allow_empty_octets)
        await engine.ingest_file_async(target, delimiter=self.settings.delimiter)

        report = ReportGenerator(engine.store, engine.detector).build(
            top_nodes=self.settings.top_nodes,
            top_networks=self.settings.top_networks,
        )
        self._last = {"input": target, "status": engine.status(), "report": report}
        return self._last

    @property
    def last(self) -> Dict[str, Any]:
        return self._last

    def _register_core_tools(self) -> None:
        @self.mcp.tool()
        async def analyze_file(path: Optional[str] = None) -> Dict[str, Any]:
            return await self.analyze(path)

        @self.mcp.tool()
        def configure_report(
            top_nodes: Optional[int] = None,
            top_networks: Optional[int] = None,
            delimiter: Optional[str] = None,
            allow_empty_octets: Optional[bool] = None,
        ) -> Dict[str, Any]:
            return self.settings.update(
                top_nodes=top_nodes,
                top_networks=top_networks,
                delimiter=delimiter,
                allow_empty_octets=allow_empty_octets,
            )

        @self.mcp.tool()
        def last_report() -> Dict[str, Any]:
            return self.last

    def run(self) -> None:
        self.mcp.run()
