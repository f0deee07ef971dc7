"""
traffic_agent_mcp

Streaming analyzer for delimited traffic capture logs.

Core ideas
1. Parsers turn log lines into raw field rows
2. The engine normalizes each row and feeds running aggregates
3. A mutual transfer detector flags MAC pairs talking both ways
4. Reports are read once at the end, on the console or over MCP
"""

__all__ = ["core", "parsers", "cli"]
