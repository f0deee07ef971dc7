"""
Input collaborators for the traffic engine.

Everything that knows about the on-disk log format lives here:
  endpoint
    ip:port splitting
  csv_log
    delimiter separated row sources, sync and async
"""

__all__ = ["endpoint", "csv_log"]
