"""
UI module initialization.

Terminal rendering for the NodeScout command line.
"""

from .console import NodeScoutConsole, latency_style

__all__ = [
    "NodeScoutConsole",
    "latency_style"
]
