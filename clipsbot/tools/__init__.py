"""
MCP tools for clip search.
"""

from . import clips

__all__ = [
    "clips",
]
