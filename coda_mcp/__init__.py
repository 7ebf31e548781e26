"""Coda MCP server package.

Exposes the Coda document workspace API as Model Context Protocol tools.
"""

__version__ = "1.0.0"
