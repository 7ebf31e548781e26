"""Tool category modules for the Coda MCP server.

This package contains MCP tools organized by Coda resource:
- document_tools: Documents (list, get, create, update)
- page_tools: Pages (list, create, delete, content read/peek/replace/append, duplicate, rename)
- table_tools: Tables and columns (list, get, summary)
- row_tools: Rows (list, get, create, update, delete, bulk update)
- formula_tools: Formulas, controls and buttons
- account_tools: Current user and browser link resolution
- search_tools: Search and document statistics
"""

from .account_tools import register_account_tools
from .document_tools import register_document_tools
from .formula_tools import register_formula_tools
from .page_tools import register_page_tools
from .row_tools import register_row_tools
from .search_tools import register_search_tools
from .table_tools import register_table_tools

__all__ = [
    "register_document_tools",
    "register_page_tools",
    "register_table_tools",
    "register_row_tools",
    "register_formula_tools",
    "register_account_tools",
    "register_search_tools",
]
