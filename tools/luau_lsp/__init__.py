"""tools/luau_lsp

luau-lsp static analyzer adapter.
"""

from __future__ import annotations

from .runner import (
    LUAU_LSP_BIN_ENV,
    LUAU_LSP_FALLBACKS,
    build_analyze_command,
    luau_lsp_version,
    run_analyze,
)

__all__ = [
    "LUAU_LSP_BIN_ENV",
    "LUAU_LSP_FALLBACKS",
    "build_analyze_command",
    "luau_lsp_version",
    "run_analyze",
]
