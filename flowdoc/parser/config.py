"""Shared configuration for the flowdoc parser.

Centralizes file extension mappings, the call names that mark contract and
scenario definitions, and label limits.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple

# File extension to tree-sitter language name
EXTENSION_TO_LANGUAGE: Dict[str, str] = {
    # TypeScript
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    # JavaScript (JSX goes through the tsx grammar)
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "tsx",
}

# Call names that introduce a contract / scenario / scenario step
DEFINE_CALLEES: Tuple[str, ...] = ("define",)
SCENARIO_CALLEES: Tuple[str, ...] = ("scenario",)
STEP_CALLEES: Tuple[str, ...] = ("step",)

# Labels are part of the flow hash, so the width is fixed
LABEL_MAX_CHARS = 64


def language_for_file(file_path: Path) -> Optional[str]:
    """Map a file path to a tree-sitter language name, or None if unsupported."""
    return EXTENSION_TO_LANGUAGE.get(Path(file_path).suffix.lower())


def is_supported_file(file_path: Path) -> bool:
    return language_for_file(file_path) is not None
