#!/usr/bin/env python3
"""
Fail if the HTTP client core imports the MCP/tool layer.
Checks client.py, models.py and config.py under src/meraki_secure_connect/.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
PACKAGE_DIR = REPO_ROOT / "src" / "meraki_secure_connect"
CORE_FILES = ("client.py", "models.py", "config.py")

FORBIDDEN_PREFIXES = (
    "mcp",
    "fastmcp",
    "starlette",
    "meraki_secure_connect.server",
    "meraki_secure_connect.tools",
)
RELATIVE_FORBIDDEN = ("server", "tools")


def is_forbidden(module: str) -> bool:
    return any(
        module == prefix or module.startswith(prefix + ".")
        for prefix in FORBIDDEN_PREFIXES
    )


def scan_file(path: Path) -> list[str]:
    errors: list[str] = []
    tree = ast.parse(path.read_text())
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                mod = alias.name
                if is_forbidden(mod):
                    errors.append(f"{path}: forbidden import '{mod}'")
        elif isinstance(node, ast.ImportFrom):
            mod = node.module or ""
            if node.level:
                head = mod.split(".")[0]
                if head in RELATIVE_FORBIDDEN:
                    errors.append(f"{path}: forbidden import '.{mod}'")
            elif mod and is_forbidden(mod):
                errors.append(f"{path}: forbidden import '{mod}'")
    return errors


def main() -> int:
    violations: list[str] = []
    for name in CORE_FILES:
        violations.extend(scan_file(PACKAGE_DIR / name))

    if violations:
        for v in violations:
            print(v, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
