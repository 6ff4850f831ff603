from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path

def relpath(root: Path, path: Path) -> str:
    return str(path.resolve().relative_to(root.resolve())).replace("\\", "/")

def matches_ignore_pattern(rel_path: str, patterns: list[str]) -> bool:
    """Check if a relative path matches any of the ignore patterns.

    Supports glob patterns like:
    - "**/.DS_Store" - match .DS_Store in any directory
    - ".git/**" - match everything under .git
    - "**/~$*" - match Office lock files in any directory
    """
    rel_path = rel_path.replace("\\", "/")
    parts = rel_path.split("/")

    for pattern in patterns:
        pattern = pattern.replace("\\", "/")

        if pattern.startswith("**/"):
            suffix = pattern[3:]
            if fnmatch(rel_path, suffix) or fnmatch(rel_path, f"*/{suffix}"):
                return True
            for i, part in enumerate(parts):
                if fnmatch(part, suffix) or fnmatch("/".join(parts[i:]), suffix):
                    return True

        elif pattern.endswith("/**"):
            prefix = pattern[:-3]
            if rel_path == prefix or rel_path.startswith(prefix + "/"):
                return True

        elif fnmatch(rel_path, pattern):
            return True

    return False
