"""Formatting utilities for domain values."""


def format_bytes(size_bytes: int) -> str:
    """Format a size in bytes as a human-readable string.

    Args:
        size_bytes: Size in bytes.

    Returns:
        The size with one decimal and a unit, e.g. "1.5 KB".
    """
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


def connectivity_to_color(online: bool) -> str:
    """Map connectivity state to color name.

    Returns:
        "green" when online, "red" when offline.
    """
    return "green" if online else "red"


def failure_kind_to_color(kind: str) -> str:
    """Map a failure kind to color name.

    Args:
        kind: Failure kind ("record", "sprite" or "audio")

    Returns:
        Color name string, or empty string for an unknown kind.
    """
    color_map = {
        "record": "red",
        "sprite": "yellow",
        "audio": "yellow",
    }
    return color_map.get(kind, "")
