"""Formatting helpers for log messages."""

_UNITS = ('KiB', 'MiB', 'GiB', 'TiB', 'PiB')


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count with a binary (1024-based) unit.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = float(size_bytes)
    for unit in _UNITS:
        size /= 1024.0
        if size < 1024.0 or unit == _UNITS[-1]:
            return f"{size:.2f} {unit}"
