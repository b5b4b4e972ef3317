import re

_EXT_RE = re.compile(r"\.[^/.]+$")
_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def strip_extension(file_name: str) -> str:
    """``bracket.v2.step`` -> ``bracket.v2``; names without an extension pass through."""
    return _EXT_RE.sub("", file_name)


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    # 1.50 -> 1.5, 2.00 -> 2
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"
