ROW_SIZE = 32
GROUP_SIZE = 16

_WHITESPACE = b" \t\n\v\f\r"


def _printable(byte: int) -> bool:
    return 0x20 <= byte <= 0x7E


def render(data: bytes, indent: int = 0, raw: bool = False) -> str:
    """
    Render a payload region for display

    Args:
        data: Payload bytes
        indent: Number of spaces before each hex row (structured mode only)
        raw: Emit the bytes as an escaped stream instead of a hex+ASCII block

    Returns:
        Rendered text, newline terminated
    """
    if raw:
        return render_raw(data)
    return render_structured(data, indent)


def render_raw(data: bytes) -> str:
    """Printable and whitespace bytes verbatim, everything else as \\xhh"""
    out = [chr(b) if _printable(b) or b in _WHITESPACE else f"\\x{b:02x}" for b in data]
    out.append("\n")
    return "".join(out)


def render_structured(data: bytes, indent: int = 0) -> str:
    """Rows of 32 bytes: offset label, hex split after 16 bytes, ASCII column"""
    prefix = " " * indent
    lines = []

    for row_start in range(0, len(data), ROW_SIZE):
        row = data[row_start : row_start + ROW_SIZE]
        left = "".join(f"{b:02x} " for b in row[:GROUP_SIZE])
        right = "".join(f"{b:02x} " for b in row[GROUP_SIZE:])
        hex_part = f"{left} {right}" if right else left

        # Only rows shorter than one group make up the group gap
        padding = "   " * (ROW_SIZE - len(row)) + (" " if len(row) < GROUP_SIZE else "")
        ascii_part = "".join(chr(b) if _printable(b) else "." for b in row)

        lines.append(f"{prefix}{row_start:08x}  {hex_part}{padding} {ascii_part}\n")

    return "".join(lines)
