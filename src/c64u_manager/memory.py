"""Hex address and byte string helpers for DMA memory commands."""

from __future__ import annotations

import string

from .const import MAX_ADDRESS
from .exception import InvalidAddress, InvalidHexDigit, InvalidHexLength

_HEX_DIGITS = frozenset(string.hexdigits)
_ADDRESS_PREFIXES = ("0x", "0X", "$")
_ROW_WIDTH = 16
_GROUP_WIDTH = 8


def _strip_prefix(text: str) -> str:
    for prefix in _ADDRESS_PREFIXES:
        if text.startswith(prefix):
            return text[len(prefix) :]
    return text


def parse_address(text: str) -> int:
    """Parse a 16-bit memory address written in hex.

    Accepts ``0400``, ``400``, ``0x0400`` and ``$0400``. Odd-length input is
    left-padded with a zero nibble before parsing.

    Args:
        text: Address as typed by the user

    Returns:
        The address as an integer in 0x0000..0xFFFF

    Raises:
        InvalidAddress: If the text is empty, not hex, or above 0xFFFF
    """
    digits = _strip_prefix(text.strip())
    if not digits:
        raise InvalidAddress(
            "Invalid memory address", [f"'{text}' is not a hex address"]
        )
    if len(digits) % 2:
        digits = "0" + digits
    if any(ch not in _HEX_DIGITS for ch in digits):
        raise InvalidAddress(
            "Invalid memory address",
            [f"'{text}' contains non-hex characters"],
        )
    value = int(digits, 16)
    if value > MAX_ADDRESS:
        raise InvalidAddress(
            "Invalid memory address",
            [f"'{text}' is outside the 16-bit range $0000-$FFFF"],
        )
    return value


def format_address(value: int) -> str:
    """Return the address as four uppercase hex digits."""
    return f"{value & MAX_ADDRESS:04X}"


def parse_byte_string(text: str) -> bytes:
    """Decode an even-length hex string into bytes.

    The codec imposes no size limit; callers enforce the device's DMA limit
    before building a request.

    Raises:
        InvalidHexLength: If the string has an odd number of digits
        InvalidHexDigit: If any character is outside ``[0-9a-fA-F]``
    """
    if len(text) % 2:
        raise InvalidHexLength(
            "Invalid hex data",
            [f"'{text}' has an odd number of hex digits ({len(text)})"],
        )
    for index, ch in enumerate(text):
        if ch not in _HEX_DIGITS:
            raise InvalidHexDigit(
                "Invalid hex data",
                [f"'{ch}' at position {index} is not a hex digit"],
            )
    return bytes.fromhex(text)


def bytes_to_hex(data: bytes) -> str:
    """Encode bytes as a lowercase hex string."""
    return data.hex()


def _ascii_cell(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def format_dump(data: bytes, start_address: int) -> str:
    """Render bytes as a classic 16-column hex + ASCII dump.

    Each row is ``AAAA: `` followed by sixteen ``XX `` cells with an extra
    space after the eighth, then ``|ascii|``. Missing cells on the last row
    are padded with three spaces so the ASCII column stays aligned.
    """
    lines: list[str] = []
    for offset in range(0, len(data), _ROW_WIDTH):
        row = data[offset : offset + _ROW_WIDTH]
        parts = [f"{format_address(start_address + offset)}: "]
        for column in range(_ROW_WIDTH):
            parts.append(f"{row[column]:02X} " if column < len(row) else "   ")
            if column == _GROUP_WIDTH - 1:
                parts.append(" ")
        parts.append(" |")
        parts.append("".join(_ascii_cell(byte) for byte in row))
        parts.append("|\n")
        lines.append("".join(parts))
    return "".join(lines)
