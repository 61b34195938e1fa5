"""
Byte-level encoding detection for catalog XML exports.

The upstream ERP writes UTF-8 or UTF-16 (with or without a BOM) and does not
always declare it correctly in the XML prolog.
"""

from __future__ import annotations

from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.catalog.encoding")

_BOMS = (
    (b"\xef\xbb\xbf", "utf-8"),
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
)


def detect_encoding(data: bytes) -> tuple[str, int]:
    """
    Return ``(codec, bom_length)`` for raw document bytes.

    BOMs win; otherwise a NUL in the first two bytes indicates BOM-less
    UTF-16 ("<\\x00" little endian, "\\x00<" big endian); anything else is UTF-8.
    """
    for bom, codec in _BOMS:
        if data.startswith(bom):
            logger.debug(f"Detected {codec} BOM")
            return codec, len(bom)
    if len(data) >= 2:
        if data[1] == 0 and data[0] != 0:
            logger.debug("No BOM, NUL pattern suggests utf-16-le")
            return "utf-16-le", 0
        if data[0] == 0 and data[1] != 0:
            logger.debug("No BOM, NUL pattern suggests utf-16-be")
            return "utf-16-be", 0
    return "utf-8", 0


def decode_document(data: bytes) -> str:
    """Decode document bytes to text with the BOM removed."""
    codec, bom_length = detect_encoding(data)
    return data[bom_length:].decode(codec)
