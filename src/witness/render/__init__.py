"""Rendering of legacy document text for display."""

from .formatting import (
    TextMetadata,
    extract_text_metadata,
    format_document_date,
    format_file_size,
)
from .text import (
    RenderOptions,
    decode_special_characters,
    process_text,
    strip_formatting_codes,
    translate_formatting,
    wrap_long_lines,
)

__all__ = [
    "RenderOptions",
    "TextMetadata",
    "decode_special_characters",
    "extract_text_metadata",
    "format_document_date",
    "format_file_size",
    "process_text",
    "strip_formatting_codes",
    "translate_formatting",
    "wrap_long_lines",
]
