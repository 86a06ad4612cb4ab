"""Render text recovered from legacy word-processor files.

The archived files still carry the word processor's formatting directives
(header lines such as ``*lm12:rm75``) and inline numeric codes glued to the
surrounding words (``04Important20``). This module strips the directives,
translates the inline codes into HTML markup, and normalizes whitespace so the
text can be displayed in a browser or terminal.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from witness.config.models import RenderSettings

_DIRECTIVE_PATTERNS = (
    re.compile(r"^\*[a-z]{1,4}\d+:.*$"),  # *lm12:rm75
    re.compile(r"^\*\d+=.*$"),  # *0=14:1=20
    re.compile(r"^\*ft\d+:.*$"),  # *ft4:...
    re.compile(r"^\*vp\d+$"),  # *vp4
    re.compile(r'^\*nb".*"$'),  # *nb"filename"
)
_INLINE_CODE = re.compile(r"(\d{2,3})(?=[A-Za-z])|(?<=[A-Za-z])(\d{2,3})")
_BACKTICK_CODE = re.compile(r"`\d+")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

# code -> (style, role); colour codes are recognized but produce no markup.
_FORMAT_CODES: Dict[str, Tuple[str, Optional[str]]] = {
    "04": ("bold", "start"),
    "20": ("bold", "end"),
    "18": ("underline", "start"),
    "146": ("underline", "end"),
    "046": ("emphasis", "start"),
    "147": ("emphasis", "end"),
    "43": ("quote", "start"),
    "45": ("quote", "end"),
    "05": ("color", None),
    "28": ("color", None),
    "29": ("color", None),
    "30": ("color", None),
    "31": ("color", None),
}
# style -> (opening markup, element closed at the end)
_MARKUP: Dict[str, Tuple[str, str]] = {
    "bold": ("<strong>", "strong"),
    "underline": ("<u>", "u"),
    "emphasis": ("<em>", "em"),
    "quote": ('<span class="font-semibold">', "span"),
}


class RenderOptions(BaseModel):
    """Options for :func:`process_text`."""

    model_config = ConfigDict(frozen=True)

    strip_headers: bool = True
    decode_chars: bool = True
    wrap_lines: bool = False
    max_line_length: int = Field(default=80, ge=1)

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> "RenderOptions":
        """Build options from the ``render`` configuration section."""
        return cls(**settings.model_dump())


def is_directive_line(line: str) -> bool:
    """Return True when ``line`` is a bare formatting directive."""
    trimmed = line.strip()
    if not trimmed:
        return False
    return trimmed.startswith(";") or any(
        pattern.match(trimmed) for pattern in _DIRECTIVE_PATTERNS
    )


def strip_formatting_codes(text: str) -> str:
    """Drop the directive header that precedes the document body.

    Directive and blank lines are skipped only until the first content line; every
    line after that is kept verbatim, including blank lines and lines that look
    like directives.
    """
    kept: List[str] = []
    in_content = False
    for line in text.split("\n"):
        if not in_content:
            if not line.strip() or is_directive_line(line):
                continue
            in_content = True
        kept.append(line)
    return "\n".join(kept).strip()


def translate_formatting(text: str) -> str:
    """Replace inline formatting codes with HTML markup.

    Codes are two or three digits directly adjacent to a letter. Start codes open
    an element, end codes close the most recently opened one, and codes without a
    markup mapping are removed. Elements still open at the end are closed in
    reverse order so the output stays well formed.
    """
    open_elements: List[str] = []
    pieces: List[str] = []
    last_index = 0

    for match in _INLINE_CODE.finditer(text):
        pieces.append(text[last_index : match.start()])
        last_index = match.end()

        style, role = _FORMAT_CODES.get(match.group(0), ("", None))
        markup = _MARKUP.get(style)
        if markup is None or role is None:
            continue
        if role == "start":
            opening, element = markup
            pieces.append(opening)
            open_elements.append(element)
        elif open_elements:
            pieces.append(f"</{open_elements.pop()}>")

    pieces.append(text[last_index:])
    while open_elements:
        pieces.append(f"</{open_elements.pop()}>")
    return "".join(pieces)


def decode_special_characters(text: str) -> str:
    """Remove backtick codes, translate inline codes, and drop control characters.

    Newlines, carriage returns, and tabs are preserved.
    """
    decoded = _BACKTICK_CODE.sub("", text)
    decoded = translate_formatting(decoded)
    return _CONTROL_CHARS.sub("", decoded)


def wrap_long_lines(text: str, max_length: int = 80) -> str:
    """Break lines longer than ``max_length`` at spaces, never inside a word.

    A single word longer than ``max_length`` is kept on its own line.
    """
    wrapped: List[str] = []
    for line in text.split("\n"):
        if len(line) <= max_length:
            wrapped.append(line)
            continue
        current = ""
        for word in line.split(" "):
            if len(current) + len(word) + 1 <= max_length:
                current = f"{current} {word}" if current else word
            else:
                if current:
                    wrapped.append(current)
                current = word
        if current:
            wrapped.append(current)
    return "\n".join(wrapped)


def process_text(raw_text: str, options: Optional[RenderOptions] = None) -> str:
    """Run the full rendering pipeline over ``raw_text``.

    Headers are stripped, inline codes decoded, and long lines wrapped according
    to ``options``; runs of three or more newlines then collapse to a paragraph
    break and surrounding whitespace is trimmed.
    """
    options = options or RenderOptions()
    processed = raw_text.replace("\r\n", "\n")
    if options.strip_headers:
        processed = strip_formatting_codes(processed)
    if options.decode_chars:
        processed = decode_special_characters(processed)
    if options.wrap_lines:
        processed = wrap_long_lines(processed, options.max_line_length)
    return _EXCESS_NEWLINES.sub("\n\n", processed).strip()


__all__ = [
    "RenderOptions",
    "is_directive_line",
    "strip_formatting_codes",
    "translate_formatting",
    "decode_special_characters",
    "wrap_long_lines",
    "process_text",
]
