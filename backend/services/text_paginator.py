"""
Pixel-width-aware review text wrapping and pagination.

The text is split into paragraphs on user line breaks (always kept as line
starts), each paragraph is greedily wrapped against a `measure(str) -> px`
callable, and the flat list of lines is chunked into pages.

Breaks prefer whitespace and sentence punctuation (latin and CJK). When a
line has no break candidate the pending text is cut one character at a time
until it fits. Every wrap step consumes at least one character of the
paragraph, so the loop terminates for any input and any font metrics.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, List

from domain.models import Page

logger = logging.getLogger(__name__)

Measure = Callable[[str], float]

# Whitespace runs and single sentence-terminal marks are their own tokens.
_TOKEN_RE = re.compile(r"(\s+|[。！？.!?,])")
_BREAK_AFTER_RE = re.compile(r"(\s|[。！？.!?,])$")
_PARAGRAPH_RE = re.compile(r"\n+")

MAX_WRAP_STEPS = 1000


class PaginationError(RuntimeError):
    """The wrap loop ran past its step guard. Indicates a bug, not bad input."""


def tokenize(text: str) -> List[str]:
    """Split text into words, whitespace runs and punctuation marks; joining them gives back `text`."""
    return [tok for tok in _TOKEN_RE.split(text) if tok]


def _hard_cut(line: str, token: str, max_width_px: float, measure: Measure) -> str:
    """
    Longest prefix of line + token that fits, one character at a time.

    `line` is known to fit, so the search walks forward through `token`
    instead of shrinking a possibly huge pending string from the end.
    """
    cut = line
    for ch in token:
        if measure(cut + ch) > max_width_px:
            break
        cut += ch
    return cut


def wrap_paragraph(text: str, max_width_px: float, measure: Measure) -> List[str]:
    """
    Greedily wrap one paragraph into lines no wider than max_width_px.

    The paragraph is tokenized once; a cursor (token index plus a character
    offset into that token after a hard cut) marks where the next line
    starts. Each pass emits at most one line and moves the cursor forward by
    at least one character. If not even one character fits, the rest of the
    paragraph is emitted verbatim as the last line.
    """
    lines: List[str] = []
    tokens = tokenize(text)
    pos = 0
    offset = 0
    # every step moves the cursor, so this guard only trips on a bug
    step_limit = MAX_WRAP_STEPS + len(text)
    steps = 0

    while pos < len(tokens):
        steps += 1
        if steps > step_limit:
            raise PaginationError(
                f"wrap did not converge after {step_limit} steps (token {pos} of {len(tokens)})"
            )

        line = ""
        break_len = -1
        break_index = -1
        i = pos
        token = tokens[pos][offset:]
        while True:
            pending = line + token
            if measure(pending) > max_width_px:
                break
            line = pending
            if _BREAK_AFTER_RE.search(token):
                break_len = len(line)
                break_index = i
            i += 1
            if i == len(tokens):
                break
            token = tokens[i]

        if i == len(tokens):
            if line.strip():
                lines.append(line.strip())
            break

        if not token.strip():
            # overflowing whitespace: the line so far fits, break right here
            if line.strip():
                lines.append(line.strip())
            pos, offset = i + 1, 0
        elif break_index >= 0:
            line_text = line[:break_len].strip()
            if line_text:
                lines.append(line_text)
            pos, offset = break_index + 1, 0
        else:
            cut = _hard_cut(line, token, max_width_px, measure)
            if not cut:
                # nothing fits at all; give up on this paragraph without looping
                stuck = (tokens[pos][offset:] + "".join(tokens[pos + 1:])).strip()
                if stuck:
                    lines.append(stuck)
                logger.debug("wrap_paragraph: zero-progress cut, emitted %d chars verbatim", len(stuck))
                return lines
            if cut.strip():
                lines.append(cut.strip())
            consumed = len(cut) - len(line)
            # the cut ends inside tokens[i]; resume from the first character it left behind
            offset = (offset if i == pos else 0) + consumed
            pos = i

    return lines


def wrap_text(text: str, max_width_px: float, measure: Measure) -> List[str]:
    """Normalize line endings, split into paragraphs and wrap each; returns one flat list of lines."""
    raw = (text or "").replace("\r\n", "\n").replace("\r", "\n").strip()
    if not raw:
        return []
    lines: List[str] = []
    for paragraph in _PARAGRAPH_RE.split(raw):
        paragraph = paragraph.strip()
        if paragraph:
            lines.extend(wrap_paragraph(paragraph, max_width_px, measure))
    return lines


def paginate_review(
    text: str,
    max_lines_per_page: int,
    max_width_px: float,
    measure: Measure,
) -> List[Page]:
    """
    Wrap review text and split the lines into pages of at most
    max_lines_per_page lines. Empty text gives no pages; no page is empty.
    """
    if max_lines_per_page < 1:
        raise ValueError(f"max_lines_per_page must be >= 1, got {max_lines_per_page}")
    if max_width_px <= 0:
        raise ValueError(f"max_width_px must be positive, got {max_width_px}")
    lines = wrap_text(text, max_width_px, measure)
    pages = [lines[i:i + max_lines_per_page] for i in range(0, len(lines), max_lines_per_page)]
    logger.debug(
        "paginate_review: %d lines -> %d pages (max_lines=%d, max_width=%s)",
        len(lines),
        len(pages),
        max_lines_per_page,
        max_width_px,
    )
    return pages
