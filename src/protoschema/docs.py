from __future__ import annotations

import re
from collections.abc import Sequence

from .tokens import Comment


_STAR_PREFIX_RE = re.compile(r"^[ \t]*\* ?")
_STAR_LINE_RE = re.compile(r"^[ \t]*\*")


def extract_documentation(comments: Sequence[Comment]) -> str:
    """Normalize the comments directly above a declaration into one string.

    Only the last group counts: the final block comment on its own, or the
    final run of consecutive line comments.
    """
    if not comments:
        return ""
    if comments[-1].block:
        lines = _block_lines(comments[-1].text)
    else:
        run: list[Comment] = []
        for c in reversed(comments):
            if c.block:
                break
            run.append(c)
        lines = [_line_body(c.text) for c in reversed(run)]
    return _trim_blank_edges([line.rstrip() for line in lines])


def _line_body(text: str) -> str:
    body = text[2:]
    if body.startswith(" "):
        body = body[1:]
    return body


def _block_lines(text: str) -> list[str]:
    body = text[2:-2]
    if body.startswith("*"):
        # /** doc-style */
        body = body[1:]
    lines = body.split("\n")
    first, rest = lines[0].strip(), lines[1:]
    if all(_STAR_LINE_RE.match(line) or not line.strip() for line in rest):
        rest = [_STAR_PREFIX_RE.sub("", line, count=1) for line in rest]
    else:
        # Without leading asterisks there is no margin to measure indentation from.
        rest = [line.strip() for line in rest]
    return [first, *rest]


def _trim_blank_edges(lines: list[str]) -> str:
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)
