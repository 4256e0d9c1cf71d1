from __future__ import annotations

import logging
from pathlib import Path

from .ast import ProtoFile
from .parser import SchemaParser

logger = logging.getLogger(__name__)


def parse(file_name: str, source: str) -> ProtoFile:
    """Parse schema text; `file_name` is recorded on the result and in error spans."""
    return parse_source(source, file=file_name)


def parse_source(src: str, *, file: str = "") -> ProtoFile:
    logger.debug("parsing %s (%d chars)", file or "<memory>", len(src))
    out = SchemaParser.of(src, file).parse_file()
    logger.debug(
        "parsed %s: %d types, %d services, %d extends",
        file or "<memory>",
        len(out.types),
        len(out.services),
        len(out.extend_declarations),
    )
    return out


def parse_file(path: str | Path) -> ProtoFile:
    p = Path(path).expanduser()
    src = p.read_text(encoding="utf-8")
    return parse_source(src, file=str(path))
