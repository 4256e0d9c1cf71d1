from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import fields, is_dataclass
from enum import Enum

from .api import parse_file
from .ast import EnumConstant
from .errors import ModelValidationError, ParseError
from .format import format_proto_file

logger = logging.getLogger(__name__)


def _to_jsonable(obj):
    if isinstance(obj, EnumConstant):
        return {"enum": obj.name}
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj):
        # asdict() would turn EnumConstant values into plain dicts.
        return {f.name: _to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, (tuple, list)):
        return [_to_jsonable(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _to_jsonable(v) for k, v in obj.items()}
    return obj


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="protoschema", description="Parse proto2 .proto schema files")
    ap.add_argument("files", nargs="+", help=".proto files to parse")
    ap.add_argument("--json", action="store_true", help="Print parsed AST as JSON")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    parsed = {}
    for path in args.files:
        try:
            parsed[path] = parse_file(path)
        except (ParseError, ModelValidationError) as e:
            logger.debug("failed to parse %s", path, exc_info=True)
            print(f"{path}: {e}" if isinstance(e, ModelValidationError) else str(e), file=sys.stderr)
            return 1
        except OSError as e:
            print(f"{path}: {e.strerror or e}", file=sys.stderr)
            return 1

    if args.json:
        payload = {p: _to_jsonable(pf) for p, pf in parsed.items()}
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        for pf in parsed.values():
            sys.stdout.write(format_proto_file(pf))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
