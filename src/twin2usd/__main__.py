from __future__ import annotations

"""Command line entry point: ``python -m twin2usd MODEL.json``."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from .builder import build_stage
from .export import export_filename, load_twin_model, write_usda
from .hierarchy import format_hierarchy, stage_hierarchy
from .usda import SerializerConfig, serialize_stage

logger = logging.getLogger("twin2usd.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twin2usd",
        description="Convert a digital-twin model JSON file to a USD ASCII (.usda) scene",
    )
    parser.add_argument("model", type=Path, help="twin-model JSON file")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="output .usda path or directory (defaults to <model name>.usda next to the input)",
    )
    parser.add_argument("--stdout", action="store_true", help="print the .usda text instead of writing a file")
    parser.add_argument(
        "--tree",
        choices=("text", "json"),
        default=None,
        help="print the prim hierarchy instead of the .usda text",
    )
    parser.add_argument("--indent", type=int, default=4, help="spaces per nesting level")
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.environ.get("TWIN2USD_LOG_LEVEL", "WARNING"),
        help="logging level (env: TWIN2USD_LOG_LEVEL)",
    )
    return parser


def _resolve_output(output: Path | None, model_path: Path, filename: str) -> Path:
    if output is None:
        return model_path.parent / filename
    if output.is_dir() or not output.suffix:
        return output / filename
    return output


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        raw_model = load_twin_model(args.model)
    except (OSError, ValueError) as exc:
        logger.error("Could not read twin model %s: %s", args.model, exc)
        return 1

    stage = build_stage(raw_model)
    config = SerializerConfig(indent=" " * max(1, args.indent))

    if args.tree == "json":
        print(json.dumps(stage_hierarchy(stage), indent=2))
        return 0
    if args.tree == "text":
        print(format_hierarchy(stage))
        return 0
    if args.stdout:
        sys.stdout.write(serialize_stage(stage, config=config))
        return 0

    out_path = _resolve_output(args.output, args.model, export_filename(raw_model))
    write_usda(stage, out_path, config=config)
    print(f"wrote usda: {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
