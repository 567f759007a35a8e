from __future__ import annotations

"""File-level helpers: read twin-model JSON, name and write ``.usda`` artifacts."""

import json
import logging
import re
from pathlib import Path
from typing import Any, Mapping

from .model import Stage
from .usda import SerializerConfig, serialize_stage

logger = logging.getLogger("twin2usd.export")

USDA_MIME_TYPE = "text/plain"
DEFAULT_FILE_STEM = "model"

_UNSAFE_FILENAME_RE = re.compile(r"[\\/\x00-\x1f]")


def load_twin_model(path: str | Path) -> dict[str, Any]:
    """Parse a twin-model JSON file. Decode errors propagate to the caller."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


def export_filename(model: Mapping[str, Any] | str | None) -> str:
    """``<model name>.usda``, or ``model.usda`` when the model has no usable name."""
    name = model.get("name") if isinstance(model, Mapping) else model
    stem = _UNSAFE_FILENAME_RE.sub("_", name).strip() if isinstance(name, str) else ""
    return f"{stem or DEFAULT_FILE_STEM}.usda"


def write_usda(
    stage: Stage,
    path: str | Path,
    *,
    config: SerializerConfig | None = None,
) -> Path:
    """Serialize ``stage`` and write it as UTF-8 text. Parent directories are created."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    text = serialize_stage(stage, config=config)
    out_path.write_text(text, encoding="utf-8")
    logger.info("Wrote %s (%d bytes)", out_path, len(text.encode("utf-8")))
    return out_path
