from __future__ import annotations

"""OpenUSD interop: load serialized ``.usda`` text through the ``pxr`` bindings."""

from typing import Any

from .model import Stage
from .usda import SerializerConfig, serialize_stage


def _require_pxr() -> tuple[Any, Any, Any]:
    try:
        from pxr import Sdf, Tf, Usd
    except ImportError as exc:  # pragma: no cover
        raise ImportError(
            "OpenUSD Python bindings are required. Install with: pip install usd-core"
        ) from exc
    return Sdf, Tf, Usd


def usda_to_layer(text: str) -> Any:
    """Parse ``.usda`` text into an anonymous ``Sdf.Layer``.

    Raises ``ValueError`` when the text is not a valid USD layer.
    """
    Sdf, Tf, _ = _require_pxr()
    layer = Sdf.Layer.CreateAnonymous(".usda")
    try:
        ok = layer.ImportFromString(text)
    except Tf.ErrorException as exc:
        raise ValueError(f"USD could not parse the serialized layer: {exc}") from exc
    if not ok:
        raise ValueError("USD could not parse the serialized layer")
    return layer


def usda_to_usd_stage(text: str) -> Any:
    """Open ``.usda`` text as an in-memory ``Usd.Stage``."""
    _, _, Usd = _require_pxr()
    return Usd.Stage.Open(usda_to_layer(text))


def stage_to_usd_stage(stage: Stage, *, config: SerializerConfig | None = None) -> Any:
    return usda_to_usd_stage(serialize_stage(stage, config=config))
