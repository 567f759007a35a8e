from __future__ import annotations

"""Fold the historical twin-model shapes into one canonical input record.

Twin models in the wild come in two layouts:

  {"vertices": [...], "faces": [...], "normals": [...], "uvs": [...], ...}
  {"geometry": {"vertices": [...], "faces": [...], ...}, ...}

and materials carry their base color as either ``diffuse`` or the older
``color`` key. ``normalize_twin_model`` resolves all of that up front so the
builder only ever sees a ``TwinModel``.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

logger = logging.getLogger("twin2usd.normalize")

_HEX_COLOR_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)

NEUTRAL_GRAY: tuple[float, float, float] = (0.5, 0.5, 0.5)


@dataclass(frozen=True)
class GeometryInput:
    vertices: tuple[Any, ...]
    faces: tuple[Any, ...]
    normals: tuple[Any, ...] | None = None
    uvs: tuple[Any, ...] | None = None


@dataclass(frozen=True)
class MaterialInput:
    diffuse: Any = None
    metalness: Any = None
    roughness: Any = None
    opacity: Any = None
    emissive: Any = None


@dataclass(frozen=True)
class LightInput:
    color: Any = None
    intensity: Any = None
    position: Any = None
    direction: Any = None
    cast_shadow: Any = None
    exposure: Any = None
    diffuse: Any = None
    specular: Any = None
    normalize: Any = None
    enable_color_temperature: Any = None
    color_temperature: Any = None


@dataclass(frozen=True)
class LightingInput:
    directional: tuple[LightInput, ...] = ()
    point: tuple[LightInput, ...] = ()


@dataclass(frozen=True)
class PhysicsInput:
    enabled: bool = False
    mass: Any = None
    friction: Any = None
    restitution: Any = None
    collision_shape: Any = None


@dataclass(frozen=True)
class TwinModel:
    """Canonical twin model. ``None`` sub-records mean "not supplied"."""

    name: str | None = None
    description: str | None = None
    geometry: GeometryInput | None = None
    materials: MaterialInput | None = None
    lighting: LightingInput | None = None
    physics: PhysicsInput | None = None


def _mapping_or_none(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def _sequence_or_none(value: Any) -> tuple[Any, ...] | None:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return None
    return tuple(value)


def _first_sequence(*values: Any) -> tuple[Any, ...] | None:
    for value in values:
        items = _sequence_or_none(value)
        if items is not None:
            return items
    return None


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _string_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _normalize_geometry(raw: Mapping[str, Any]) -> GeometryInput | None:
    nested = _mapping_or_none(raw.get("geometry")) or {}

    vertices = _first_sequence(nested.get("vertices"), raw.get("vertices"))
    faces = _first_sequence(nested.get("faces"), raw.get("faces"))
    if vertices is None or faces is None:
        return None

    return GeometryInput(
        vertices=vertices,
        faces=faces,
        normals=_first_sequence(nested.get("normals"), raw.get("normals")),
        uvs=_first_sequence(nested.get("uvs"), raw.get("uvs")),
    )


def _normalize_materials(raw: Mapping[str, Any]) -> MaterialInput | None:
    materials = _mapping_or_none(raw.get("materials"))
    if materials is None:
        return None
    return MaterialInput(
        diffuse=_first_present(materials.get("diffuse"), materials.get("color")),
        metalness=_first_present(materials.get("metalness"), materials.get("metallic")),
        roughness=materials.get("roughness"),
        opacity=materials.get("opacity"),
        emissive=materials.get("emissive"),
    )


def _normalize_lights(raw: Any) -> tuple[LightInput, ...]:
    entries = _sequence_or_none(raw) or ()
    lights: list[LightInput] = []
    for entry in entries:
        light = _mapping_or_none(entry)
        if light is None:
            logger.warning("Ignoring light entry that is not an object: %r", entry)
            continue
        lights.append(
            LightInput(
                color=light.get("color"),
                intensity=light.get("intensity"),
                position=light.get("position"),
                direction=light.get("direction"),
                cast_shadow=light.get("castShadow"),
                exposure=light.get("exposure"),
                diffuse=light.get("diffuse"),
                specular=light.get("specular"),
                normalize=light.get("normalize"),
                enable_color_temperature=light.get("enableColorTemperature"),
                color_temperature=light.get("colorTemperature"),
            )
        )
    return tuple(lights)


def _normalize_lighting(raw: Mapping[str, Any]) -> LightingInput | None:
    lighting = _mapping_or_none(raw.get("lighting"))
    if lighting is None:
        return None
    return LightingInput(
        directional=_normalize_lights(lighting.get("directionalLights")),
        point=_normalize_lights(lighting.get("pointLights")),
    )


def _is_enabled(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return False


def _normalize_physics(raw: Mapping[str, Any]) -> PhysicsInput | None:
    physics = _mapping_or_none(raw.get("physics"))
    if physics is None:
        return None
    return PhysicsInput(
        enabled=_is_enabled(physics.get("enabled")),
        mass=physics.get("mass"),
        friction=physics.get("friction"),
        restitution=physics.get("restitution"),
        collision_shape=physics.get("collisionShape"),
    )


def normalize_twin_model(raw: Mapping[str, Any] | TwinModel) -> TwinModel:
    """Return the canonical ``TwinModel`` for either historical input shape."""
    if isinstance(raw, TwinModel):
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"twin model must be a mapping, got {type(raw).__name__}")

    return TwinModel(
        name=_string_or_none(raw.get("name")),
        description=_string_or_none(raw.get("description")),
        geometry=_normalize_geometry(raw),
        materials=_normalize_materials(raw),
        lighting=_normalize_lighting(raw),
        physics=_normalize_physics(raw),
    )


# =========================================================================
# Scalar coercion
# =========================================================================

def hex_to_rgb(value: Any) -> tuple[float, float, float]:
    """Convert ``#RRGGBB`` (case-insensitive, ``#`` optional) to a 0..1 triple.

    Anything else maps to neutral gray.
    """
    if not isinstance(value, str):
        return NEUTRAL_GRAY
    match = _HEX_COLOR_RE.match(value.strip())
    if match is None:
        logger.warning("Malformed color %r, using neutral gray", value)
        return NEUTRAL_GRAY
    return (
        int(match.group(1), 16) / 255,
        int(match.group(2), 16) / 255,
        int(match.group(3), 16) / 255,
    )


def as_number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value)


def as_vector(value: Any, size: int) -> tuple[float, ...] | None:
    """Return ``value`` as a tuple of ``size`` finite floats, or ``None``."""
    items = _sequence_or_none(value)
    if items is None or len(items) != size:
        return None
    out: list[float] = []
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            return None
        number = float(item)
        if not math.isfinite(number):
            return None
        out.append(number)
    return tuple(out)


def as_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None
