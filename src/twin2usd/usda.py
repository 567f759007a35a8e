from __future__ import annotations

"""Stage serializer: ``Stage`` -> USD ASCII (``.usda``) text.

A pre-order walk over the prim tree. Every prim becomes a ``def`` block whose
closing brace sits at the same indentation as its ``def`` line; children are
nested one indent unit deeper, separated by a blank line.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from .model import (
    LightPrim,
    MaterialPrim,
    MeshPrim,
    PhysicsPrim,
    Prim,
    Stage,
    XformPrim,
)
from .transform import compose_transform_matrix

logger = logging.getLogger("twin2usd.usda")

# Integral floats at or above this magnitude keep exponent notation.
_INTEGRAL_PRINT_LIMIT = 1e16


@dataclass(frozen=True)
class SerializerConfig:
    indent: str = "    "
    up_axis: str = "Y"
    meters_per_unit: float = 1.0


# =========================================================================
# Value formatting
# =========================================================================

def format_number(value: float | int | bool) -> str:
    """Locale-independent number text: ``1`` not ``1.0``, shortest repr otherwise."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    number = float(value)
    if math.isnan(number):
        return "nan"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    if number.is_integer() and abs(number) < _INTEGRAL_PRINT_LIMIT:
        return str(int(number))
    return repr(number)


def format_tuple(values: Iterable[float]) -> str:
    return "(" + ", ".join(format_number(v) for v in values) + ")"


def format_tuple_array(vectors: Iterable[Iterable[float]]) -> str:
    return "[" + ", ".join(format_tuple(v) for v in vectors) + "]"


def format_int_array(values: Iterable[int]) -> str:
    return "[" + ", ".join(str(int(v)) for v in values) + "]"


def format_matrix(rows: Iterable[Iterable[float]]) -> str:
    return "( " + ", ".join(format_tuple(row) for row in rows) + " )"


# =========================================================================
# Per-type properties
# =========================================================================

PropertyWriter = Callable[[Prim, str, str, str], list[str]]


def _xform_properties(prim: XformPrim, pad: str, unit: str, prim_path: str) -> list[str]:
    matrix = compose_transform_matrix(prim.transform)
    return [
        f"{pad}matrix4d xformOp:transform = {format_matrix(matrix.tolist())}",
        f'{pad}uniform token[] xformOpOrder = ["xformOp:transform"]',
    ]


def _mesh_properties(prim: MeshPrim, pad: str, unit: str, prim_path: str) -> list[str]:
    lines = [
        f"{pad}int[] faceVertexCounts = {format_int_array(prim.face_vertex_counts)}",
        f"{pad}int[] faceVertexIndices = {format_int_array(prim.face_vertex_indices)}",
        f"{pad}point3f[] points = {format_tuple_array(prim.points)}",
    ]
    if prim.normals is not None:
        lines.append(f"{pad}normal3f[] normals = {format_tuple_array(prim.normals)}")
    if prim.uv is not None:
        lines.extend(
            [
                f"{pad}texCoord2f[] primvars:st = {format_tuple_array(prim.uv.values)} (",
                f'{pad}{unit}interpolation = "{prim.uv.interpolation}"',
                f"{pad})",
            ]
        )
    return lines


def _material_properties(prim: MaterialPrim, pad: str, unit: str, prim_path: str) -> list[str]:
    surface = prim.surface
    inner = pad + unit
    lines = [
        f"{pad}token outputs:surface.connect = <{prim_path}/Surface.outputs:surface>",
        "",
        f'{pad}def Shader "Surface"',
        f"{pad}{{",
        f'{inner}uniform token info:id = "UsdPreviewSurface"',
        f"{inner}color3f inputs:diffuseColor = {format_tuple(surface.diffuse_color)}",
        f"{inner}float inputs:metallic = {format_number(surface.metallic)}",
        f"{inner}float inputs:roughness = {format_number(surface.roughness)}",
        f"{inner}float inputs:opacity = {format_number(surface.opacity)}",
    ]
    if surface.emissive_color is not None:
        lines.append(f"{inner}color3f inputs:emissiveColor = {format_tuple(surface.emissive_color)}")
    lines.extend(
        [
            f"{inner}token outputs:surface",
            f"{pad}}}",
        ]
    )
    return lines


def _light_properties(prim: LightPrim, pad: str, unit: str, prim_path: str) -> list[str]:
    lines = [
        f"{pad}color3f inputs:color = {format_tuple(prim.color)}",
        f"{pad}float inputs:intensity = {format_number(prim.intensity)}",
        f"{pad}float inputs:exposure = {format_number(prim.exposure)}",
        f"{pad}float inputs:diffuse = {format_number(prim.diffuse)}",
        f"{pad}float inputs:specular = {format_number(prim.specular)}",
        f"{pad}bool inputs:normalize = {format_number(prim.normalize)}",
        f"{pad}bool inputs:enableColorTemperature = {format_number(prim.enable_color_temperature)}",
        f"{pad}float inputs:colorTemperature = {format_number(prim.color_temperature)}",
    ]
    if prim.radius is not None:
        lines.append(f"{pad}float inputs:radius = {format_number(prim.radius)}")
    if prim.treat_as_point is not None:
        lines.append(f"{pad}bool treatAsPoint = {format_number(prim.treat_as_point)}")
    if prim.cast_shadow is not None:
        lines.append(f"{pad}bool inputs:shadow:enable = {format_number(prim.cast_shadow)}")
    if prim.direction is not None:
        lines.append(f"{pad}custom vector3f twin:direction = {format_tuple(prim.direction)}")
    if prim.position is not None:
        lines.extend(
            [
                f"{pad}double3 xformOp:translate = {format_tuple(prim.position)}",
                f'{pad}uniform token[] xformOpOrder = ["xformOp:translate"]',
            ]
        )
    return lines


def _physics_properties(prim: PhysicsPrim, pad: str, unit: str, prim_path: str) -> list[str]:
    return [
        f"{pad}bool physics:kinematicEnabled = {format_number(prim.rigid_body.kinematic)}",
        f"{pad}float physics:mass = {format_number(prim.rigid_body.mass)}",
        f'{pad}uniform token physics:approximation = "{prim.collider.approximation_shape}"',
        f"{pad}float physxCollision:contactOffset = {format_number(prim.collider.contact_offset)}",
        f"{pad}float physxCollision:restOffset = {format_number(prim.collider.rest_offset)}",
        f"{pad}float physics:staticFriction = {format_number(prim.material.static_friction)}",
        f"{pad}float physics:dynamicFriction = {format_number(prim.material.dynamic_friction)}",
        f"{pad}float physics:restitution = {format_number(prim.material.restitution)}",
    ]


_PROPERTY_WRITERS: dict[type, PropertyWriter] = {
    XformPrim: _xform_properties,
    MeshPrim: _mesh_properties,
    MaterialPrim: _material_properties,
    LightPrim: _light_properties,
    PhysicsPrim: _physics_properties,
}


# =========================================================================
# Tree walk
# =========================================================================

def _prim_lines(prim: Prim, *, depth: int, parent_path: str, config: SerializerConfig) -> list[str]:
    """Lines for ``prim`` and its subtree; empty for an unrecognised prim."""
    writer = _PROPERTY_WRITERS.get(type(prim))
    if writer is None:
        logger.warning(
            "Skipping unserializable prim of type %s under %s",
            type(prim).__name__,
            parent_path or "/",
        )
        return []

    unit = config.indent
    pad = unit * depth
    prim_path = f"{parent_path}/{prim.name}"

    lines = [f'{pad}def {prim.type_name} "{prim.name}" (']
    if not prim.active:
        lines.append(f"{pad}{unit}active = false")
    lines.extend([f"{pad})", f"{pad}{{"])
    lines.extend(writer(prim, pad + unit, unit, prim_path))
    for child in prim.children:
        child_lines = _prim_lines(child, depth=depth + 1, parent_path=prim_path, config=config)
        if child_lines:
            lines.append("")
            lines.extend(child_lines)
    lines.append(f"{pad}}}")
    return lines


def _header_lines(stage: Stage, config: SerializerConfig) -> list[str]:
    unit = config.indent
    return [
        "#usda 1.0",
        "(",
        f'{unit}defaultPrim = "{stage.default_prim}"',
        f"{unit}timeCodesPerSecond = {format_number(stage.time_codes_per_second)}",
        f'{unit}upAxis = "{config.up_axis}"',
        f"{unit}metersPerUnit = {format_number(config.meters_per_unit)}",
        ")",
        "",
    ]


def serialize_prims(prims: Sequence[Prim], *, config: SerializerConfig | None = None) -> str:
    """Serialize prim trees without the layer header."""
    config = config or SerializerConfig()
    lines: list[str] = []
    for prim in prims:
        prim_lines = _prim_lines(prim, depth=0, parent_path="", config=config)
        if prim_lines and lines:
            lines.append("")
        lines.extend(prim_lines)
    return "\n".join(lines) + "\n" if lines else ""


def serialize_stage(stage: Stage, *, config: SerializerConfig | None = None) -> str:
    """Serialize ``stage`` to ``.usda`` text. A stage without prims yields only the header."""
    config = config or SerializerConfig()
    header = "\n".join(_header_lines(stage, config)) + "\n"
    return header + serialize_prims(stage.prims, config=config)
