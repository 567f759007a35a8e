from __future__ import annotations

"""Scene graph builder: twin model -> ``Stage``.

The builder never rejects a model. Missing sub-objects drop their subtree,
malformed values fall back to documented defaults and are logged (geometry
problems on ``twin2usd.builder``, colors on ``twin2usd.normalize``).
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .model import (
    WORLD_PATH,
    Collider,
    LightPrim,
    MaterialPrim,
    MeshPrim,
    PhysicsMaterial,
    PhysicsPrim,
    PreviewSurface,
    Prim,
    Primvar,
    RigidBody,
    Stage,
    Transform,
    XformPrim,
)
from .normalize import (
    GeometryInput,
    LightInput,
    LightingInput,
    MaterialInput,
    PhysicsInput,
    TwinModel,
    as_index,
    as_number,
    as_vector,
    hex_to_rgb,
    normalize_twin_model,
)

logger = logging.getLogger("twin2usd.builder")

_COLLISION_SHAPES = {
    "box": "boundingCube",
    "sphere": "boundingSphere",
}


@dataclass(frozen=True)
class StageDefaults:
    stage_name: str = "StahikiTwin"
    time_codes_per_second: float = 24.0
    start_time_code: float = 0.0
    end_time_code: float = 100.0
    creator: str = "Stahiki Digital Twin Platform"
    version: str = "1.0"
    light_color: str = "#ffffff"
    light_intensity: float = 1.0
    light_exposure: float = 0.0
    light_diffuse: float = 1.0
    light_specular: float = 1.0
    light_normalize: bool = True
    light_enable_color_temperature: bool = False
    light_color_temperature: float = 6500.0
    sphere_light_radius: float = 0.5
    metallic: float = 0.0
    roughness: float = 0.5
    opacity: float = 1.0
    mass: float = 1.0
    friction: float = 0.5
    restitution: float = 0.0
    contact_offset: float = 0.02
    rest_offset: float = 0.0
    uv_interpolation: str = "vertex"


# =========================================================================
# Geometry
# =========================================================================

def _coerce_vectors(values: Sequence[Any], size: int, *, label: str) -> tuple[tuple[float, ...], ...]:
    """Coerce each entry to ``size`` floats; malformed entries become zeros so
    indices into the array stay stable."""
    out: list[tuple[float, ...]] = []
    bad = 0
    for value in values:
        vector = as_vector(value, size)
        if vector is None:
            bad += 1
            vector = (0.0,) * size
        out.append(vector)
    if bad:
        logger.warning("Replaced %d malformed %s entries with zeros", bad, label)
    return tuple(out)


def triangulate_faces(faces: Sequence[Any], vertex_count: int) -> list[tuple[int, int, int]]:
    """Validate faces against ``vertex_count`` and return triangles.

    Faces with out-of-range or non-integer indices, or with fewer than three
    indices, are dropped. Polygons with more than three indices are
    fan-triangulated around their first vertex.
    """
    triangles: list[tuple[int, int, int]] = []
    dropped = 0
    for face in faces:
        if isinstance(face, (str, bytes)) or not isinstance(face, Sequence):
            dropped += 1
            continue
        indices = [as_index(value) for value in face]
        if len(indices) < 3 or any(
            index is None or index < 0 or index >= vertex_count for index in indices
        ):
            dropped += 1
            continue
        anchor = indices[0]
        for i in range(1, len(indices) - 1):
            triangles.append((anchor, indices[i], indices[i + 1]))
    if dropped:
        logger.warning(
            "Dropped %d invalid face(s) referencing %d vertices", dropped, vertex_count
        )
    return triangles


def build_mesh_prim(geometry: GeometryInput, *, path: str, defaults: StageDefaults) -> MeshPrim:
    points = _coerce_vectors(geometry.vertices, 3, label="vertex")
    triangles = triangulate_faces(geometry.faces, len(points))

    normals = None
    if geometry.normals is not None:
        normals = _coerce_vectors(geometry.normals, 3, label="normal")

    uv = None
    if geometry.uvs:
        uv = Primvar(
            values=_coerce_vectors(geometry.uvs, 2, label="uv"),
            interpolation=defaults.uv_interpolation,
        )

    return MeshPrim(
        path=path,
        face_vertex_counts=tuple(3 for _ in triangles),
        face_vertex_indices=tuple(index for triangle in triangles for index in triangle),
        points=points,
        normals=normals,
        uv=uv,
    )


# =========================================================================
# Materials, lights, physics
# =========================================================================

def build_material_prim(materials: MaterialInput, *, path: str, defaults: StageDefaults) -> MaterialPrim:
    emissive = hex_to_rgb(materials.emissive) if materials.emissive else None
    return MaterialPrim(
        path=path,
        surface=PreviewSurface(
            diffuse_color=hex_to_rgb(materials.diffuse),
            metallic=as_number(materials.metalness, defaults.metallic),
            roughness=as_number(materials.roughness, defaults.roughness),
            opacity=as_number(materials.opacity, defaults.opacity),
            emissive_color=emissive,
        ),
    )


def _as_flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def build_light_prim(
    light: LightInput,
    *,
    path: str,
    light_type: str,
    defaults: StageDefaults,
) -> LightPrim:
    color = light.color or defaults.light_color
    common: dict[str, Any] = dict(
        path=path,
        light_type=light_type,
        color=hex_to_rgb(color),
        intensity=as_number(light.intensity, defaults.light_intensity),
        exposure=as_number(light.exposure, defaults.light_exposure),
        diffuse=as_number(light.diffuse, defaults.light_diffuse),
        specular=as_number(light.specular, defaults.light_specular),
        normalize=_as_flag(light.normalize, defaults.light_normalize),
        enable_color_temperature=_as_flag(
            light.enable_color_temperature, defaults.light_enable_color_temperature
        ),
        color_temperature=as_number(light.color_temperature, defaults.light_color_temperature),
    )
    if light_type == "sphere":
        return LightPrim(
            **common,
            radius=defaults.sphere_light_radius,
            treat_as_point=False,
            position=as_vector(light.position, 3),
        )
    cast_shadow = light.cast_shadow if isinstance(light.cast_shadow, bool) else None
    return LightPrim(
        **common,
        direction=as_vector(light.direction, 3),
        cast_shadow=cast_shadow,
    )


def build_light_prims(lighting: LightingInput, *, parent: str, defaults: StageDefaults) -> list[LightPrim]:
    lights = [
        build_light_prim(light, path=f"{parent}/DirectionalLight{index}", light_type="distant", defaults=defaults)
        for index, light in enumerate(lighting.directional)
    ]
    lights.extend(
        build_light_prim(light, path=f"{parent}/PointLight{index}", light_type="sphere", defaults=defaults)
        for index, light in enumerate(lighting.point)
    )
    return lights


def collision_approximation(shape: Any) -> str:
    return _COLLISION_SHAPES.get(shape, "convexHull") if isinstance(shape, str) else "convexHull"


def build_physics_prim(physics: PhysicsInput, *, path: str, defaults: StageDefaults) -> PhysicsPrim:
    friction = as_number(physics.friction, defaults.friction)
    return PhysicsPrim(
        path=path,
        rigid_body=RigidBody(kinematic=False, mass=as_number(physics.mass, defaults.mass)),
        collider=Collider(
            approximation_shape=collision_approximation(physics.collision_shape),
            contact_offset=defaults.contact_offset,
            rest_offset=defaults.rest_offset,
        ),
        material=PhysicsMaterial(
            static_friction=friction,
            dynamic_friction=friction,
            restitution=as_number(physics.restitution, defaults.restitution),
        ),
    )


# =========================================================================
# Stage
# =========================================================================

def build_stage(
    twin_model: Mapping[str, Any] | TwinModel,
    *,
    defaults: StageDefaults | None = None,
) -> Stage:
    """Build the scene graph for a twin model in either input shape.

    The result always has a single ``/World`` Xform root whose children are,
    in order: Mesh, Material, directional lights, point lights, Physics.
    """
    defaults = defaults or StageDefaults()
    model = normalize_twin_model(twin_model)

    children: list[Prim] = []
    if model.geometry is not None:
        children.append(build_mesh_prim(model.geometry, path=f"{WORLD_PATH}/Mesh", defaults=defaults))
    if model.materials is not None:
        children.append(
            build_material_prim(model.materials, path=f"{WORLD_PATH}/Material", defaults=defaults)
        )
    if model.lighting is not None:
        children.extend(build_light_prims(model.lighting, parent=WORLD_PATH, defaults=defaults))
    if model.physics is not None and model.physics.enabled:
        children.append(build_physics_prim(model.physics, path=f"{WORLD_PATH}/Physics", defaults=defaults))

    world = XformPrim(path=WORLD_PATH, transform=Transform.identity(), children=tuple(children))

    metadata: dict[str, Any] = {
        "creator": defaults.creator,
        "version": defaults.version,
        "description": model.description,
    }

    logger.debug(
        "Built stage %r with %d prim(s) under %s",
        model.name or defaults.stage_name,
        len(children),
        WORLD_PATH,
    )
    return Stage(
        name=model.name or defaults.stage_name,
        default_prim=WORLD_PATH,
        time_codes_per_second=defaults.time_codes_per_second,
        start_time_code=defaults.start_time_code,
        end_time_code=defaults.end_time_code,
        metadata=metadata,
        prims=(world,),
    )
