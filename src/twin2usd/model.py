from __future__ import annotations

"""Scene-graph data model: a Stage holding a tree of typed, immutable prims."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]
Vec4 = tuple[float, float, float, float]

WORLD_PATH = "/World"


@dataclass(frozen=True)
class Transform:
    """Translate / rotate / scale, with rotation as an (x, y, z, w) quaternion."""

    translate: Vec3 = (0.0, 0.0, 0.0)
    rotate: Vec4 = (0.0, 0.0, 0.0, 1.0)
    scale: Vec3 = (1.0, 1.0, 1.0)

    @staticmethod
    def identity() -> "Transform":
        return Transform()

    @property
    def is_identity(self) -> bool:
        return self == Transform.identity()


@dataclass(frozen=True)
class Primvar:
    values: tuple[Vec2, ...]
    interpolation: str = "vertex"


@dataclass(frozen=True)
class PreviewSurface:
    """Inputs of a UsdPreviewSurface shader. Colors are linear 0..1 triples."""

    diffuse_color: Vec3 = (0.5, 0.5, 0.5)
    metallic: float = 0.0
    roughness: float = 0.5
    opacity: float = 1.0
    emissive_color: Vec3 | None = None


@dataclass(frozen=True)
class RigidBody:
    kinematic: bool = False
    mass: float = 1.0


@dataclass(frozen=True)
class Collider:
    approximation_shape: str = "convexHull"
    contact_offset: float = 0.02
    rest_offset: float = 0.0


@dataclass(frozen=True)
class PhysicsMaterial:
    static_friction: float = 0.5
    dynamic_friction: float = 0.5
    restitution: float = 0.0


@dataclass(frozen=True)
class _PrimBase:
    path: str
    active: bool = True
    metadata: Mapping[str, Any] = field(default_factory=dict)
    children: tuple["Prim", ...] = ()

    @property
    def name(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class XformPrim(_PrimBase):
    transform: Transform = field(default_factory=Transform.identity)

    @property
    def type_name(self) -> str:
        return "Xform"


@dataclass(frozen=True)
class MeshPrim(_PrimBase):
    face_vertex_counts: tuple[int, ...] = ()
    face_vertex_indices: tuple[int, ...] = ()
    points: tuple[Vec3, ...] = ()
    normals: tuple[Vec3, ...] | None = None
    uv: Primvar | None = None

    @property
    def type_name(self) -> str:
        return "Mesh"


@dataclass(frozen=True)
class MaterialPrim(_PrimBase):
    surface: PreviewSurface = field(default_factory=PreviewSurface)

    @property
    def type_name(self) -> str:
        return "Material"


@dataclass(frozen=True)
class LightPrim(_PrimBase):
    light_type: str = "distant"
    color: Vec3 = (1.0, 1.0, 1.0)
    intensity: float = 1.0
    exposure: float = 0.0
    diffuse: float = 1.0
    specular: float = 1.0
    normalize: bool = True
    enable_color_temperature: bool = False
    color_temperature: float = 6500.0
    radius: float | None = None
    treat_as_point: bool | None = None
    position: Vec3 | None = None
    direction: Vec3 | None = None
    cast_shadow: bool | None = None

    @property
    def type_name(self) -> str:
        return "SphereLight" if self.light_type == "sphere" else "DistantLight"


@dataclass(frozen=True)
class PhysicsPrim(_PrimBase):
    rigid_body: RigidBody = field(default_factory=RigidBody)
    collider: Collider = field(default_factory=Collider)
    material: PhysicsMaterial = field(default_factory=PhysicsMaterial)

    @property
    def type_name(self) -> str:
        return "PhysicsScene"


Prim = Union[XformPrim, MeshPrim, MaterialPrim, LightPrim, PhysicsPrim]


@dataclass(frozen=True)
class Stage:
    """Root document: stage-level metadata plus the top-level prim trees."""

    name: str
    default_prim: str = WORLD_PATH
    time_codes_per_second: float = 24.0
    start_time_code: float = 0.0
    end_time_code: float = 100.0
    metadata: Mapping[str, Any] = field(default_factory=dict)
    prims: tuple[Prim, ...] = ()

    @property
    def root(self) -> Prim | None:
        return self.prims[0] if self.prims else None
