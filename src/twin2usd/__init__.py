"""twin2usd -- Digital-twin model to OpenUSD scene-graph conversion.

Core modules:
  - model:      Stage and the typed prim variants (Xform, Mesh, Material, Light, Physics)
  - normalize:  Folds the flat and nested twin-model shapes into one TwinModel
  - builder:    Twin model -> Stage
  - transform:  Translate/rotate/scale -> 4x4 xformOp matrix
  - usda:       Stage -> USD ASCII (.usda) text
  - hierarchy:  Plain traversal views for hierarchy browsers
  - export:     JSON input, .usda file naming and writing
  - openusd:    Round-trip serialized text through the pxr bindings
"""

from .builder import StageDefaults, build_stage, collision_approximation, triangulate_faces
from .export import USDA_MIME_TYPE, export_filename, load_twin_model, write_usda
from .hierarchy import find_prim, format_hierarchy, iter_prims, stage_hierarchy
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
from .normalize import TwinModel, hex_to_rgb, normalize_twin_model
from .openusd import stage_to_usd_stage, usda_to_layer, usda_to_usd_stage
from .transform import compose_transform_matrix, quaternion_to_matrix
from .usda import SerializerConfig, format_number, serialize_stage

__all__ = [
    # model
    "Collider",
    "LightPrim",
    "MaterialPrim",
    "MeshPrim",
    "PhysicsMaterial",
    "PhysicsPrim",
    "PreviewSurface",
    "Prim",
    "Primvar",
    "RigidBody",
    "Stage",
    "Transform",
    "WORLD_PATH",
    "XformPrim",
    # builder
    "StageDefaults",
    "TwinModel",
    "build_stage",
    "collision_approximation",
    "hex_to_rgb",
    "normalize_twin_model",
    "triangulate_faces",
    # serializer
    "SerializerConfig",
    "compose_transform_matrix",
    "format_number",
    "quaternion_to_matrix",
    "serialize_stage",
    # views and files
    "USDA_MIME_TYPE",
    "export_filename",
    "find_prim",
    "format_hierarchy",
    "iter_prims",
    "load_twin_model",
    "stage_hierarchy",
    "stage_to_usd_stage",
    "usda_to_layer",
    "usda_to_usd_stage",
    "write_usda",
]
