"""Tests for the twin model -> Stage builder."""
from __future__ import annotations

import logging

import pytest

from twin2usd.builder import StageDefaults, build_stage, collision_approximation, triangulate_faces
from twin2usd.model import (
    LightPrim,
    MaterialPrim,
    MeshPrim,
    PhysicsPrim,
    Transform,
    XformPrim,
)


def _children(stage):
    assert len(stage.prims) == 1
    return stage.prims[0].children


class TestRoot:
    def test_empty_model_still_has_world_root(self) -> None:
        stage = build_stage({})

        assert len(stage.prims) == 1
        world = stage.prims[0]
        assert stage.root is world
        assert isinstance(world, XformPrim)
        assert world.path == "/World"
        assert world.transform == Transform.identity()
        assert world.children == ()

    def test_stage_metadata_defaults(self) -> None:
        stage = build_stage({"description": "Boiler room"})

        assert stage.name == "StahikiTwin"
        assert stage.default_prim == "/World"
        assert stage.time_codes_per_second == 24
        assert stage.start_time_code == 0
        assert stage.end_time_code == 100
        assert stage.metadata["creator"] == "Stahiki Digital Twin Platform"
        assert stage.metadata["description"] == "Boiler room"

    def test_model_name_becomes_stage_name(self, cube_model) -> None:
        assert build_stage(cube_model).name == "Cube"

    def test_custom_defaults(self) -> None:
        stage = build_stage({"name": ""}, defaults=StageDefaults(stage_name="Plant", time_codes_per_second=30))
        assert stage.name == "Plant"
        assert stage.time_codes_per_second == 30


class TestCubeScenario:
    def test_root_has_mesh_then_material(self, cube_model) -> None:
        children = _children(build_stage(cube_model))

        assert [type(child) for child in children] == [MeshPrim, MaterialPrim]

    def test_mesh_payload(self, cube_model) -> None:
        mesh = _children(build_stage(cube_model))[0]

        assert len(mesh.points) == 3
        assert mesh.face_vertex_counts == (3,)
        assert mesh.face_vertex_indices == (0, 1, 2)
        assert mesh.normals is None
        assert mesh.uv is None

    def test_material_diffuse_color(self, cube_model) -> None:
        material = _children(build_stage(cube_model))[1]

        assert material.surface.diffuse_color == pytest.approx((0.2, 0.4, 1.0))
        assert material.surface.metallic == 0
        assert material.surface.roughness == 0.5
        assert material.surface.opacity == 1
        assert material.surface.emissive_color is None


def test_build_is_deterministic(full_model) -> None:
    assert build_stage(full_model) == build_stage(full_model)


def test_child_order_and_paths(full_model) -> None:
    children = _children(build_stage(full_model))

    assert [child.path for child in children] == [
        "/World/Mesh",
        "/World/Material",
        "/World/DirectionalLight0",
        "/World/PointLight0",
        "/World/PointLight1",
        "/World/Physics",
    ]
    assert [child.type_name for child in children] == [
        "Mesh",
        "Material",
        "DistantLight",
        "SphereLight",
        "SphereLight",
        "PhysicsScene",
    ]


def test_geometry_counts_for_many_triangles() -> None:
    vertices = [[float(i), 0.0, 0.0] for i in range(12)]
    faces = [[i, i + 1, i + 2] for i in range(10)]

    mesh = _children(build_stage({"geometry": {"vertices": vertices, "faces": faces}}))[0]

    assert len(mesh.face_vertex_counts) == 10
    assert set(mesh.face_vertex_counts) == {3}
    assert len(mesh.face_vertex_indices) == 30


def test_legacy_shape_produces_identical_mesh() -> None:
    vertices = [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]]
    faces = [[0, 1, 2], [0, 2, 3]]

    flat = _children(build_stage({"vertices": vertices, "faces": faces, "name": "A"}))[0]
    nested = _children(build_stage({"geometry": {"vertices": vertices, "faces": faces}, "name": "A"}))[0]

    assert flat == nested


def test_normals_and_uvs_pass_through(full_model) -> None:
    mesh = _children(build_stage(full_model))[0]

    assert mesh.normals == ((0.0, 0.0, 1.0),) * 4
    assert mesh.uv is not None
    assert mesh.uv.interpolation == "vertex"
    assert mesh.uv.values[2] == (1.0, 1.0)


class TestOptionalSubtrees:
    def test_no_lighting_key_means_no_lights(self, cube_model) -> None:
        children = _children(build_stage(cube_model))
        assert not any(isinstance(child, LightPrim) for child in children)

    def test_physics_disabled_means_no_physics(self, full_model) -> None:
        full_model["physics"]["enabled"] = False
        children = _children(build_stage(full_model))
        assert not any(isinstance(child, PhysicsPrim) for child in children)

    def test_materials_only(self) -> None:
        children = _children(build_stage({"materials": {}}))
        assert len(children) == 1
        assert children[0].surface.diffuse_color == (0.5, 0.5, 0.5)

    def test_empty_lighting_object_adds_nothing(self) -> None:
        assert _children(build_stage({"lighting": {}})) == ()


class TestMaterials:
    def test_full_material(self, full_model) -> None:
        surface = _children(build_stage(full_model))[1].surface

        assert surface.diffuse_color == (1.0, 0.0, 0.0)
        assert surface.metallic == pytest.approx(0.8)
        assert surface.roughness == pytest.approx(0.25)
        assert surface.emissive_color == (0.0, 0.0, 0.0)

    def test_invalid_color_is_gray(self) -> None:
        material = _children(build_stage({"materials": {"diffuse": "red"}}))[0]
        assert material.surface.diffuse_color == (0.5, 0.5, 0.5)

    def test_explicit_zero_is_kept(self) -> None:
        material = _children(build_stage({"materials": {"roughness": 0, "opacity": 0}}))[0]
        assert material.surface.roughness == 0
        assert material.surface.opacity == 0


class TestLights:
    def test_directional_light_defaults(self) -> None:
        model = {"lighting": {"directionalLights": [{"color": "#FFFFFF", "intensity": 2}]}}
        light = _children(build_stage(model))[0]

        assert isinstance(light, LightPrim)
        assert light.light_type == "distant"
        assert light.intensity == 2
        assert light.color == (1.0, 1.0, 1.0)
        assert light.color_temperature == 6500
        assert light.normalize is True
        assert light.enable_color_temperature is False
        assert light.exposure == 0
        assert light.diffuse == 1
        assert light.specular == 1
        assert light.cast_shadow is None
        assert light.radius is None

    def test_point_lights_are_spheres_with_position(self, full_model) -> None:
        lights = [c for c in _children(build_stage(full_model)) if isinstance(c, LightPrim)]
        point = lights[1]

        assert point.light_type == "sphere"
        assert point.radius == 0.5
        assert point.treat_as_point is False
        assert point.position == (2.0, 3.0, 4.0)
        assert point.intensity == 40

    def test_supplied_light_settings_override_defaults(self) -> None:
        model = {
            "lighting": {
                "directionalLights": [
                    {"exposure": 1.5, "normalize": False, "enableColorTemperature": True, "colorTemperature": 3200}
                ]
            }
        }
        light = _children(build_stage(model))[0]

        assert light.exposure == 1.5
        assert light.normalize is False
        assert light.enable_color_temperature is True
        assert light.color_temperature == 3200
        assert light.diffuse == 1

    def test_missing_color_and_intensity(self) -> None:
        light = _children(build_stage({"lighting": {"pointLights": [{}]}}))[0]
        assert light.color == (1.0, 1.0, 1.0)
        assert light.intensity == 1

    def test_directional_before_point_in_input_order(self) -> None:
        model = {
            "lighting": {
                "pointLights": [{"intensity": 10}, {"intensity": 20}],
                "directionalLights": [{"intensity": 1}, {"intensity": 2}],
            }
        }
        lights = _children(build_stage(model))
        assert [light.name for light in lights] == [
            "DirectionalLight0",
            "DirectionalLight1",
            "PointLight0",
            "PointLight1",
        ]
        assert [light.intensity for light in lights] == [1, 2, 10, 20]


class TestPhysics:
    def test_full_physics(self, full_model) -> None:
        physics = _children(build_stage(full_model))[-1]

        assert isinstance(physics, PhysicsPrim)
        assert physics.rigid_body.mass == 250
        assert physics.rigid_body.kinematic is False
        assert physics.collider.approximation_shape == "boundingCube"
        assert physics.collider.contact_offset == pytest.approx(0.02)
        assert physics.material.static_friction == pytest.approx(0.7)
        assert physics.material.dynamic_friction == pytest.approx(0.7)
        assert physics.material.restitution == pytest.approx(0.1)

    def test_physics_defaults(self) -> None:
        physics = _children(build_stage({"physics": {"enabled": True}}))[0]
        assert physics.rigid_body.mass == 1
        assert physics.material.static_friction == 0.5
        assert physics.material.restitution == 0
        assert physics.collider.approximation_shape == "convexHull"

    @pytest.mark.parametrize(
        ("shape", "expected"),
        [
            ("box", "boundingCube"),
            ("sphere", "boundingSphere"),
            ("mesh", "convexHull"),
            ("capsule", "convexHull"),
            (None, "convexHull"),
        ],
    )
    def test_collision_shape_mapping(self, shape, expected) -> None:
        assert collision_approximation(shape) == expected


class TestFaceValidation:
    def test_out_of_range_faces_are_dropped(self, caplog) -> None:
        model = {
            "geometry": {
                "vertices": [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
                "faces": [[0, 1, 2], [0, 1, 3], [-1, 0, 1]],
            }
        }
        with caplog.at_level(logging.WARNING, logger="twin2usd.builder"):
            mesh = _children(build_stage(model))[0]

        assert mesh.face_vertex_counts == (3,)
        assert mesh.face_vertex_indices == (0, 1, 2)
        assert "Dropped 2 invalid face(s)" in caplog.text

    def test_quads_are_fan_triangulated(self) -> None:
        assert triangulate_faces([[0, 1, 2, 3]], 4) == [(0, 1, 2), (0, 2, 3)]

    def test_degenerate_and_non_integer_faces_are_dropped(self) -> None:
        assert triangulate_faces([[0, 1], [0, 1.5, 2], "012", 7], 3) == []

    def test_malformed_vertices_become_zeros(self) -> None:
        model = {"vertices": [[1, 1, 1], "bad", [2, 2]], "faces": [[0, 1, 2]]}
        mesh = _children(build_stage(model))[0]

        assert mesh.points == ((1.0, 1.0, 1.0), (0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        assert mesh.face_vertex_indices == (0, 1, 2)
