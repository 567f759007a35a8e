"""Pytest configuration: shared twin-model fixtures."""
import copy

import pytest

CUBE_MODEL = {
    "name": "Cube",
    "materials": {"color": "#3366FF"},
    "geometry": {
        "vertices": [[0, 0, 0], [1, 0, 0], [1, 1, 0]],
        "faces": [[0, 1, 2]],
    },
}

FULL_MODEL = {
    "name": "Pump Station",
    "description": "Centrifugal pump on a skid",
    "geometry": {
        "vertices": [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
        "faces": [[0, 1, 2], [0, 2, 3]],
        "normals": [[0, 0, 1], [0, 0, 1], [0, 0, 1], [0, 0, 1]],
        "uvs": [[0, 0], [1, 0], [1, 1], [0, 1]],
    },
    "materials": {
        "diffuse": "#FF0000",
        "metalness": 0.8,
        "roughness": 0.25,
        "opacity": 1,
        "emissive": "#000000",
    },
    "lighting": {
        "ambientColor": "#202020",
        "ambientIntensity": 0.2,
        "directionalLights": [
            {"direction": [0, -1, 0], "color": "#FFFFFF", "intensity": 3, "castShadow": True},
        ],
        "pointLights": [
            {"position": [2, 3, 4], "color": "#FFCC00", "intensity": 40, "range": 50},
            {"position": [-2, 3, 4], "color": "#00CCFF", "intensity": 20, "range": 50},
        ],
    },
    "physics": {
        "enabled": True,
        "mass": 250,
        "friction": 0.7,
        "restitution": 0.1,
        "collisionShape": "box",
    },
}


@pytest.fixture
def cube_model():
    return copy.deepcopy(CUBE_MODEL)


@pytest.fixture
def full_model():
    return copy.deepcopy(FULL_MODEL)
