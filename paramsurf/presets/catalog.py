"""Built-in example surfaces, in the same shape as a preset file."""

EXAMPLES = {
    "sphere": {
        "name": "Sphere",
        "x": "cos(u) * cos(v)",
        "y": "sin(u) * cos(v)",
        "z": "sin(v)",
        "uMin": "0",
        "uMax": "2 * pi",
        "vMin": "-pi / 2",
        "vMax": "pi / 2",
        "uSteps": 60,
        "vSteps": 30,
    },
    "torus": {
        "name": "Torus",
        "x": "(1 + 0.35 * cos(v)) * cos(u)",
        "y": "(1 + 0.35 * cos(v)) * sin(u)",
        "z": "0.35 * sin(v)",
        "uMin": "0",
        "uMax": "2 * pi",
        "vMin": "0",
        "vMax": "2 * pi",
        "uSteps": 80,
        "vSteps": 40,
    },
    "cylinder": {
        "name": "Cylinder",
        "x": "cos(u)",
        "y": "sin(u)",
        "z": "v",
        "uMin": "0",
        "uMax": "2 * pi",
        "vMin": "-1",
        "vMax": "1",
        "uSteps": 50,
        "vSteps": 20,
    },
    "mobius": {
        "name": "Möbius strip",
        "x": "(1 + (v / 2) * cos(u / 2)) * cos(u)",
        "y": "(1 + (v / 2) * cos(u / 2)) * sin(u)",
        "z": "(v / 2) * sin(u / 2)",
        "uMin": "0",
        "uMax": "2 * pi",
        "vMin": "-1",
        "vMax": "1",
        "uSteps": 120,
        "vSteps": 20,
    },
    "saddle": {
        "name": "Saddle",
        "x": "u",
        "y": "v",
        "z": "u * u - v * v",
        "uMin": "-1.5",
        "uMax": "1.5",
        "vMin": "-1.5",
        "vMax": "1.5",
        "uSteps": 45,
        "vSteps": 45,
    },
    "heart": {
        "name": "Heart",
        # parametric heart curve, extruded slightly in v
        "x": "16 * sin(u)^3",
        "y": "13 * cos(u) - 5 * cos(2*u) - 2 * cos(3*u) - cos(4*u)",
        "z": "0.15 * v",
        "uMin": "0",
        "uMax": "2 * pi",
        "vMin": "-1",
        "vMax": "1",
        "uSteps": 400,
        "vSteps": 6,
    },
}

CUSTOM_KEY = "custom"


def list_examples() -> list[dict]:
    return [{"id": key, "name": ex["name"]} for key, ex in EXAMPLES.items()]


def get_example(key: str) -> dict:
    if key not in EXAMPLES:
        raise KeyError(f"Unknown example: {key}")
    return dict(EXAMPLES[key])
