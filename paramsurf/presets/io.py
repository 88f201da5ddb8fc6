"""Preset documents: the JSON shape used to save and reload a surface.

A preset file is a single object

    {"type": "paramSurfacePreset", "version": 1, "name": ..., "x": ..., "y": ...,
     "z": ..., "uMin": ..., "uMax": ..., "vMin": ..., "vMax": ...,
     "uSteps": 60, "vSteps": 30}

or a collection ``{"presets": [...]}`` of which the first entry is used.
"""

import json
import re

from paramsurf.config import DEFAULT_PRESET_NAME, PRESET_TYPE, PRESET_VERSION
from paramsurf.errors import InvalidPreset
from paramsurf.geometry.surface import SurfaceDefinition

# preset key -> SurfaceDefinition field
_TEXT_FIELDS = {
    "x": "x",
    "y": "y",
    "z": "z",
    "uMin": "u_min",
    "uMax": "u_max",
    "vMin": "v_min",
    "vMax": "v_max",
}
_STEP_FIELDS = {"uSteps": "u_steps", "vSteps": "v_steps"}


def parse_preset_document(data) -> dict:
    """Return the preset object held by a loaded document."""
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise InvalidPreset(f"Could not read preset file: {e}") from e

    if not isinstance(data, dict):
        raise InvalidPreset("File does not contain a valid preset object.")

    presets = data.get("presets")
    if isinstance(presets, list) and presets:
        data = presets[0]
        if not isinstance(data, dict):
            raise InvalidPreset("File does not contain a valid preset object.")
    return data


def _as_text(value) -> str:
    if value is None:
        return ""
    return str(value)


def _as_steps(value, key: str) -> int:
    if isinstance(value, bool):
        raise InvalidPreset(f"{key} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and re.fullmatch(r"\s*[+-]?[0-9]+\s*", value):
        return int(value)
    raise InvalidPreset(f"{key} must be an integer.")


def apply_preset(definition: SurfaceDefinition, preset: dict) -> SurfaceDefinition:
    """Overlay a preset on the current definition.

    Missing expressions and bounds become empty strings; missing step counts
    keep the current values.
    """
    changes = {field: _as_text(preset.get(key)) for key, field in _TEXT_FIELDS.items()}
    for key, field in _STEP_FIELDS.items():
        if preset.get(key) is not None:
            changes[field] = _as_steps(preset[key], key)
    if preset.get("name"):
        changes["name"] = str(preset["name"])
    return definition.with_changes(**changes)


def preset_document(definition: SurfaceDefinition, name: str | None = None) -> dict:
    """Serialize a definition as a version-1 preset object."""
    preset_name = (name if name is not None else definition.name).strip() or DEFAULT_PRESET_NAME
    document = {
        "type": PRESET_TYPE,
        "version": PRESET_VERSION,
        "name": preset_name,
    }
    for key, field in _TEXT_FIELDS.items():
        document[key] = getattr(definition, field)
    for key, field in _STEP_FIELDS.items():
        document[key] = getattr(definition, field)
    return document


def preset_filename(name: str) -> str:
    """Download name for a preset, e.g. "My Torus #2" -> "my-torus-2.json"."""
    slug = re.sub(r"[^a-z0-9]+", "-", (name or "surface").lower()).strip("-")
    return f"{slug or 'surface'}.json"
