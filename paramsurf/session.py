"""Per-client controller holding the displayed mesh and the drawing state.

Every request returns an Outcome instead of raising, so the API layer only
has to translate it into a reply. The displayed mesh is swapped only after a
new one has been built successfully; a failed build keeps the old one.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from paramsurf.config import RibbonDefaults
from paramsurf.errors import NoFourierFit, Severity, SurfaceError, UnknownExample
from paramsurf.fourier.fitter import FourierFit, fit_stroke
from paramsurf.fourier.stroke import StrokeRecorder
from paramsurf.geometry.surface import SurfaceDefinition, build_surface
from paramsurf.geometry.tessellator import Mesh
from paramsurf.presets.catalog import CUSTOM_KEY, EXAMPLES
from paramsurf.presets.io import apply_preset, parse_preset_document, preset_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """Result of one request: either a value or an error code, plus a status line."""
    ok: bool
    message: str
    value: Any = None
    code: str | None = None
    severity: Severity = Severity.OK

    @classmethod
    def success(cls, message: str, value: Any = None) -> "Outcome":
        return cls(ok=True, message=message, value=value)

    @classmethod
    def failure(cls, error: SurfaceError) -> "Outcome":
        return cls(ok=False, message=error.message, code=error.code, severity=error.severity)

    def status(self) -> dict:
        payload = {"message": self.message, "severity": self.severity.value}
        if self.code:
            payload["code"] = self.code
        return payload


def _rejected(error: SurfaceError, what: str) -> Outcome:
    logger.warning("%s failed [%s]: %s", what, error.code, error.message)
    return Outcome.failure(error)


def _guarded(action: Callable[[], Outcome], what: str) -> Outcome:
    try:
        return action()
    except SurfaceError as e:
        return _rejected(e, what)


class SurfaceSession:
    """Tracks the definition, mesh, stroke and Fourier fit of one client."""

    def __init__(self, definition: SurfaceDefinition | None = None):
        self.definition = definition or SurfaceDefinition()
        self.mesh: Mesh | None = None
        self.stroke = StrokeRecorder()
        self.fourier: FourierFit | None = None

    # --- surface ---

    def build(self, definition: SurfaceDefinition | None = None) -> Outcome:
        """Build a mesh; on success it becomes the displayed mesh."""
        target = definition or self.definition

        def run() -> Outcome:
            mesh = build_surface(target)
            self._install(target, mesh)
            return Outcome.success("Surface updated ✔", mesh)

        return _guarded(run, "Surface build")

    def _install(self, definition: SurfaceDefinition, mesh: Mesh):
        previous = self.mesh
        self.definition = definition
        self.mesh = mesh
        if previous is not None:
            logger.debug("Released previous mesh (%d vertices)", previous.vertex_count)

    def apply_example(self, key: str) -> Outcome:
        if key == CUSTOM_KEY:
            return Outcome.success("Custom mode: your existing equations are preserved.")
        if key not in EXAMPLES:
            return _rejected(UnknownExample(key), "Example")
        return self.build(apply_preset(self.definition, EXAMPLES[key]))

    # --- presets ---

    def load_preset(self, data) -> Outcome:
        def run() -> Outcome:
            preset = parse_preset_document(data)
            outcome = self.build(apply_preset(self.definition, preset))
            if not outcome.ok:
                return outcome
            name = preset.get("name") or "preset"
            return Outcome.success(f'Loaded preset "{name}".', outcome.value)

        return _guarded(run, "Preset load")

    def export_preset(self, name: str | None = None) -> dict:
        return preset_document(self.definition, name)

    # --- Fourier drawing ---

    def compute_fourier(self, order: int | None, width: float, height: float) -> Outcome:
        def run() -> Outcome:
            result = fit_stroke(self.stroke.points, width, height, order)
            self.fourier = result
            return Outcome.success(
                f"Fourier approximation computed with K={result.order} terms.", result
            )

        return _guarded(run, "Fourier fit")

    def clear_stroke(self) -> Outcome:
        self.stroke.clear()
        self.fourier = None
        return Outcome.success("Drawing cleared.")

    def fourier_to_surface(self) -> Outcome:
        """Extrude the fitted curve into a thin ribbon and build it."""
        if self.fourier is None:
            return _rejected(NoFourierFit(), "Fourier to surface")

        ribbon = RibbonDefaults()
        definition = self.definition.with_changes(
            x=self.fourier.expr_x,
            y=self.fourier.expr_y,
            z=ribbon.z,
            u_min=ribbon.u_min,
            u_max=ribbon.u_max,
            v_min=ribbon.v_min,
            v_max=ribbon.v_max,
        )
        outcome = self.build(definition)
        if not outcome.ok:
            return outcome
        return Outcome.success("Fourier curve sent to visualizer (as a thin ribbon).", outcome.value)
