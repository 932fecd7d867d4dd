"""Scripted editing sessions.

A session script is a YAML list of input steps replayed against an
SvgEditor in virtual time, so pointer, wheel and text input can be driven
without a display. Example::

    steps:
      - pointer_down: {target: circle1}
      - pointer_move: {dx: 12, dy: -4}
      - pointer_up: {}
      - wheel: {delta_y: -120, repeat: 3}
      - wait: 0.3
      - input_text: "<svg xmlns='http://www.w3.org/2000/svg'/>"
      - apply: {}
      - format: {}
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import yaml

from .editor import SvgEditor
from .interaction import (
    EventOutcome,
    InputEvent,
    LostPointerCapture,
    PointerCancel,
    PointerDown,
    PointerMove,
    PointerUp,
    Wheel,
)
from .scheduler import VirtualLoop
from .utils import find_element_by_id, get_element_label

StepAction = Literal[
    "pointer_down",
    "pointer_move",
    "pointer_up",
    "pointer_cancel",
    "lost_capture",
    "wheel",
    "wait",
    "input_text",
    "apply",
    "format",
    "upload",
]
ALL_ACTIONS: tuple[str, ...] = StepAction.__args__  # type: ignore[attr-defined]


@dataclass
class SessionStep:
    """A single scripted input step.

    Only the fields relevant to ``action`` are used.
    """

    action: StepAction
    target: str | None = None
    pointer_id: int = 1
    dx: float = 0.0
    dy: float = 0.0
    delta_y: float = 0.0
    repeat: int = 1
    seconds: float = 0.0
    text: str | None = None
    source: str | None = None


@dataclass
class SessionScript:
    """Ordered list of steps."""

    steps: list[SessionStep] = field(default_factory=list)


@dataclass
class StepResult:
    """Result of replaying one step."""

    index: int
    action: str
    ok: bool = True
    message: str = ""


@dataclass
class SessionReport:
    """Result of replaying a whole script."""

    step_results: list[StepResult] = field(default_factory=list)
    final_selection: str | None = None
    final_state: str = "idle"
    render_count: int = 0
    buffer_length: int = 0

    @property
    def has_errors(self) -> bool:
        """Check if any step failed."""
        return any(not r.ok for r in self.step_results)

    @property
    def error_count(self) -> int:
        """Number of failed steps."""
        return sum(1 for r in self.step_results if not r.ok)


def _number(value: object, name: str, convert=float):
    try:
        return convert(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _mapping(value: object, action: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"'{action}' step takes a mapping of options")
    return value


def parse_step(data: dict) -> SessionStep:
    """Parse a single step mapping like ``{"wheel": {"delta_y": -1}}``.

    Raises:
        ValueError: If the step is malformed.
    """
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError(f"Each step must be a mapping with exactly one action: {data!r}")

    action, value = next(iter(data.items()))
    if action not in ALL_ACTIONS:
        valid = ", ".join(ALL_ACTIONS)
        raise ValueError(f"Unknown step action '{action}'. Valid actions: {valid}")

    if action == "wait":
        seconds = _number(value, "wait")
        if seconds < 0:
            raise ValueError(f"wait must be >= 0, got {seconds}")
        return SessionStep(action="wait", seconds=seconds)

    if action == "input_text":
        if not isinstance(value, str):
            raise ValueError("input_text step takes the buffer text as a string")
        return SessionStep(action="input_text", text=value)

    if action == "upload":
        if isinstance(value, dict):
            value = value.get("source")
        if not value:
            raise ValueError("upload step needs a source")
        return SessionStep(action="upload", source=str(value))

    options = _mapping(value, action)
    step = SessionStep(action=action)  # type: ignore[arg-type]
    if "pointer_id" in options:
        step.pointer_id = _number(options["pointer_id"], "pointer_id", int)

    if action == "pointer_down":
        if "target" not in options:
            raise ValueError("pointer_down step needs a 'target' element id")
        step.target = str(options["target"])
    elif action == "pointer_move":
        step.dx = _number(options.get("dx", 0.0), "dx")
        step.dy = _number(options.get("dy", 0.0), "dy")
    elif action == "wheel":
        if "delta_y" not in options:
            raise ValueError("wheel step needs 'delta_y'")
        step.delta_y = _number(options["delta_y"], "delta_y")
        step.repeat = _number(options.get("repeat", 1), "repeat", int)
        if step.repeat < 1:
            raise ValueError(f"wheel repeat must be >= 1, got {step.repeat}")

    return step


def parse_session(data: dict | None) -> SessionScript:
    """Build a SessionScript from loaded YAML data.

    Raises:
        ValueError: If the format is invalid.
    """
    if not isinstance(data, dict):
        raise ValueError("Session file must be a YAML dictionary")
    steps_data = data.get("steps") or []
    if not isinstance(steps_data, list):
        raise ValueError("'steps' must be a list")

    script = SessionScript()
    for i, step_data in enumerate(steps_data, start=1):
        try:
            script.steps.append(parse_step(step_data))
        except ValueError as e:
            raise ValueError(f"Step {i}: {e}") from e
    return script


def parse_session_file(session_path: Path) -> SessionScript:
    """Parse a YAML session script.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the script is invalid.
    """
    with open(session_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return parse_session(data)


def _pointer_event(editor: SvgEditor, step: SessionStep) -> InputEvent:
    if step.action == "pointer_down":
        root = editor.edit_layer.root
        if root is None:
            raise LookupError("No document is rendered")
        target = find_element_by_id(root, step.target or "")
        if target is None:
            raise LookupError(f"Unknown target '{step.target}'")
        return PointerDown(target, step.pointer_id)
    if step.action == "pointer_move":
        return PointerMove(step.dx, step.dy, step.pointer_id)
    if step.action == "pointer_up":
        return PointerUp(step.pointer_id)
    if step.action == "pointer_cancel":
        return PointerCancel(step.pointer_id)
    return LostPointerCapture(step.pointer_id)


def _describe_outcome(outcome: EventOutcome) -> str:
    parts = []
    if outcome.captured_pointer is not None:
        parts.append(f"captured pointer {outcome.captured_pointer}")
    if outcome.released_pointer is not None:
        parts.append(f"released pointer {outcome.released_pointer}")
    if outcome.transform_changed:
        parts.append("transform changed")
    if outcome.committed:
        parts.append("committed")
    return ", ".join(parts) or "ignored"


def run_step(editor: SvgEditor, step: SessionStep, loop: VirtualLoop) -> str:
    """Replay one step.

    Returns:
        Short description of what happened.

    Raises:
        LookupError: If a pointer_down target cannot be found.
        RuntimeError: If an apply or upload action fails.
    """
    if step.action == "wait":
        ran = loop.advance(step.seconds)
        return f"waited {step.seconds:g}s, {ran} task(s) ran"

    if step.action == "input_text":
        editor.input_text(step.text or "")
        return f"buffer set ({len(step.text or '')} chars)"

    if step.action == "apply":
        if not editor.apply():
            raise RuntimeError("Apply failed, previous graphic kept")
        return "rendered"

    if step.action == "format":
        editor.format()
        return "buffer formatted"

    if step.action == "upload":
        if not editor.upload(step.source or ""):
            raise RuntimeError(f"Upload of {step.source} failed")
        return f"uploaded {step.source}"

    if step.action == "wheel":
        outcomes = [editor.dispatch(Wheel(step.delta_y)) for _ in range(step.repeat)]
        return _describe_outcome(outcomes[-1])

    return _describe_outcome(editor.dispatch(_pointer_event(editor, step)))


def run_session(
    editor: SvgEditor, script: SessionScript, loop: VirtualLoop
) -> SessionReport:
    """Replay a script, then let pending debounced tasks settle.

    Failing steps are recorded and do not stop the replay.

    Args:
        editor: Editor whose scheduler runs on ``loop``.
        script: Steps to replay.
        loop: Virtual loop driving the editor's timers.

    Returns:
        SessionReport describing each step and the final state.
    """
    report = SessionReport()
    for index, step in enumerate(script.steps, start=1):
        result = StepResult(index=index, action=step.action)
        try:
            result.message = run_step(editor, step, loop)
        except (LookupError, RuntimeError) as e:
            result.ok = False
            result.message = str(e)
        report.step_results.append(result)

    loop.run_until_idle()

    selected = editor.selected
    report.final_selection = get_element_label(selected) if selected is not None else None
    if editor.transform_editor is not None:
        report.final_state = editor.transform_editor.state.value
    report.render_count = editor.render_count
    report.buffer_length = len(editor.buffer.text)
    return report


def format_session_report(report: SessionReport) -> str:
    """Format a session report as text."""
    lines: list[str] = []
    lines.append("=" * 60)
    lines.append("SESSION")
    lines.append("=" * 60)
    for result in report.step_results:
        status = "OK" if result.ok else "ERROR"
        lines.append(f"  [{status}] {result.index:>3} {result.action}: {result.message}")
    lines.append("")
    lines.append("=" * 60)
    lines.append("SUMMARY")
    lines.append("=" * 60)
    lines.append(f"Steps: {len(report.step_results)}, errors: {report.error_count}")
    lines.append(f"Renders: {report.render_count}")
    lines.append(f"State: {report.final_state}")
    lines.append(f"Selection: {report.final_selection or 'none'}")
    lines.append(f"Buffer: {report.buffer_length} chars")
    return "\n".join(lines)
