"""Tests for svg_editor.interaction module."""

import pytest
from pathlib import Path
from xml.etree import ElementTree as ET

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from svg_editor.utils import SVG_NAMESPACES, find_element_by_id
from svg_editor.geometry import Viewport
from svg_editor.transform import MAX_SCALE, MIN_SCALE, TransformState, read_transform
from svg_editor.interaction import (
    EditState,
    EventOutcome,
    LostPointerCapture,
    PointerCancel,
    PointerDown,
    PointerMove,
    PointerUp,
    TransformEditor,
    Wheel,
)

SVG_NS = SVG_NAMESPACES["svg"]

DOCUMENT = f"""<svg xmlns="{SVG_NS}" viewBox="0 0 100 100" preserveAspectRatio="none">
  <rect id="box" x="0" y="0" width="10" height="10"/>
  <circle id="dot" cx="50" cy="50" r="5" transform="translate(1 2) scale(3)"/>
  <g id="group"><text id="caption"><tspan id="span">hi</tspan></text></g>
  <text id="loose">free text</text>
</svg>"""


class Commits:
    def __init__(self):
        self.count = 0

    def __call__(self):
        self.count += 1


@pytest.fixture
def root():
    return ET.fromstring(DOCUMENT)


@pytest.fixture
def commits():
    return Commits()


@pytest.fixture
def editor(root, commits):
    return TransformEditor(root, on_commit=commits)


def el(root, element_id):
    return find_element_by_id(root, element_id)


class TestPointerDown:
    """Tests for selection on pointer-down."""

    def test_initial_state(self, editor):
        assert editor.state is EditState.IDLE
        assert editor.selected is None

    def test_selects_shape_and_captures(self, editor, root):
        outcome = editor.handle(PointerDown(el(root, "box"), pointer_id=7))
        assert editor.selected is el(root, "box")
        assert editor.state is EditState.DRAGGING
        assert editor.drag.pointer_id == 7
        assert outcome.default_prevented is True
        assert outcome.captured_pointer == 7

    def test_root_is_never_selected(self, editor, root):
        outcome = editor.handle(PointerDown(root))
        assert editor.selected is None
        assert editor.state is EditState.IDLE
        assert outcome == EventOutcome()

    def test_root_keeps_previous_selection(self, editor, root):
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(PointerUp())
        editor.handle(PointerDown(root))
        assert editor.selected is el(root, "box")
        assert editor.state is EditState.SELECTED

    def test_nested_target_selects_closest_group(self, editor, root):
        editor.handle(PointerDown(el(root, "span")))
        assert editor.selected is el(root, "group")

    def test_non_manipulable_target_is_ignored(self, editor, root):
        outcome = editor.handle(PointerDown(el(root, "loose")))
        assert editor.selected is None
        assert outcome.default_prevented is False

    def test_foreign_element_is_ignored(self, editor):
        editor.handle(PointerDown(ET.Element(f"{{{SVG_NS}}}rect")))
        assert editor.selected is None

    def test_reselect_replaces_selection(self, editor, root):
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(PointerUp())
        editor.handle(PointerDown(el(root, "dot")))
        assert editor.selected is el(root, "dot")


class TestDrag:
    """Tests for dragging selected shapes."""

    def test_move_translates_in_pixels_without_viewport(self, editor, root):
        editor.handle(PointerDown(el(root, "box")))
        outcome = editor.handle(PointerMove(3, -4))
        assert outcome.transform_changed is True
        assert read_transform(el(root, "box")) == TransformState(3, -4, 1)

    def test_moves_accumulate(self, editor, root):
        editor.handle(PointerDown(el(root, "dot")))
        editor.handle(PointerMove(1, 1))
        editor.handle(PointerMove(2, 3))
        assert read_transform(el(root, "dot")) == TransformState(4, 6, 3)

    def test_delta_divided_by_screen_scale(self, root, commits):
        viewport = Viewport(400, 200)
        editor = TransformEditor(root, lambda: viewport, commits)
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(PointerMove(10, -6))
        state = read_transform(el(root, "box"))
        assert state.tx == pytest.approx(10 / 4)
        assert state.ty == pytest.approx(-6 / 2)
        assert state.scale == 1

    def test_mapping_reread_every_step(self, root, commits):
        viewport = Viewport(100, 100)
        editor = TransformEditor(root, lambda: viewport, commits)
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(PointerMove(10, 10))
        viewport.zoom = 2
        editor.handle(PointerMove(10, 10))
        assert read_transform(el(root, "box")) == TransformState(15, 15, 1)

    def test_move_without_selection_is_noop(self, editor, root):
        assert editor.handle(PointerMove(5, 5)) == EventOutcome()
        assert el(root, "box").get("transform") is None

    def test_move_after_release_is_noop(self, editor, root):
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(PointerUp())
        editor.handle(PointerMove(5, 5))
        assert el(root, "box").get("transform") is None

    def test_move_from_other_pointer_is_ignored(self, editor, root):
        editor.handle(PointerDown(el(root, "box"), pointer_id=1))
        editor.handle(PointerMove(5, 5, pointer_id=2))
        assert el(root, "box").get("transform") is None

    def test_scale_unchanged_while_dragging(self, editor, root):
        editor.handle(PointerDown(el(root, "dot")))
        editor.handle(PointerMove(-1, -2))
        assert read_transform(el(root, "dot")).scale == 3

    def test_new_drag_does_not_touch_previous_element(self, editor, root):
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(PointerMove(5, 5))
        editor.handle(PointerUp())
        before = el(root, "box").get("transform")

        editor.handle(PointerDown(el(root, "dot")))
        editor.handle(PointerMove(7, 7))
        editor.handle(PointerUp())
        assert el(root, "box").get("transform") == before
        assert read_transform(el(root, "dot")) == TransformState(8, 9, 3)


class TestRelease:
    """Tests for ending a drag."""

    @pytest.mark.parametrize("event_type", [PointerUp, PointerCancel, LostPointerCapture])
    def test_release_commits_and_ends_drag(self, editor, root, commits, event_type):
        editor.handle(PointerDown(el(root, "box"), pointer_id=3))
        outcome = editor.handle(event_type(pointer_id=3))
        assert commits.count == 1
        assert outcome.committed is True
        assert outcome.released_pointer == 3
        assert editor.state is EditState.SELECTED
        assert editor.drag.active is False

    def test_release_without_drag_does_not_commit(self, editor, commits):
        assert editor.handle(PointerUp()) == EventOutcome()
        assert commits.count == 0

    def test_second_release_does_not_commit_again(self, editor, root, commits):
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(PointerUp())
        editor.handle(LostPointerCapture())
        assert commits.count == 1

    def test_release_of_other_pointer_keeps_drag(self, editor, root, commits):
        editor.handle(PointerDown(el(root, "box"), pointer_id=1))
        editor.handle(PointerUp(pointer_id=2))
        assert editor.state is EditState.DRAGGING
        assert commits.count == 0


class TestWheel:
    """Tests for wheel scaling."""

    def test_no_selection_is_noop_without_prevent_default(self, editor, commits):
        outcome = editor.handle(Wheel(-100))
        assert outcome.default_prevented is False
        assert commits.count == 0

    def test_wheel_up_zooms_in(self, editor, root, commits):
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(PointerUp())
        outcome = editor.handle(Wheel(-100))
        assert read_transform(el(root, "box")).scale == pytest.approx(1.05)
        assert outcome.default_prevented is True
        assert outcome.committed is True
        assert commits.count == 2

    def test_wheel_down_zooms_out(self, editor, root):
        editor.handle(PointerDown(el(root, "dot")))
        editor.handle(Wheel(100))
        state = read_transform(el(root, "dot"))
        assert state.scale == pytest.approx(3 * 0.95)
        assert (state.tx, state.ty) == (1, 2)

    def test_repeated_wheel_up_is_monotonic_and_clamped(self, editor, root):
        editor.handle(PointerDown(el(root, "box")))
        previous = read_transform(el(root, "box")).scale
        for _ in range(200):
            editor.handle(Wheel(-1))
            scale = read_transform(el(root, "box")).scale
            assert previous <= scale <= MAX_SCALE
            previous = scale
        assert previous == MAX_SCALE

    def test_repeated_wheel_down_is_monotonic_and_clamped(self, editor, root):
        editor.handle(PointerDown(el(root, "box")))
        previous = read_transform(el(root, "box")).scale
        for _ in range(200):
            editor.handle(Wheel(1))
            scale = read_transform(el(root, "box")).scale
            assert MIN_SCALE <= scale <= previous
            previous = scale
        assert previous == MIN_SCALE

    def test_out_of_range_scale_is_clamped_on_wheel(self, editor, root):
        box = el(root, "box")
        box.set("transform", "scale(50)")
        editor.handle(PointerDown(box))
        editor.handle(Wheel(-1))
        assert read_transform(box).scale == MAX_SCALE

    def test_custom_limits_and_factors(self, root):
        editor = TransformEditor(root, min_scale=0.5, max_scale=2, zoom_in=2, zoom_out=0.5)
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(Wheel(-1))
        editor.handle(Wheel(-1))
        assert read_transform(el(root, "box")).scale == 2

    def test_wheel_while_dragging_composes(self, editor, root, commits):
        editor.handle(PointerDown(el(root, "box")))
        editor.handle(PointerMove(4, 0))
        editor.handle(Wheel(-1))
        editor.handle(PointerMove(0, 6))
        assert editor.state is EditState.DRAGGING
        state = read_transform(el(root, "box"))
        assert (state.tx, state.ty) == (4, 6)
        assert state.scale == pytest.approx(1.05)
        editor.handle(PointerUp())
        assert commits.count == 2


class TestHandle:
    """Tests for the transition function itself."""

    def test_unknown_event_type(self, editor):
        with pytest.raises(TypeError):
            editor.handle("click")

    def test_instances_are_independent(self, commits):
        root_a = ET.fromstring(DOCUMENT)
        root_b = ET.fromstring(DOCUMENT)
        editor_a = TransformEditor(root_a, on_commit=commits)
        editor_b = TransformEditor(root_b, on_commit=commits)
        editor_a.handle(PointerDown(el(root_a, "box")))
        editor_b.handle(PointerMove(5, 5))
        assert editor_b.selected is None
        assert el(root_b, "box").get("transform") is None
