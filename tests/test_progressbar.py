"""Tests for the tick progressbar widget."""

import pytest

from giblets import options
from giblets.geometry import Rect
from giblets.progressbar import Progressbar


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, widget):
        self.events.append(widget)


def test_defaults():
    bar = Progressbar()
    o = bar.options
    assert (o.tick_width, o.tick_height, o.gap, o.border_width) == (8, 8, 3, 1)
    assert (o.width, o.height, o.alignment, o.max_value) == (100, 12, "center", 1)
    assert (o.color, o.background_color, o.border_color) == ("#8585ac", "#484874", "#8585ac")
    assert bar.tick_count == 9
    assert bar.get_value() == 0.0


@pytest.mark.parametrize("value, stored", [(1.5, 1.0), (-0.3, 0.0), (0.25, 0.25), ("0.5", 0.5)])
def test_value_is_clamped(value, stored):
    assert Progressbar().set_value(value).get_value() == stored


def test_unusable_value_is_ignored():
    bar = Progressbar().set_value(0.4)
    bar.set_value("lots")
    bar.set_value(float("nan"))
    bar.set_value(None)
    assert bar.get_value() == 0.4


def test_max_value_scales():
    bar = Progressbar(max_value=200)
    assert bar.set_value(50).get_value() == 0.25
    assert bar.set_value(400).get_value() == 1.0


def test_setters_request_redraw():
    bar = Progressbar()
    redraw, width = Recorder(), Recorder()
    bar.connect_signal("widget::redraw_needed", redraw)
    bar.connect_signal("property::width", width)

    bar.set_width(50)
    bar.set_value(0.5)
    bar.set_tick_size(4, 4)
    bar.set_gap(1)
    bar.set_alignment("top")
    bar.set_border_width(0)
    bar.set_colors(color="#ffffff")

    assert len(redraw.events) == 7
    assert width.events == [bar]


def test_no_signals_during_construction():
    emitted = []

    class Watched(Progressbar):
        def emit_signal(self, name, *args):
            emitted.append(name)
            super().emit_signal(name, *args)

    bar = Watched(width=40, gap=2)
    assert emitted == []
    bar.set_value(1)
    assert emitted == ["widget::redraw_needed", "property::value"]


def test_invalid_setter_input_keeps_state_quietly():
    bar = Progressbar()
    redraw = Recorder()
    bar.connect_signal("widget::redraw_needed", redraw)
    bar.set_width(-10)
    bar.set_gap("wide")
    bar.set_alignment("middle")
    bar.set_colors(color="blue")
    assert bar.options == Progressbar().options
    assert redraw.events == []


def test_width_and_tick_changes_recount():
    bar = Progressbar()
    assert bar.set_width(50).tick_count == 4
    assert bar.set_tick_size(2).tick_count == 9
    assert bar.set_gap(0).tick_count == 24
    assert bar.set_width(0).tick_count == 0


def test_bad_options_fall_back_to_defaults():
    bar = Progressbar(tick_width="wide", gap=-1, color="blue", alignment="middle", max_value=0)
    assert bar.options == Progressbar().options


def test_infinite_options_fall_back_to_defaults():
    bar = Progressbar(width="inf", gap=float("inf"))
    assert bar.options.width == 100
    assert bar.options.gap == 3
    assert bar.tick_count == 9
    assert bar.set_width(float("inf")).options.width == 100


def test_zero_is_a_real_option():
    bar = Progressbar(border_width=0, gap=0)
    assert bar.options.border_width == 0
    assert bar.options.gap == 0


def test_option_beats_theme_beats_default():
    theme = {"giblets": {"progressbar": {"gap": 5, "color": "#FF0000", "tick_width": "x"}}}
    bar = Progressbar(theme=theme, gap=2)
    assert bar.options.gap == 2
    assert bar.options.color == "#ff0000"
    assert bar.options.tick_width == 8


def test_global_theme_is_used():
    options.set_theme({"giblets": {"progressbar": {"height": 20}}})
    assert Progressbar().options.height == 20


def test_render_classifies_ticks():
    bar = Progressbar().set_value(0.5)
    shapes = list(bar.render())
    assert len(shapes) == 18
    assert shapes[0] == ("border", Rect(0.5, 2.5, 7, 7), "#8585ac")
    fills = [color for kind, _, color in shapes if kind == "fill"]
    assert fills == ["#8585ac"] * 5 + ["#484874"] * 4


def test_render_without_border():
    bar = Progressbar(border_width=0).set_value(1)
    assert {kind for kind, _, _ in bar.render()} == {"fill"}


def test_draw_feeds_context(context):
    bar = Progressbar().set_value(0.5)
    bar.draw(context, 100, 12)
    names = context.names()
    assert names.count("fill") == 9
    assert names.count("stroke") == 9
    assert context.calls[0] == ("set_source_rgba", (0x85 / 255, 0x85 / 255, 0xAC / 255, 1.0))
    assert context.calls[1] == ("rectangle", (0.5, 2.5, 7, 7))
    assert ("set_line_width", (1,)) in context.calls


def test_markup_groups_runs():
    bar = Progressbar().set_value(0.5)
    assert bar.markup() == (
        '<span foreground="#8585ac">█████</span>'
        '<span foreground="#484874">████</span>'
    )
    assert Progressbar(width=0).markup() == ""


def test_fit():
    bar = Progressbar()
    assert bar.fit(500, 500) == (100, 12)
    assert bar.fit(60, 10) == (60, 10)


def test_vertical_is_unsupported():
    with pytest.raises(NotImplementedError):
        Progressbar().set_vertical(True)
