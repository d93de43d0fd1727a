import io
import xml.etree.ElementTree as ET

import pytest

from flamescope.attrs import FuncFrameAttrsMap
from flamescope.color import color_scale
from flamescope.flamegraph import (
    NoStackCountsError,
    deannotate,
    from_files,
    from_lines,
    from_reader,
    from_readers,
)
from flamescope.options import Direction, Options
from flamescope.palette_map import PaletteMap

SVG = "{http://www.w3.org/2000/svg}"
XLINK = "{http://www.w3.org/1999/xlink}"


def make_options(**kwargs):
    kwargs.setdefault("hash", True)
    kwargs.setdefault("no_javascript", True)
    return Options(**kwargs)


def render(lines, **kwargs):
    out = io.StringIO()
    from_lines(make_options(**kwargs), lines, out)
    return out.getvalue()


def frame_elements(svg_text):
    root = ET.fromstring(svg_text)
    container = next(
        el for el in root.iter(SVG + "svg") if el.get("id") == "frames"
    )
    return list(container)


def titles(svg_text):
    return [el.find(SVG + "title").text for el in frame_elements(svg_text)]


def by_title_prefix(svg_text, prefix):
    return next(
        el for el in frame_elements(svg_text) if el.find(SVG + "title").text.startswith(prefix)
    )


@pytest.mark.parametrize(
    "name, expected",
    [
        ("foo_[k]", "foo"),
        ("foo_[w]", "foo"),
        ("foo_[i]", "foo"),
        ("foo_[j]", "foo"),
        ("foo_[x]", "foo_[x]"),
        ("foo_[kk]", "foo_[kk]"),
        ("foo", "foo"),
        ("", ""),
    ],
)
def test_deannotate(name, expected):
    assert deannotate(name) == expected


def test_basic_titles():
    out = render(["main;foo 3", "main;bar 1"])
    found = titles(out)
    assert len(found) == 4
    assert "all (4 samples, 100%)" in found
    assert "foo (3 samples, 75.00%)" in found


def test_empty_input_raises_and_writes_error_svg():
    out = io.StringIO()
    with pytest.raises(NoStackCountsError):
        from_lines(make_options(), [], out)
    assert "ERROR: No valid input provided to flamegraph" in out.getvalue()


def test_invalid_lines_only_raise():
    with pytest.raises(NoStackCountsError):
        render(["no samples here", "also bad x"])


def test_unsorted_with_no_sort_raises():
    with pytest.raises(ValueError):
        render(["b 1", "a 1"], no_sort=True)


def test_input_order_does_not_matter():
    assert render(["b;c 1", "a 2", "b 3"]) == render(["a 2", "b 3", "b;c 1"])


def test_reverse_stack_order_matches_reversed_input():
    assert render(["a;b 1", "a;c 2"], reverse_stack_order=True) == render(["b;a 1", "c;a 2"])


def test_differential_titles_and_colors():
    out = render(["main;foo 1 3"])
    foo = by_title_prefix(out, "foo ")
    main = by_title_prefix(out, "main ")
    assert "; +" in foo.find(SVG + "title").text
    assert main.find(SVG + "title").text.endswith("; 0.00%)")
    assert foo.find(SVG + "rect").get("fill") == "rgb({},{},{})".format(*color_scale(2, 2))


def test_negated_differential():
    out = render(["main;foo 1 3"], negate_differentials=True)
    foo = by_title_prefix(out, "foo ")
    assert "; -" in foo.find(SVG + "title").text
    assert foo.find(SVG + "rect").get("fill") == "rgb({},{},{})".format(*color_scale(-2, 2))


def test_inverted_root_at_top():
    opt = make_options(direction=Direction.INVERTED)
    out = io.StringIO()
    from_lines(opt, ["a 1"], out)
    root_frame = by_title_prefix(out.getvalue(), "all ")
    assert int(root_frame.find(SVG + "rect").get("y")) == opt.ypad1()


def test_min_width_prunes_narrow_frames():
    found = titles(render(["a 1000", "b 1"], min_width=1.0))
    assert not any(t.startswith("b ") for t in found)
    assert any(t.startswith("a ") for t in found)


def test_image_width_sets_root_width():
    root = ET.fromstring(render(["a 1"], image_width=800))
    assert root.get("width") == "800"


def test_pretty_xml_keeps_content():
    pretty = render(["main;foo 3", "main;bar 1"], pretty_xml=True)
    plain = render(["main;foo 3", "main;bar 1"])
    assert "\n" in pretty
    assert titles(pretty) == titles(plain)


def test_long_names_are_truncated():
    name = "x" * 400
    out = render([f"{name} 1"])
    label = by_title_prefix(out, "x").find(SVG + "text").text
    assert label.endswith("..")
    assert name.startswith(label[:-2])
    assert len(label) < len(name)


def test_palette_map_records_colors():
    palette = PaletteMap()
    out = render(["main;foo 1"], palette_map=palette)
    stored = palette.get("foo")
    fill = by_title_prefix(out, "foo ").find(SVG + "rect").get("fill")
    assert fill == "rgb({},{},{})".format(*stored)


def test_frame_attrs_href_and_title():
    attrs = FuncFrameAttrsMap.from_reader(
        ["foo\thref=http://example.com/foo\ttitle=custom title"]
    )
    out = render(["main;foo 1"], func_frameattrs=attrs)
    anchors = [el for el in frame_elements(out) if el.tag == SVG + "a"]
    assert len(anchors) == 1
    assert anchors[0].get(XLINK + "href") == "http://example.com/foo"
    assert anchors[0].get("target") == "_top"
    assert anchors[0].find(SVG + "title").text == "custom title"


def test_from_reader_matches_from_lines():
    text = "main;foo 3\nmain;bar 1\n"
    out = io.StringIO()
    from_reader(make_options(), io.StringIO(text), out)
    assert out.getvalue() == render(["main;foo 3", "main;bar 1"])


def test_from_readers_concatenates():
    out = io.StringIO()
    from_readers(
        make_options(), [io.BytesIO(b"main;foo 3\n"), io.BytesIO(b"main;bar 1\n")], out
    )
    assert out.getvalue() == render(["main;foo 3", "main;bar 1"])


def test_from_files(tmp_path):
    first = tmp_path / "one.folded"
    second = tmp_path / "two.folded"
    first.write_text("main;foo 3\n", encoding="utf-8")
    second.write_text("main;bar 1\n", encoding="utf-8")
    out = io.StringIO()
    from_files(make_options(), [first, second], out)
    assert out.getvalue() == render(["main;foo 3", "main;bar 1"])


def test_from_files_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        from_files(make_options(), [tmp_path / "missing.folded"], io.StringIO())