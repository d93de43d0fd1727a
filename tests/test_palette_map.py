import io

import pytest

from flamescope.color import Color
from flamescope.palette_map import PaletteMap, parse_line, parse_rgb_string


def test_palette_map_insert_get_iter_and_round_trip():
    palette = PaletteMap()

    assert palette.insert("foo", Color(0, 50, 255)) is None
    assert palette.insert("bar", Color(50, 0, 60)) is None
    assert palette.insert("foo", Color(80, 20, 63)) == Color(0, 50, 255)
    assert palette.insert("foo", Color(128, 128, 128)) == Color(80, 20, 63)
    assert palette.insert("baz", Color(255, 0, 255)) is None

    assert palette.get("func") is None
    assert palette.get("bar") == Color(50, 0, 60)
    assert palette.get("foo") == Color(128, 128, 128)
    assert palette.get("baz") == Color(255, 0, 255)

    expected = [
        ("bar", Color(50, 0, 60)),
        ("baz", Color(255, 0, 255)),
        ("foo", Color(128, 128, 128)),
    ]
    assert sorted(palette) == expected

    buf = io.StringIO()
    palette.to_writer(buf)
    buf.seek(0)
    reloaded = PaletteMap.from_reader(buf)
    assert sorted(reloaded) == expected


def test_to_writer_is_sorted_by_name():
    palette = PaletteMap()
    palette.insert("zeta", Color(1, 2, 3))
    palette.insert("alpha", Color(4, 5, 6))
    buf = io.StringIO()
    palette.to_writer(buf)
    assert buf.getvalue() == "alpha->rgb(4,5,6)\nzeta->rgb(1,2,3)\n"


def test_parse_line_valid():
    assert parse_line("func->rgb(0, 0, 0)") == ("func", Color(0, 0, 0))
    assert parse_line("->rgb(255, 255, 255)") == ("", Color(255, 255, 255))


@pytest.mark.parametrize(
    "line",
    [
        "",
        "func->(0, 0, 0)",
        "func->",
        "func->foo->rgb(0, 0, 0)",
        "func->rgb(0, 0, 0)->foo",
        "func->rgb(255, 255, 256)",
        "func->rgb(-1, 255, 255)",
    ],
)
def test_parse_line_invalid(line):
    with pytest.raises(ValueError):
        parse_line(line)


def test_parse_rgb_string():
    assert parse_rgb_string("  rgb( 1 , 2 ,3 )  ") == Color(1, 2, 3)
    assert parse_rgb_string("rgb(1,2)") is None
    assert parse_rgb_string("rgb(a,2,3)") is None


def test_from_reader_skips_invalid_lines():
    reader = io.StringIO("good->rgb(1,2,3)\nbad line\r\nother->rgb(4,5,6)\r\n")
    palette = PaletteMap.from_reader(reader)
    assert sorted(palette) == [("good", Color(1, 2, 3)), ("other", Color(4, 5, 6))]


def test_load_from_non_existing_file(tmp_path):
    palette_map = PaletteMap.load_from_file_or_empty(tmp_path / "non-existing-palette.map")
    assert palette_map == PaletteMap()


def test_save_and_load_file(tmp_path):
    path = tmp_path / "palette.map"
    palette = PaletteMap()
    palette.insert("main", Color(10, 20, 30))
    palette.save_to_file(path)
    assert path.read_text(encoding="utf-8") == "main->rgb(10,20,30)\n"
    assert PaletteMap.load_from_file_or_empty(path) == palette


def test_find_color_for_computes_once():
    palette = PaletteMap()
    calls = []

    def compute(name):
        calls.append(name)
        return Color(9, 9, 9)

    assert palette.find_color_for("f", compute) == Color(9, 9, 9)
    assert palette.find_color_for("f", compute) == Color(9, 9, 9)
    assert calls == ["f"]
    assert palette.get("f") == Color(9, 9, 9)