import io

from flamescope.attrs import FrameAttrs, FuncFrameAttrsMap


def _sample_text():
    foo = "\t".join(
        [
            "foo",
            "title=foo title",
            'class="foo class"',
            'g_extra=gextra1=gextra1 gextra2="foo gextra2"',
            "href=foo href",
            "target=foo target",
            'a_extra="aextra1="foo aextra1" aextra2="foo aextra2""',
        ]
    )
    bar = "\t".join(
        [
            "bar",
            "class=bar class",
            "href=bar href",
            "a_extra=aextra1=foo invalid aextra2=bar",
        ]
    )
    return "\n".join([foo, bar])


def test_func_frame_attrs_map_from_reader():
    result = FuncFrameAttrsMap.from_reader(io.StringIO(_sample_text()))
    expected = FuncFrameAttrsMap(
        {
            "foo": FrameAttrs(
                title="foo title",
                attrs={
                    "class": "foo class",
                    "xlink:href": "foo href",
                    "target": "foo target",
                    "gextra1": "gextra1",
                    "gextra2": "foo gextra2",
                    "aextra1": "foo aextra1",
                    "aextra2": "foo aextra2",
                },
            ),
            "bar": FrameAttrs(
                title=None,
                attrs={
                    "class": "bar class",
                    "xlink:href": "bar href",
                    "aextra1": "foo",
                    "aextra2": "bar",
                    "target": "_top",
                },
            ),
        }
    )
    assert result == expected


def test_from_file_and_lookup(tmp_path):
    path = tmp_path / "nameattr.txt"
    path.write_text("main\tid=root\tclass=c1\n\nlonely\n", encoding="utf-8")
    result = FuncFrameAttrsMap.from_file(path)
    main = result.frameattrs_for_func("main")
    assert main == FrameAttrs(title=None, attrs={"id": "root", "class": "c1"})
    assert result.frameattrs_for_func("lonely") == FrameAttrs()
    assert result.frameattrs_for_func("missing") is None


def test_duplicate_attribute_replaces_value_and_unknown_is_ignored():
    text = "f\tclass=one\tclass=two\tbogus=x\n"
    result = FuncFrameAttrsMap.from_reader(io.StringIO(text))
    assert result.frameattrs_for_func("f").attrs == {"class": "two"}


def test_unterminated_quote_in_extra_stops_parsing():
    text = 'f\tg_extra=a=1 b="unterminated\n'
    result = FuncFrameAttrsMap.from_reader(io.StringIO(text))
    assert result.frameattrs_for_func("f").attrs == {"a": "1"}