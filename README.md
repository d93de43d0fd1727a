# flamescope

flamescope turns folded stack traces into flame graph SVG images.

A folded stack trace has one line for each distinct call stack. The line holds
the frames joined by semicolons, then a space, then the number of samples in
which that stack was seen:

```
main;parse;read_token 42
main;parse;build_tree 17
main;render 8
```

When a line carries two sample counts, the result is a *differential* flame
graph. Frame widths follow the second count. Each frame is coloured by the
change between the two counts: red where samples went up, blue where they
went down, and white where nothing changed.

Fractional sample counts are truncated to integers, and a warning is logged
the first time this happens. Lines without a valid trailing count are skipped,
and the number of skipped lines is logged.

## Installation

flamescope needs Python 3.10 or later and has no runtime dependencies.

## Rendering a flame graph

```python
from flamescope.flamegraph import from_reader
from flamescope.options import Options

opt = Options()
with open("stacks.folded") as src, open("profile.svg", "w") as out:
    from_reader(opt, src, out)
```

`flamescope.flamegraph` has these entry points:

- `from_lines(opt, lines, writer)` takes an iterable of folded lines.
- `from_reader(opt, reader, writer)` reads a single text or binary stream.
- `from_readers(opt, readers, writer)` joins several streams into one graph.
- `from_files(opt, files, writer)` reads the named files. A path of `-` means
  standard input, and standard input is also used when the list is empty.
- `deannotate(name)` strips a trailing `_[k]`, `_[w]`, `_[i]` or `_[j]`
  annotation from a frame name, the same way frame labels are shown.

Input lines are sorted before they are merged. When no line holds a valid
sample count, a small SVG with an error message is still written, and then
`NoStackCountsError` (a `ValueError`) is raised. With `no_sort` set, lines
that are out of order raise `ValueError`.

## Options

`flamescope.options.Options` is a dataclass that holds every setting, and
each setting has a default. The settings are:

- `colors`: the palette. Use `flamescope.color.parse_palette` with one of
  `hot` (the default), `mem`, `io`, `red`, `green`, `blue`, `aqua`,
  `yellow`, `purple`, `orange`, `java`, `js`, `perl` or `wakeup`. The `java`,
  `js` and `perl` palettes choose a hue from each function name.
- `bgcolors`: the background. Use `flamescope.color.parse_background_color`
  with `yellow`, `blue`, `green`, `grey` or a flat `#rrggbb` colour. When
  it is not set, the background follows the palette.
- `search_color`: the highlight colour for search matches, a `SearchColor`
  from `flamescope.color.parse_search_color("#rrggbb")`. The default is
  `#e600e6`.
- `hash`: derive colours from function names, so the same function gets the
  same colour in every graph. Without it, colours come from a seeded
  pseudo-random generator.
- `palette_map`: a `flamescope.palette_map.PaletteMap` that remembers the
  colour chosen for each function and reuses it. Load one with
  `PaletteMap.load_from_file_or_empty(path)`, which gives an empty map when
  the file does not exist, and store it with `save_to_file(path)`. The file
  holds one `NAME->rgb(R,G,B)` line per function, sorted by name.
- `func_frameattrs`: extra SVG attributes for particular functions (see below).
- `direction`: `Direction.STRAIGHT` (the default) draws stacks growing
  upwards. `Direction.INVERTED` draws them growing downwards.
- `title`, `subtitle`, `notes`, `count_name` and `name_type`: text shown in
  the image.
- `image_width`, `frame_height`, `font_type`, `font_size` and `font_width`:
  the layout. When no width is given, the image is 1200 pixels wide and is
  marked as fluid.
- `min_width`: frames narrower than this percentage of the width are dropped.
- `factor`: scale sample counts, for example `0.1` when fractional counts were
  multiplied by ten before folding.
- `negate_differentials`: compute differentials as first count minus second.
- `reverse_stack_order`: reverse every stack before merging. The lines are
  then always sorted, and `no_sort` is ignored.
- `no_sort`: skip sorting when the input is already sorted.
- `pretty_xml`: indent the SVG output.
- `no_javascript`: leave out the embedded script.

## Per-function SVG attributes

`flamescope.attrs.FuncFrameAttrsMap.from_file(path)` reads a tab-separated
file that adds attributes to particular functions. `from_reader` reads the
same format from any iterable of lines. Each line holds a function name
followed by `name=value` pairs, and values may be wrapped in double quotes.
The supported names are:

- `title`: replaces the generated tooltip text.
- `href`: turns the frame into a link. `target` defaults to `_top`.
- `id`, `class` and `target`: set directly on the frame's element.
- `g_extra` and `a_extra`: a list of further `name=value` attributes.

Unknown names are skipped with a warning.

## What flamescope does not do

- It has no command-line program. It is used from Python code only.
- It does not read profiler output. The input must already be folded stacks.
- It does not ship the interactive zoom and search script or the extra
  stylesheet. The SVG carries the script settings (font size, search colour
  and so on). A `flamegraph.js` or `flamegraph.css` file placed next to
  `flamescope/svg.py` is embedded when it exists. Without those files, the
  image is static.