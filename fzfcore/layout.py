"""Window layout settings: sizes, heights, margins, borders and the preview window."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from enum import Enum

from fzfcore.keys import OptionError

DEFAULT_INFO_SEP = " < "

_INT_RE = re.compile(r"[+-]?[0-9]+")
_LABEL_SPLIT_RE = re.compile(r"[,:]+")
_TOKEN_RE = re.compile(r"[:,]*(<([1-9][0-9]*)\(([^)<]+)\)|[^,:]+)")
_SIZE_RE = re.compile(r"[0-9]+%?")
_OFFSET_RE = re.compile(r"(\+\{-?[0-9]+\})?([+-][0-9]+)*(-?/[1-9][0-9]*)?")
_HEADER_RE = re.compile(r"~(0|[1-9][0-9]*)")


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise OptionError("not a valid integer: " + text)
    return int(text)


def _atof(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        raise OptionError("not a valid number: " + text)
    try:
        return float(text)
    except ValueError:
        raise OptionError("not a valid number: " + text) from None


@dataclass(frozen=True)
class SizeSpec:
    """A size given either in cells or as a percentage."""

    size: float = 0.0
    percent: bool = False


@dataclass(frozen=True)
class HeightSpec:
    """The requested finder height."""

    size: float = 0.0
    percent: bool = False
    auto: bool = False
    inverse: bool = False


class WindowPosition(Enum):
    """Where the preview window is placed."""

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3


class Layout(Enum):
    """Order of the prompt and the list."""

    DEFAULT = 0
    REVERSE = 1
    REVERSE_LIST = 2


class InfoStyle(Enum):
    """How the finder info line is shown."""

    DEFAULT = 0
    RIGHT = 1
    INLINE = 2
    INLINE_RIGHT = 3
    HIDDEN = 4

    def no_extra_line(self) -> bool:
        """Whether this style takes no line of its own."""
        return self in (InfoStyle.INLINE, InfoStyle.INLINE_RIGHT, InfoStyle.HIDDEN)


class BorderShape(Enum):
    """Style of a border."""

    NONE = 0
    ROUNDED = 1
    SHARP = 2
    BOLD = 3
    BLOCK = 4
    THINBLOCK = 5
    DOUBLE = 6
    HORIZONTAL = 7
    VERTICAL = 8
    TOP = 9
    BOTTOM = 10
    LEFT = 11
    RIGHT = 12


DEFAULT_BORDER_SHAPE = BorderShape.ROUNDED


@dataclass
class LabelOpts:
    """A border label and where it is drawn."""

    label: str = ""
    column: int = 0
    bottom: bool = False


@dataclass
class PreviewOpts:
    """Settings of the preview window."""

    command: str = ""
    position: WindowPosition = WindowPosition.RIGHT
    size: SizeSpec = SizeSpec(50, True)
    scroll: str = ""
    hidden: bool = False
    wrap: bool = False
    cycle: bool = False
    follow: bool = False
    border: BorderShape = DEFAULT_BORDER_SHAPE
    header_lines: int = 0
    threshold: int = 0
    alternative: PreviewOpts | None = None

    def visible(self) -> bool:
        """Whether the window, or its alternative, has a non-zero size."""
        return self.size.size > 0 or (
            self.alternative is not None and self.alternative.size.size > 0
        )

    def toggle(self) -> None:
        """Flip the hidden state."""
        self.hidden = not self.hidden

    def above_or_below(self) -> bool:
        """Whether the window is shown above or below the list."""
        return self.size.size > 0 and self.position in (
            WindowPosition.UP,
            WindowPosition.DOWN,
        )

    def same_layout(self, other: PreviewOpts) -> bool:
        """Whether both settings place the window identically."""
        if (
            self.size != other.size
            or self.position != other.position
            or self.border != other.border
            or self.hidden != other.hidden
            or self.threshold != other.threshold
        ):
            return False
        if self.alternative is None or other.alternative is None:
            return self.alternative is None and other.alternative is None
        return self.alternative.same_layout(other.alternative)

    def same_content_layout(self, other: PreviewOpts) -> bool:
        """Whether both settings lay out the content identically."""
        return self.wrap == other.wrap and self.header_lines == other.header_lines


def default_preview_opts(command: str) -> PreviewOpts:
    """Default preview settings for the given command."""
    return PreviewOpts(command=command)


def parse_size(text: str, max_percent: float, label: str) -> SizeSpec:
    """Parse a size in cells or a percentage up to ``max_percent``."""
    if text.endswith("%"):
        value = _atof(text[:-1])
        if value < 0:
            raise OptionError(label + " must be non-negative")
        if value > max_percent:
            raise OptionError(f"{label} too large (max: {int(max_percent)}%)")
        return SizeSpec(value, True)
    if "." in text:
        raise OptionError(label + " (without %) must be a non-negative integer")
    value = float(_atoi(text))
    if value < 0:
        raise OptionError(label + " must be non-negative")
    return SizeSpec(value, False)


def parse_height(text: str) -> HeightSpec:
    """Parse a height of the form ``[~][-]HEIGHT[%]``."""
    auto = inverse = False
    if text.startswith("~"):
        auto = True
        text = text[1:]
    if text.startswith("-"):
        if auto:
            raise OptionError(
                "negative(-) height is not compatible with adaptive(~) height"
            )
        inverse = True
        text = text[1:]
    size = parse_size(text, 100, "height")
    return HeightSpec(size.size, size.percent, auto, inverse)


def parse_margin(opt: str, margin: str) -> tuple[SizeSpec, SizeSpec, SizeSpec, SizeSpec]:
    """Parse a margin or padding: TRBL, TB,RL, T,RL,B or T,R,B,L."""
    parts = margin.split(",")

    def checked(text: str) -> SizeSpec:
        return parse_size(text, 49, opt)

    if len(parts) == 1:
        m = checked(parts[0])
        return (m, m, m, m)
    if len(parts) == 2:
        tb, rl = checked(parts[0]), checked(parts[1])
        return (tb, rl, tb, rl)
    if len(parts) == 3:
        t, rl, b = checked(parts[0]), checked(parts[1]), checked(parts[2])
        return (t, rl, b, rl)
    if len(parts) == 4:
        t, r, b, l = (checked(p) for p in parts)
        return (t, r, b, l)
    raise OptionError("invalid " + opt + ": " + margin)


_LAYOUTS = {
    "default": Layout.DEFAULT,
    "reverse": Layout.REVERSE,
    "reverse-list": Layout.REVERSE_LIST,
}


def parse_layout(text: str) -> Layout:
    """Parse a layout name."""
    try:
        return _LAYOUTS[text]
    except KeyError:
        raise OptionError(
            "invalid layout (expected: default / reverse / reverse-list)"
        ) from None


def parse_info_style(text: str) -> tuple[InfoStyle, str]:
    """Parse an info style; returns the style and its separator."""
    simple = {
        "default": (InfoStyle.DEFAULT, ""),
        "right": (InfoStyle.RIGHT, ""),
        "inline": (InfoStyle.INLINE, DEFAULT_INFO_SEP),
        "inline-right": (InfoStyle.INLINE_RIGHT, ""),
        "hidden": (InfoStyle.HIDDEN, ""),
    }
    if text in simple:
        return simple[text]
    prefix = "inline:"
    if text.startswith(prefix):
        return InfoStyle.INLINE, text[len(prefix):].replace("\n", " ")
    raise OptionError(
        "invalid info style (expected: default|right|hidden|inline[:SEPARATOR]|inline-right)"
    )


_BORDERS = {
    "rounded": BorderShape.ROUNDED,
    "sharp": BorderShape.SHARP,
    "bold": BorderShape.BOLD,
    "block": BorderShape.BLOCK,
    "thinblock": BorderShape.THINBLOCK,
    "double": BorderShape.DOUBLE,
    "horizontal": BorderShape.HORIZONTAL,
    "vertical": BorderShape.VERTICAL,
    "top": BorderShape.TOP,
    "bottom": BorderShape.BOTTOM,
    "left": BorderShape.LEFT,
    "right": BorderShape.RIGHT,
    "none": BorderShape.NONE,
}


def parse_border(text: str, optional: bool) -> BorderShape:
    """Parse a border style; an empty optional value gives the default."""
    if text in _BORDERS:
        return _BORDERS[text]
    if optional and text == "":
        return DEFAULT_BORDER_SHAPE
    raise OptionError(
        "invalid border style (expected: rounded|sharp|bold|block|thinblock|double|"
        "horizontal|vertical|top|bottom|left|right|none)"
    )


def parse_label_position(label: LabelOpts, arg: str) -> None:
    """Set the column and edge of ``label`` from a position expression."""
    label.column = 0
    label.bottom = False
    for token in _LABEL_SPLIT_RE.split(arg.lower()):
        if token == "center":
            label.column = 0
        elif token == "bottom":
            label.bottom = True
        elif token == "top":
            label.bottom = False
        else:
            label.column = _atoi(token)


_PREVIEW_FLAGS = {
    "hidden": ("hidden", True),
    "nohidden": ("hidden", False),
    "wrap": ("wrap", True),
    "nowrap": ("wrap", False),
    "cycle": ("cycle", True),
    "nocycle": ("cycle", False),
    "follow": ("follow", True),
    "nofollow": ("follow", False),
    "up": ("position", WindowPosition.UP),
    "top": ("position", WindowPosition.UP),
    "down": ("position", WindowPosition.DOWN),
    "bottom": ("position", WindowPosition.DOWN),
    "left": ("position", WindowPosition.LEFT),
    "right": ("position", WindowPosition.RIGHT),
    "rounded": ("border", BorderShape.ROUNDED),
    "border": ("border", BorderShape.ROUNDED),
    "border-rounded": ("border", BorderShape.ROUNDED),
    "sharp": ("border", BorderShape.SHARP),
    "border-sharp": ("border", BorderShape.SHARP),
    "border-bold": ("border", BorderShape.BOLD),
    "border-block": ("border", BorderShape.BLOCK),
    "border-thinblock": ("border", BorderShape.THINBLOCK),
    "border-double": ("border", BorderShape.DOUBLE),
    "noborder": ("border", BorderShape.NONE),
    "border-none": ("border", BorderShape.NONE),
    "border-horizontal": ("border", BorderShape.HORIZONTAL),
    "border-vertical": ("border", BorderShape.VERTICAL),
    "border-up": ("border", BorderShape.TOP),
    "border-top": ("border", BorderShape.TOP),
    "border-down": ("border", BorderShape.BOTTOM),
    "border-bottom": ("border", BorderShape.BOTTOM),
    "border-left": ("border", BorderShape.LEFT),
    "border-right": ("border", BorderShape.RIGHT),
}


def _reset_preview(opts: PreviewOpts) -> None:
    default = default_preview_opts(opts.command)
    for field in fields(default):
        setattr(opts, field.name, getattr(default, field.name))


def parse_preview_window(opts: PreviewOpts, text: str) -> None:
    """Update ``opts`` in place from a preview window expression."""
    alternative = ""
    for match in _TOKEN_RE.finditer(text):
        if match.group(2):
            opts.threshold = _atoi(match.group(2))
            alternative = match.group(3)
            continue
        token = match.group(1)
        if token == "default":
            _reset_preview(opts)
        elif token in _PREVIEW_FLAGS:
            name, value = _PREVIEW_FLAGS[token]
            setattr(opts, name, value)
        elif _HEADER_RE.fullmatch(token):
            opts.header_lines = _atoi(token[1:])
        elif _SIZE_RE.fullmatch(token):
            opts.size = parse_size(token, 99, "window size")
        elif _OFFSET_RE.fullmatch(token):
            opts.scroll = token
        else:
            raise OptionError("invalid preview window option: " + token)
    if alternative:
        alt = replace(opts, hidden=False, alternative=None)
        parse_preview_window(alt, alternative)
        opts.alternative = alt