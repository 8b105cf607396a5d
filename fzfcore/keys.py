"""Key and event names, and parsing of comma-separated key chord lists."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum

ESCAPED_COLON = "\x00"
ESCAPED_COMMA = "\x01"
ESCAPED_PLUS = "\x02"

_ALT_COMMA = re.compile(r"(?i)(alt-),")


class OptionError(ValueError):
    """Raised when an option or one of its arguments is invalid."""


class EventType(IntEnum):
    """Kinds of terminal and finder events that can be bound to actions."""

    RUNE = 0
    CTRL_A = 1
    CTRL_B = 2
    CTRL_C = 3
    CTRL_D = 4
    CTRL_E = 5
    CTRL_F = 6
    CTRL_G = 7
    CTRL_H = 8
    CTRL_I = 9
    TAB = 9
    CTRL_J = 10
    CTRL_K = 11
    CTRL_L = 12
    CTRL_M = 13
    CTRL_N = 14
    CTRL_O = 15
    CTRL_P = 16
    CTRL_Q = 17
    CTRL_R = 18
    CTRL_S = 19
    CTRL_T = 20
    CTRL_U = 21
    CTRL_V = 22
    CTRL_W = 23
    CTRL_X = 24
    CTRL_Y = 25
    CTRL_Z = 26
    ESC = 27
    CTRL_SPACE = 28
    CTRL_DELETE = 29
    CTRL_BACK_SLASH = 30
    CTRL_RIGHT_BRACKET = 31
    CTRL_CARET = 32
    CTRL_SLASH = 33
    INVALID = 34
    RESIZE = 35
    MOUSE = 36
    DOUBLE_CLICK = 37
    LEFT_CLICK = 38
    RIGHT_CLICK = 39
    S_LEFT_CLICK = 40
    S_RIGHT_CLICK = 41
    SCROLL_UP = 42
    SCROLL_DOWN = 43
    S_SCROLL_UP = 44
    S_SCROLL_DOWN = 45
    PREVIEW_SCROLL_UP = 46
    PREVIEW_SCROLL_DOWN = 47
    B_TAB = 48
    B_SPACE = 49
    DEL = 50
    PG_UP = 51
    PG_DN = 52
    UP = 53
    DOWN = 54
    LEFT = 55
    RIGHT = 56
    HOME = 57
    END = 58
    INSERT = 59
    S_UP = 60
    S_DOWN = 61
    S_LEFT = 62
    S_RIGHT = 63
    S_DELETE = 64
    F1 = 65
    F2 = 66
    F3 = 67
    F4 = 68
    F5 = 69
    F6 = 70
    F7 = 71
    F8 = 72
    F9 = 73
    F10 = 74
    F11 = 75
    F12 = 76
    CHANGE = 77
    BACKWARD_EOF = 78
    START = 79
    LOAD = 80
    FOCUS = 81
    ONE = 82
    ZERO = 83
    RESULT = 84
    ALT_BS = 85
    ALT_UP = 86
    ALT_DOWN = 87
    ALT_LEFT = 88
    ALT_RIGHT = 89
    ALT_S_UP = 90
    ALT_S_DOWN = 91
    ALT_S_LEFT = 92
    ALT_S_RIGHT = 93
    ALT = 94
    CTRL_ALT = 95

    def as_event(self) -> "Event":
        """Return the event of this type that carries no character."""
        return Event(self)


@dataclass(frozen=True)
class Event:
    """An event: its type and, for character events, the character."""

    type: EventType
    char: str = ""


def key(char: str) -> Event:
    """Event for typing a plain character."""
    return Event(EventType.RUNE, char)


def alt_key(char: str) -> Event:
    """Event for a character typed with Alt held."""
    return Event(EventType.ALT, char)


def ctrl_alt_key(char: str) -> Event:
    """Event for a character typed with Ctrl and Alt held."""
    return Event(EventType.CTRL_ALT, char)


_NAMED = {
    "up": EventType.UP,
    "down": EventType.DOWN,
    "left": EventType.LEFT,
    "right": EventType.RIGHT,
    "enter": EventType.CTRL_M,
    "return": EventType.CTRL_M,
    "bspace": EventType.B_SPACE,
    "bs": EventType.B_SPACE,
    "ctrl-space": EventType.CTRL_SPACE,
    "ctrl-delete": EventType.CTRL_DELETE,
    "ctrl-^": EventType.CTRL_CARET,
    "ctrl-6": EventType.CTRL_CARET,
    "ctrl-/": EventType.CTRL_SLASH,
    "ctrl-_": EventType.CTRL_SLASH,
    "ctrl-\\": EventType.CTRL_BACK_SLASH,
    "ctrl-]": EventType.CTRL_RIGHT_BRACKET,
    "change": EventType.CHANGE,
    "backward-eof": EventType.BACKWARD_EOF,
    "start": EventType.START,
    "load": EventType.LOAD,
    "focus": EventType.FOCUS,
    "result": EventType.RESULT,
    "resize": EventType.RESIZE,
    "one": EventType.ONE,
    "zero": EventType.ZERO,
    "alt-bs": EventType.ALT_BS,
    "alt-bspace": EventType.ALT_BS,
    "alt-up": EventType.ALT_UP,
    "alt-down": EventType.ALT_DOWN,
    "alt-left": EventType.ALT_LEFT,
    "alt-right": EventType.ALT_RIGHT,
    "tab": EventType.TAB,
    "btab": EventType.B_TAB,
    "shift-tab": EventType.B_TAB,
    "esc": EventType.ESC,
    "del": EventType.DEL,
    "home": EventType.HOME,
    "end": EventType.END,
    "insert": EventType.INSERT,
    "pgup": EventType.PG_UP,
    "page-up": EventType.PG_UP,
    "pgdn": EventType.PG_DN,
    "page-down": EventType.PG_DN,
    "alt-shift-up": EventType.ALT_S_UP,
    "shift-alt-up": EventType.ALT_S_UP,
    "alt-shift-down": EventType.ALT_S_DOWN,
    "shift-alt-down": EventType.ALT_S_DOWN,
    "alt-shift-left": EventType.ALT_S_LEFT,
    "shift-alt-left": EventType.ALT_S_LEFT,
    "alt-shift-right": EventType.ALT_S_RIGHT,
    "shift-alt-right": EventType.ALT_S_RIGHT,
    "shift-up": EventType.S_UP,
    "shift-down": EventType.S_DOWN,
    "shift-left": EventType.S_LEFT,
    "shift-right": EventType.S_RIGHT,
    "shift-delete": EventType.S_DELETE,
    "left-click": EventType.LEFT_CLICK,
    "right-click": EventType.RIGHT_CLICK,
    "shift-left-click": EventType.S_LEFT_CLICK,
    "shift-right-click": EventType.S_RIGHT_CLICK,
    "double-click": EventType.DOUBLE_CLICK,
    "scroll-up": EventType.SCROLL_UP,
    "scroll-down": EventType.SCROLL_DOWN,
    "shift-scroll-up": EventType.S_SCROLL_UP,
    "shift-scroll-down": EventType.S_SCROLL_DOWN,
    "preview-scroll-up": EventType.PREVIEW_SCROLL_UP,
    "preview-scroll-down": EventType.PREVIEW_SCROLL_DOWN,
    "f10": EventType.F10,
    "f11": EventType.F11,
    "f12": EventType.F12,
}

_NAMED_EVENTS = {
    "space": key(" "),
    "alt-enter": ctrl_alt_key("m"),
    "alt-return": ctrl_alt_key("m"),
    "alt-space": alt_key(" "),
}

_UNESCAPE = {ESCAPED_COLON: ":", ESCAPED_COMMA: ",", ESCAPED_PLUS: "+"}


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8", "surrogatepass"))


def _is_lower_alpha(char: str) -> bool:
    return "a" <= char <= "z"


def _parse_single_key(name: str) -> Event:
    lname = name.lower()
    if lname in _NAMED:
        return _NAMED[lname].as_event()
    if lname in _NAMED_EVENTS:
        return _NAMED_EVENTS[lname]

    size = _byte_length(name)
    if size == 10 and lname.startswith("ctrl-alt-") and _is_lower_alpha(lname[9]):
        return ctrl_alt_key(name[9])
    if size == 6 and lname.startswith("ctrl-") and _is_lower_alpha(lname[5]):
        return EventType(EventType.CTRL_A + ord(lname[5]) - ord("a")).as_event()
    if len(name) == 5 and lname.startswith("alt-"):
        char = name[4]
        return alt_key(_UNESCAPE.get(char, char))
    if size == 2 and lname.startswith("f") and "1" <= name[1] <= "9":
        return EventType(EventType.F1 + ord(name[1]) - ord("1")).as_event()
    if len(name) == 1:
        return key(name)
    raise OptionError("unsupported key: " + name)


def parse_key_chords(text: str, message: str) -> dict[Event, str]:
    """Parse a comma-separated list of key names into events.

    Returns a mapping from each event to the name it was given as; a later
    name for the same event wins. Raises OptionError with ``message`` when
    the list is empty and for an unknown key name.
    """
    if not text:
        raise OptionError(message)

    text = _ALT_COMMA.sub(lambda m: m.group(1) + ESCAPED_COMMA, text)
    tokens = text.split(",")
    if (
        text == ","
        or text.startswith(",,")
        or text.endswith(",,")
        or ",,," in text
    ):
        tokens.append(",")

    chords: dict[Event, str] = {}
    for token in tokens:
        if not token:
            continue
        name = token.replace(ESCAPED_COMMA, ",")
        chords[_parse_single_key(name)] = name
    return chords