"""Finder actions and parsing of key binding expressions."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from enum import Enum, auto

from fzfcore.keys import (
    ESCAPED_COLON,
    ESCAPED_COMMA,
    ESCAPED_PLUS,
    Event,
    EventType,
    OptionError,
    alt_key,
    key,
    parse_key_chords,
)
from fzfcore.layout import PreviewOpts, parse_preview_window

_EXECUTE_RE = re.compile(
    r"[:+](become|execute(?:-multi|-silent)?|reload(?:-sync)?|preview|"
    r"(?:change|transform)-(?:header|query|prompt|border-label|preview-label)|"
    r"transform|change-preview-window|change-preview|(?:re|un)bind|pos|put)",
    re.IGNORECASE | re.DOTALL,
)
_ACTION_NAME_RE = re.compile(r"[a-z-]+", re.IGNORECASE)

_BRACKETS = {"(": ")", "{": "}", "[": "]", "<": ">"}
_SELF_CLOSING = set("~!@#$%^&*;/|")


class ActionType(Enum):
    """Kinds of actions that can be bound to events."""

    IGNORE = auto()
    CHAR = auto()
    RESPONSE = auto()
    BEGINNING_OF_LINE = auto()
    ABORT = auto()
    ACCEPT = auto()
    ACCEPT_NON_EMPTY = auto()
    ACCEPT_OR_PRINT_QUERY = auto()
    PRINT_QUERY = auto()
    REFRESH_PREVIEW = auto()
    REPLACE_QUERY = auto()
    BACKWARD_CHAR = auto()
    BACKWARD_DELETE_CHAR = auto()
    BACKWARD_DELETE_CHAR_EOF = auto()
    BACKWARD_WORD = auto()
    CLEAR_SCREEN = auto()
    DELETE_CHAR = auto()
    DELETE_CHAR_EOF = auto()
    DESELECT = auto()
    END_OF_LINE = auto()
    CANCEL = auto()
    CLEAR_QUERY = auto()
    CLEAR_SELECTION = auto()
    FORWARD_CHAR = auto()
    FORWARD_WORD = auto()
    JUMP = auto()
    JUMP_ACCEPT = auto()
    KILL_LINE = auto()
    KILL_WORD = auto()
    UNIX_LINE_DISCARD = auto()
    UNIX_WORD_RUBOUT = auto()
    YANK = auto()
    BACKWARD_KILL_WORD = auto()
    TOGGLE_IN = auto()
    TOGGLE_OUT = auto()
    TOGGLE_ALL = auto()
    TOGGLE_SEARCH = auto()
    TOGGLE_TRACK = auto()
    TOGGLE_HEADER = auto()
    SHOW_HEADER = auto()
    HIDE_HEADER = auto()
    TRACK = auto()
    SELECT = auto()
    SELECT_ALL = auto()
    DESELECT_ALL = auto()
    CLOSE = auto()
    TOGGLE = auto()
    DOWN = auto()
    UP = auto()
    FIRST = auto()
    LAST = auto()
    PAGE_UP = auto()
    PAGE_DOWN = auto()
    HALF_PAGE_UP = auto()
    HALF_PAGE_DOWN = auto()
    PREV_HISTORY = auto()
    NEXT_HISTORY = auto()
    PREV_SELECTED = auto()
    NEXT_SELECTED = auto()
    SHOW_PREVIEW = auto()
    HIDE_PREVIEW = auto()
    TOGGLE_PREVIEW = auto()
    TOGGLE_PREVIEW_WRAP = auto()
    TOGGLE_SORT = auto()
    OFFSET_UP = auto()
    OFFSET_DOWN = auto()
    PREVIEW_TOP = auto()
    PREVIEW_BOTTOM = auto()
    PREVIEW_UP = auto()
    PREVIEW_DOWN = auto()
    PREVIEW_PAGE_UP = auto()
    PREVIEW_PAGE_DOWN = auto()
    PREVIEW_HALF_PAGE_UP = auto()
    PREVIEW_HALF_PAGE_DOWN = auto()
    ENABLE_SEARCH = auto()
    DISABLE_SEARCH = auto()
    BECOME = auto()
    RELOAD = auto()
    RELOAD_SYNC = auto()
    UNBIND = auto()
    REBIND = auto()
    PREVIEW = auto()
    CHANGE_BORDER_LABEL = auto()
    CHANGE_HEADER = auto()
    CHANGE_PREVIEW_LABEL = auto()
    CHANGE_PREVIEW_WINDOW = auto()
    CHANGE_PREVIEW = auto()
    CHANGE_PROMPT = auto()
    CHANGE_QUERY = auto()
    POSITION = auto()
    EXECUTE = auto()
    EXECUTE_SILENT = auto()
    EXECUTE_MULTI = auto()
    PUT = auto()
    TRANSFORM = auto()
    TRANSFORM_BORDER_LABEL = auto()
    TRANSFORM_PREVIEW_LABEL = auto()
    TRANSFORM_HEADER = auto()
    TRANSFORM_PROMPT = auto()
    TRANSFORM_QUERY = auto()


@dataclass
class Action:
    """An action to perform, with its optional argument."""

    type: ActionType
    arg: str = ""


def to_actions(*args: ActionType) -> list[Action]:
    """Build argument-less actions of the given types."""
    return [Action(t) for t in args]


def default_keymap() -> dict[Event, list[Action]]:
    """The key bindings in effect before any user binding."""
    A = ActionType
    bindings: dict[Event, tuple[ActionType, ...]] = {
        EventType.CTRL_A.as_event(): (A.BEGINNING_OF_LINE,),
        EventType.CTRL_B.as_event(): (A.BACKWARD_CHAR,),
        EventType.CTRL_C.as_event(): (A.ABORT,),
        EventType.CTRL_G.as_event(): (A.ABORT,),
        EventType.CTRL_Q.as_event(): (A.ABORT,),
        EventType.ESC.as_event(): (A.ABORT,),
        EventType.CTRL_D.as_event(): (A.DELETE_CHAR_EOF,),
        EventType.CTRL_E.as_event(): (A.END_OF_LINE,),
        EventType.CTRL_F.as_event(): (A.FORWARD_CHAR,),
        EventType.CTRL_H.as_event(): (A.BACKWARD_DELETE_CHAR,),
        EventType.B_SPACE.as_event(): (A.BACKWARD_DELETE_CHAR,),
        EventType.TAB.as_event(): (A.TOGGLE, A.DOWN),
        EventType.B_TAB.as_event(): (A.TOGGLE, A.UP),
        EventType.CTRL_J.as_event(): (A.DOWN,),
        EventType.CTRL_K.as_event(): (A.UP,),
        EventType.CTRL_L.as_event(): (A.CLEAR_SCREEN,),
        EventType.CTRL_M.as_event(): (A.ACCEPT,),
        EventType.CTRL_N.as_event(): (A.DOWN,),
        EventType.CTRL_P.as_event(): (A.UP,),
        EventType.CTRL_U.as_event(): (A.UNIX_LINE_DISCARD,),
        EventType.CTRL_W.as_event(): (A.UNIX_WORD_RUBOUT,),
        EventType.CTRL_Y.as_event(): (A.YANK,),
        EventType.ALT_BS.as_event(): (A.BACKWARD_KILL_WORD,),
        alt_key("b"): (A.BACKWARD_WORD,),
        alt_key("f"): (A.FORWARD_WORD,),
        alt_key("d"): (A.KILL_WORD,),
        EventType.UP.as_event(): (A.UP,),
        EventType.DOWN.as_event(): (A.DOWN,),
        EventType.LEFT.as_event(): (A.BACKWARD_CHAR,),
        EventType.RIGHT.as_event(): (A.FORWARD_CHAR,),
        EventType.HOME.as_event(): (A.BEGINNING_OF_LINE,),
        EventType.END.as_event(): (A.END_OF_LINE,),
        EventType.DEL.as_event(): (A.DELETE_CHAR,),
        EventType.PG_UP.as_event(): (A.PAGE_UP,),
        EventType.PG_DN.as_event(): (A.PAGE_DOWN,),
        EventType.S_UP.as_event(): (A.PREVIEW_UP,),
        EventType.S_DOWN.as_event(): (A.PREVIEW_DOWN,),
        EventType.LEFT_CLICK.as_event(): (A.IGNORE,),
        EventType.RIGHT_CLICK.as_event(): (A.TOGGLE,),
        EventType.S_LEFT_CLICK.as_event(): (A.TOGGLE,),
        EventType.S_RIGHT_CLICK.as_event(): (A.TOGGLE,),
        EventType.PREVIEW_SCROLL_UP.as_event(): (A.PREVIEW_UP,),
        EventType.PREVIEW_SCROLL_DOWN.as_event(): (A.PREVIEW_DOWN,),
    }
    return {event: to_actions(*types) for event, types in bindings.items()}


def mask_action_contents(action: str) -> str:
    """Blank out the arguments of argument-taking actions.

    The result has the same length as the input, so positions in it map
    back onto the original text. Separators that stand for key names are
    replaced with escape characters.
    """
    masked: list[str] = []
    while action:
        match = _EXECUTE_RE.search(action)
        if match is None:
            masked.append(action)
            break
        masked.append(action[: match.end()])
        action = action[match.end():]
        if not action:
            break
        opening = action[0]
        if opening == ":":
            masked.append(" " * len(action))
            break
        if opening in _BRACKETS:
            closing = _BRACKETS[opening]
        elif opening in _SELF_CLOSING:
            closing = opening
        else:
            continue
        cs, ce = re.escape(opening), re.escape(closing)
        match = re.match(rf"{cs}.*?({ce}[+,]|{ce}\Z)", action, re.DOTALL)
        if match is None:
            masked.append(action)
            break
        end = match.end()
        if action[end - 1] in "+,":
            end -= 1
        masked.append(" " * end)
        action = action[end:]
    result = "".join(masked)
    result = result.replace("::", ESCAPED_COLON + ":")
    result = result.replace(",:", ESCAPED_COMMA + ":")
    result = result.replace("+:", ESCAPED_PLUS + ":")
    return result


_EXECUTE_ACTIONS = {
    "become": ActionType.BECOME,
    "reload": ActionType.RELOAD,
    "reload-sync": ActionType.RELOAD_SYNC,
    "unbind": ActionType.UNBIND,
    "rebind": ActionType.REBIND,
    "preview": ActionType.PREVIEW,
    "change-border-label": ActionType.CHANGE_BORDER_LABEL,
    "change-header": ActionType.CHANGE_HEADER,
    "change-preview-label": ActionType.CHANGE_PREVIEW_LABEL,
    "change-preview-window": ActionType.CHANGE_PREVIEW_WINDOW,
    "change-preview": ActionType.CHANGE_PREVIEW,
    "change-prompt": ActionType.CHANGE_PROMPT,
    "change-query": ActionType.CHANGE_QUERY,
    "pos": ActionType.POSITION,
    "execute": ActionType.EXECUTE,
    "execute-silent": ActionType.EXECUTE_SILENT,
    "execute-multi": ActionType.EXECUTE_MULTI,
    "put": ActionType.PUT,
    "transform": ActionType.TRANSFORM,
    "transform-border-label": ActionType.TRANSFORM_BORDER_LABEL,
    "transform-preview-label": ActionType.TRANSFORM_PREVIEW_LABEL,
    "transform-header": ActionType.TRANSFORM_HEADER,
    "transform-prompt": ActionType.TRANSFORM_PROMPT,
    "transform-query": ActionType.TRANSFORM_QUERY,
}


def is_execute_action(text: str) -> ActionType:
    """Type of an argument-taking action, or IGNORE if ``text`` is not one."""
    if mask_action_contents(":" + text)[1:] == text:
        return ActionType.IGNORE
    match = _ACTION_NAME_RE.match(text)
    prefix = match.group() if match else ""
    return _EXECUTE_ACTIONS.get(prefix, ActionType.IGNORE)


_A = ActionType
_SIMPLE_ACTIONS: dict[str, tuple[ActionType, ...]] = {
    "ignore": (_A.IGNORE,),
    "beginning-of-line": (_A.BEGINNING_OF_LINE,),
    "abort": (_A.ABORT,),
    "accept": (_A.ACCEPT,),
    "accept-non-empty": (_A.ACCEPT_NON_EMPTY,),
    "accept-or-print-query": (_A.ACCEPT_OR_PRINT_QUERY,),
    "print-query": (_A.PRINT_QUERY,),
    "refresh-preview": (_A.REFRESH_PREVIEW,),
    "replace-query": (_A.REPLACE_QUERY,),
    "backward-char": (_A.BACKWARD_CHAR,),
    "backward-delete-char": (_A.BACKWARD_DELETE_CHAR,),
    "backward-delete-char/eof": (_A.BACKWARD_DELETE_CHAR_EOF,),
    "backward-word": (_A.BACKWARD_WORD,),
    "clear-screen": (_A.CLEAR_SCREEN,),
    "delete-char": (_A.DELETE_CHAR,),
    "delete-char/eof": (_A.DELETE_CHAR_EOF,),
    "deselect": (_A.DESELECT,),
    "end-of-line": (_A.END_OF_LINE,),
    "cancel": (_A.CANCEL,),
    "clear-query": (_A.CLEAR_QUERY,),
    "clear-selection": (_A.CLEAR_SELECTION,),
    "forward-char": (_A.FORWARD_CHAR,),
    "forward-word": (_A.FORWARD_WORD,),
    "jump": (_A.JUMP,),
    "jump-accept": (_A.JUMP_ACCEPT,),
    "kill-line": (_A.KILL_LINE,),
    "kill-word": (_A.KILL_WORD,),
    "unix-line-discard": (_A.UNIX_LINE_DISCARD,),
    "line-discard": (_A.UNIX_LINE_DISCARD,),
    "unix-word-rubout": (_A.UNIX_WORD_RUBOUT,),
    "word-rubout": (_A.UNIX_WORD_RUBOUT,),
    "yank": (_A.YANK,),
    "backward-kill-word": (_A.BACKWARD_KILL_WORD,),
    "toggle-down": (_A.TOGGLE, _A.DOWN),
    "toggle-up": (_A.TOGGLE, _A.UP),
    "toggle-in": (_A.TOGGLE_IN,),
    "toggle-out": (_A.TOGGLE_OUT,),
    "toggle-all": (_A.TOGGLE_ALL,),
    "toggle-search": (_A.TOGGLE_SEARCH,),
    "toggle-track": (_A.TOGGLE_TRACK,),
    "toggle-header": (_A.TOGGLE_HEADER,),
    "show-header": (_A.SHOW_HEADER,),
    "hide-header": (_A.HIDE_HEADER,),
    "track": (_A.TRACK,),
    "select": (_A.SELECT,),
    "select-all": (_A.SELECT_ALL,),
    "deselect-all": (_A.DESELECT_ALL,),
    "close": (_A.CLOSE,),
    "toggle": (_A.TOGGLE,),
    "down": (_A.DOWN,),
    "up": (_A.UP,),
    "first": (_A.FIRST,),
    "top": (_A.FIRST,),
    "last": (_A.LAST,),
    "page-up": (_A.PAGE_UP,),
    "page-down": (_A.PAGE_DOWN,),
    "half-page-up": (_A.HALF_PAGE_UP,),
    "half-page-down": (_A.HALF_PAGE_DOWN,),
    "prev-history": (_A.PREV_HISTORY,),
    "previous-history": (_A.PREV_HISTORY,),
    "next-history": (_A.NEXT_HISTORY,),
    "prev-selected": (_A.PREV_SELECTED,),
    "next-selected": (_A.NEXT_SELECTED,),
    "show-preview": (_A.SHOW_PREVIEW,),
    "hide-preview": (_A.HIDE_PREVIEW,),
    "toggle-preview": (_A.TOGGLE_PREVIEW,),
    "toggle-preview-wrap": (_A.TOGGLE_PREVIEW_WRAP,),
    "toggle-sort": (_A.TOGGLE_SORT,),
    "offset-up": (_A.OFFSET_UP,),
    "offset-down": (_A.OFFSET_DOWN,),
    "preview-top": (_A.PREVIEW_TOP,),
    "preview-bottom": (_A.PREVIEW_BOTTOM,),
    "preview-up": (_A.PREVIEW_UP,),
    "preview-down": (_A.PREVIEW_DOWN,),
    "preview-page-up": (_A.PREVIEW_PAGE_UP,),
    "preview-page-down": (_A.PREVIEW_PAGE_DOWN,),
    "preview-half-page-up": (_A.PREVIEW_HALF_PAGE_UP,),
    "preview-half-page-down": (_A.PREVIEW_HALF_PAGE_DOWN,),
    "enable-search": (_A.ENABLE_SEARCH,),
    "disable-search": (_A.DISABLE_SEARCH,),
}


def _validate(action_type: ActionType, arg: str, name: str) -> None:
    if action_type is ActionType.BECOME and sys.platform == "win32":
        raise OptionError("become action is not supported on Windows")
    if action_type in (ActionType.UNBIND, ActionType.REBIND):
        parse_key_chords(arg, name + " target required")
    elif action_type is ActionType.CHANGE_PREVIEW_WINDOW:
        opts = PreviewOpts()
        for expr in arg.split("|"):
            parse_preview_window(opts, expr)


def parse_action_list(
    masked: str,
    original: str,
    prev_actions: list[Action],
    put_allowed: bool,
) -> list[Action]:
    """Parse a ``+``-separated list of actions.

    ``masked`` is ``original`` after masking of action arguments. An empty
    first element appends the following actions to ``prev_actions``.
    """
    segments: list[str] = []
    pos = 0
    for part in masked.split("+"):
        segments.append(original[pos: pos + len(part)])
        pos += len(part) + 1

    actions: list[Action] = []
    prev_spec = ""
    last = len(segments) - 1
    for index, segment in enumerate(segments):
        spec = prev_spec + segment
        prev_spec = ""
        lower = spec.lower()
        if lower in _SIMPLE_ACTIONS:
            actions.extend(to_actions(*_SIMPLE_ACTIONS[lower]))
            continue
        if lower == "put":
            if not put_allowed:
                raise OptionError("unable to put non-printable character")
            actions.append(Action(ActionType.CHAR))
            continue

        action_type = is_execute_action(lower)
        if action_type is ActionType.IGNORE:
            if index == 0 and lower == "":
                actions = list(prev_actions) + actions
                continue
            raise OptionError("unknown action: " + spec)

        offset = len(_ACTION_NAME_RE.match(spec).group())
        if spec[offset] == ":":
            if index != last:
                prev_spec = spec + "+"
                continue
            arg = spec[offset + 1:]
        else:
            arg = spec[offset + 1: -1]
        actions.append(Action(action_type, arg))
        _validate(action_type, arg, spec[:offset])
    return actions


def parse_single_action_list(text: str) -> list[Action]:
    """Parse a list of actions that is not attached to a key."""
    masked = mask_action_contents(":" + text)[1:]
    return parse_action_list(masked, text, [], False)


_ESCAPED_KEYS = {
    ESCAPED_COLON: key(":"),
    ESCAPED_COMMA: key(","),
    ESCAPED_PLUS: key("+"),
}


def parse_keymap(keymap: dict[Event, list[Action]], text: str) -> None:
    """Add the bindings of a ``KEY:ACTIONS,...`` expression to ``keymap``."""
    masked = mask_action_contents(text)
    pos = 0
    for pair_str in masked.split(","):
        orig_pair = text[pos: pos + len(pair_str)]
        pos += len(pair_str) + 1

        pair = pair_str.split(":", 1)
        if len(pair) < 2:
            raise OptionError("bind action not specified: " + orig_pair)
        name, actions = pair
        if name in _ESCAPED_KEYS:
            event = _ESCAPED_KEYS[name]
        else:
            event = next(iter(parse_key_chords(name, "key name required")))
        put_allowed = event.type == EventType.RUNE and event.char.isprintable()
        keymap[event] = parse_action_list(
            actions,
            orig_pair[len(name) + 1:],
            keymap.get(event, []),
            put_allowed,
        )