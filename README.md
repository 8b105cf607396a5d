# fzfcore

Building blocks of an interactive fuzzy finder's configuration and control,
as a plain Python library with no runtime dependencies:

- `fzfcore.keys` – key and event names (`ctrl-a`, `alt-enter`, `f2`, `,` …)
  and parsing of comma-separated key lists.
- `fzfcore.layout` – sizes, heights, margins, borders, info styles, border
  labels and preview-window specifications.
- `fzfcore.actions` – finder actions, the default key map, and parsing of
  binding expressions such as `ctrl-r:reload(ls)+first`.
- `fzfcore.server` – listen-address parsing and a minimal HTTP endpoint that
  accepts action lists via `POST /`.

Invalid input raises `fzfcore.keys.OptionError` (a `ValueError`) carrying the
message a user would see.

## Requirements

Python 3.10 or later.

## Keys

```python
from fzfcore.keys import EventType, OptionError, alt_key, key, parse_key_chords

chords = parse_key_chords("ctrl-z,alt-z,f2,enter,space", "key names required")
assert chords[EventType.CTRL_Z.as_event()] == "ctrl-z"
assert chords[alt_key("z")] == "alt-z"
assert chords[key(" ")] == "space"

try:
    parse_key_chords("no-such-key", "key names required")
except OptionError as exc:
    print(exc)  # unsupported key: no-such-key
```

`parse_key_chords` returns a dict mapping each `Event` to the name it was
given as. A literal comma is written as an empty entry (`"a,,,b"`) or as
`alt-,`.

## Layout

```python
from fzfcore.layout import (
    LabelOpts, PreviewOpts, parse_height, parse_label_position,
    parse_margin, parse_preview_window,
)

parse_height("~40%")          # HeightSpec(size=40.0, percent=True, auto=True, inverse=False)
parse_margin("margin", "1,2") # (top, right, bottom, left) SizeSpec tuple

preview = PreviewOpts(command="cat {}")
parse_preview_window(preview, "left:15,hidden,wrap:+{1}-/2")

label = LabelOpts("title")
parse_label_position(label, "-3:bottom")
```

Also available: `parse_size`, `parse_layout`, `parse_info_style`,
`parse_border` and `default_preview_opts`, with the enums `WindowPosition`,
`Layout`, `InfoStyle` and `BorderShape`. `PreviewOpts` offers `visible()`,
`toggle()`, `above_or_below()`, `same_layout()` and `same_content_layout()`.

## Actions and bindings

```python
from fzfcore.actions import ActionType, default_keymap, parse_keymap, parse_single_action_list
from fzfcore.keys import EventType

keymap = default_keymap()
parse_keymap(keymap, "ctrl-a:kill-line,f1:execute(ls {+})+abort")
assert keymap[EventType.F1.as_event()][0].arg == "ls {+}"

actions = parse_single_action_list("reload(ls)+first")
assert [a.type for a in actions] == [ActionType.RELOAD, ActionType.FIRST]
```

Arguments may be enclosed in `(...)`, `[...]`, `{...}`, `<...>`, in a pair
of the same punctuation character (`execute@echo hi@`), or follow a colon
to the end of the expression (`reload:ls`). A binding that starts with `+`
(`f1:+first`) appends to the actions already bound to that key.
`mask_action_contents` and `is_execute_action` expose the lower-level steps.

## Control server

```python
import queue
from fzfcore.server import HttpServer, parse_get_params, parse_listen_address

address = parse_listen_address("6266")   # ListenAddress(host="localhost", port=6266)
params = parse_get_params("limit=10&offset=20")

actions, responses = queue.Queue(), queue.Queue()
server = HttpServer(actions, responses, api_key="placeholder")
port = server.start(parse_listen_address("0"))
# POST / with an action list as the body puts the parsed actions on `actions`.
# GET / puts a RESPONSE action on `actions` and replies with the next item
# from `responses` (503 after the timeout).
server.close()
```

When `api_key` is not given it is read from the `FZF_API_KEY` environment
variable; if set, clients must send it in the `X-API-Key` header. Listening
on a non-local address without an API key raises `ValueError`.

## What this package does not do

It does not parse a complete command line into an options object, match or
rank search input, read input from a stream or a directory tree, or draw a
terminal interface. It provides the key, binding, layout and server pieces
only; the consumer of the action queue decides what each action does.