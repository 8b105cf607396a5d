import pytest

from fzfcore.actions import (
    Action,
    ActionType,
    default_keymap,
    is_execute_action,
    mask_action_contents,
    parse_action_list,
    parse_keymap,
    parse_single_action_list,
    to_actions,
)
from fzfcore.keys import EventType, OptionError, alt_key, key

A = ActionType


def _types(actions):
    return [a.type for a in actions]


def test_bind():
    keymap = default_keymap()
    assert _types(keymap[EventType.CTRL_A.as_event()]) == [A.BEGINNING_OF_LINE]

    parse_keymap(
        keymap,
        "ctrl-a:kill-line,ctrl-b:toggle-sort+up+down,c:page-up,alt-z:page-down,"
        "f1:execute(ls {+})+abort+execute(echo \n{+})+select-all,f2:execute/echo {}, {}, {}/,"
        "f3:execute[echo '({})'],f4:execute;less {};,"
        "alt-a:execute-Multi@echo (,),[,],/,:,;,%,{}@,alt-b:execute;echo (,),[,],/,:,@,%,{};,"
        "x:Execute(foo+bar),X:execute/bar+baz/"
        ",f1:+first,f1:+top"
        ",,:abort,::accept,+:execute:++\nfoobar,Y:execute(baz)+up",
    )

    def check(event, arg, *types):
        assert _types(keymap[event]) == list(types)
        if arg:
            assert keymap[event][0].arg == arg

    check(EventType.CTRL_A.as_event(), "", A.KILL_LINE)
    check(EventType.CTRL_B.as_event(), "", A.TOGGLE_SORT, A.UP, A.DOWN)
    check(key("c"), "", A.PAGE_UP)
    check(key(","), "", A.ABORT)
    check(key(":"), "", A.ACCEPT)
    check(alt_key("z"), "", A.PAGE_DOWN)
    check(
        EventType.F1.as_event(),
        "ls {+}",
        A.EXECUTE, A.ABORT, A.EXECUTE, A.SELECT_ALL, A.FIRST, A.FIRST,
    )
    check(EventType.F2.as_event(), "echo {}, {}, {}", A.EXECUTE)
    check(EventType.F3.as_event(), "echo '({})'", A.EXECUTE)
    check(EventType.F4.as_event(), "less {}", A.EXECUTE)
    check(key("x"), "foo+bar", A.EXECUTE)
    check(key("X"), "bar+baz", A.EXECUTE)
    check(alt_key("a"), "echo (,),[,],/,:,;,%,{}", A.EXECUTE_MULTI)
    check(alt_key("b"), "echo (,),[,],/,:,@,%,{}", A.EXECUTE)
    check(key("+"), "++\nfoobar,Y:execute(baz)+up", A.EXECUTE)

    for idx, char in enumerate("~!@#$%^&*|;/"):
        digit = str(idx % 10)
        parse_keymap(keymap, f"{digit}:execute{char}foobar{char}")
        check(key(digit), "foobar", A.EXECUTE)

    parse_keymap(keymap, "f1:abort")
    check(EventType.F1.as_event(), "", A.ABORT)


def test_parse_single_action_list():
    actions = parse_single_action_list("Execute@foo+bar,baz@+up+up+reload:down+down")
    assert len(actions) == 4
    assert actions[0] == Action(A.EXECUTE, "foo+bar,baz")
    assert actions[1].type == A.UP
    assert actions[2].type == A.UP
    assert actions[3] == Action(A.RELOAD, "down+down")


def test_parse_single_action_list_error():
    with pytest.raises(OptionError):
        parse_single_action_list("change-query(foobar)baz")


def test_mask_action_contents():
    original = ":execute((f)(o)(o)(b)(a)(r))+change-query@qu@ry@+up,x:reload:hello:world"
    expected = ":execute                    +change-query       +up,x:reload            "
    assert mask_action_contents(original) == expected


def test_mask_keeps_length():
    text = "a:execute(echo {})+up,b:reload:ls"
    assert len(mask_action_contents(text)) == len(text)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("execute(ls)", A.EXECUTE),
        ("execute-silent(ls)", A.EXECUTE_SILENT),
        ("reload-sync:ls", A.RELOAD_SYNC),
        ("change-preview-window(up)", A.CHANGE_PREVIEW_WINDOW),
        ("change-preview(cat)", A.CHANGE_PREVIEW),
        ("transform-query(x)", A.TRANSFORM_QUERY),
        ("pos(3)", A.POSITION),
        ("up", A.IGNORE),
        ("execute", A.IGNORE),
    ],
)
def test_is_execute_action(text, expected):
    assert is_execute_action(text) == expected


def test_to_actions():
    assert to_actions(A.TOGGLE, A.DOWN) == [Action(A.TOGGLE), Action(A.DOWN)]


def test_parse_action_list_prepends_previous():
    prev = [Action(A.ABORT)]
    actions = parse_action_list("+up", "+up", prev, False)
    assert _types(actions) == [A.ABORT, A.UP]


def test_unknown_action():
    with pytest.raises(OptionError, match="unknown action: foo"):
        parse_keymap({}, "a:foo")


def test_missing_bind_action():
    with pytest.raises(OptionError, match="bind action not specified"):
        parse_keymap({}, "ctrl-a")


def test_put_allowed_only_for_printable_keys():
    keymap = {}
    parse_keymap(keymap, "a:put")
    assert _types(keymap[key("a")]) == [A.CHAR]
    with pytest.raises(OptionError, match="unable to put"):
        parse_keymap({}, "ctrl-a:put")


def test_put_with_argument():
    keymap = {}
    parse_keymap(keymap, "ctrl-a:put(foo)")
    assert keymap[EventType.CTRL_A.as_event()] == [Action(A.PUT, "foo")]


def test_unbind_requires_target():
    with pytest.raises(OptionError, match="unbind target required"):
        parse_single_action_list("unbind()")


def test_unbind_with_target():
    actions = parse_single_action_list("unbind(ctrl-a,up)")
    assert actions == [Action(A.UNBIND, "ctrl-a,up")]


def test_change_preview_window_validated():
    assert parse_single_action_list("change-preview-window(up|down,50%)") == [
        Action(A.CHANGE_PREVIEW_WINDOW, "up|down,50%")
    ]
    with pytest.raises(OptionError, match="invalid preview window option"):
        parse_single_action_list("change-preview-window(sideways)")


def test_default_keymap_entries():
    keymap = default_keymap()
    assert _types(keymap[EventType.CTRL_N.as_event()]) == [A.DOWN]
    assert _types(keymap[EventType.CTRL_P.as_event()]) == [A.UP]
    assert _types(keymap[EventType.CTRL_M.as_event()]) == [A.ACCEPT]