from gemini_bridge.core.history_store import Turn
from gemini_bridge.core.prompt import assemble_prompt, render_turn


def test_render_turn():
    assert render_turn(Turn("ai", "hello")) == "ai: hello"


def test_first_message_has_no_history():
    assert assemble_prompt([], "hi") == "user: hi"


def test_history_then_new_message():
    turns = [Turn("user", "hi"), Turn("ai", "hello")]
    assert assemble_prompt(turns, "how are you") == "user: hi\nai: hello\nuser: how are you"


def test_multiline_messages_are_kept_verbatim():
    turns = [Turn("user", "line one\nline two")]
    assert assemble_prompt(turns, "ok") == "user: line one\nline two\nuser: ok"
