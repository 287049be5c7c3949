from typing import Iterable

from gemini_bridge.core.history_store import Turn


def render_turn(turn: Turn) -> str:
    return f"{turn.role}: {turn.message}"


def assemble_prompt(turns: Iterable[Turn], new_message: str) -> str:
    """
    Flatten the stored turns plus the incoming message into one prompt.

    user: hi
    ai: hello
    user: <new_message>
    """
    lines = [render_turn(t) for t in turns]
    lines.append(f"user: {new_message}")
    return "\n".join(lines)
