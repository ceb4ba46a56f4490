"""Render a message forest as nested comments, or export it as JSON."""

from __future__ import annotations

import json
from typing import Iterable, Optional

from rich.text import Text
from rich.tree import Tree

from ..models.agent import Agent
from ..models.message import Message, author_label


def _author_colors(agents: Iterable[Agent]) -> dict[str, str]:
    return {author_label(a.name): a.color for a in agents}


def _label(message: Message, colors: dict[str, str], index: Optional[int]) -> Text:
    label = Text()
    if index is not None:
        label.append(f"#{index} ", style="dim")
    label.append(message.author, style=f"bold {colors.get(message.author, 'white')}")
    label.append("\n")
    label.append(message.content or "(no content)")
    if message.attachment:
        size_kb = round(len(message.attachment) / 1024)
        label.append(f"\n[attachment: {size_kb} KB]", style="dim")
    return label


def render_thread(
    messages: list[Message],
    agents: Iterable[Agent] = (),
    title: str = "Thread",
    numbered: bool = False,
) -> Tree:
    """Build a rich Tree of ``messages``, children nested under their parent.

    Messages whose parent is missing are shown at the top level. With
    ``numbered`` each message is prefixed with its 1-based store position.
    """
    colors = _author_colors(agents)
    known = {m.id for m in messages}
    children: dict[Optional[str], list[tuple[int, Message]]] = {}
    for position, message in enumerate(messages, start=1):
        parent = message.parent_id if message.parent_id in known else None
        children.setdefault(parent, []).append((position, message))

    root = Tree(Text(title, style="bold"))
    stack = [(root, pair) for pair in reversed(children.get(None, []))]
    while stack:
        node, (position, message) = stack.pop()
        branch = node.add(_label(message, colors, position if numbered else None))
        for pair in reversed(children.get(message.id, [])):
            stack.append((branch, pair))
    return root


def export_thread_json(messages: list[Message]) -> str:
    return json.dumps([m.model_dump() for m in messages], indent=2, ensure_ascii=False)
