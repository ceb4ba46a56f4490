"""Conversation thread reconstruction."""

from __future__ import annotations

from typing import Iterable

from ..models.message import Message


def build_thread(target: Message, messages: Iterable[Message]) -> list[Message]:
    """Return the ancestor chain of ``target``, root first, target last.

    Follows ``parent_id`` links through ``messages``. A parent id that cannot be
    resolved ends the walk and the partial chain is returned. The number of hops
    is capped at the collection size so malformed (cyclic) input still terminates.
    """
    by_id = {m.id: m for m in messages}
    chain = [target]
    current = target
    hops = 0
    while current.parent_id is not None and hops < len(by_id):
        parent = by_id.get(current.parent_id)
        if parent is None:
            break
        chain.append(parent)
        current = parent
        hops += 1
    chain.reverse()
    return chain
