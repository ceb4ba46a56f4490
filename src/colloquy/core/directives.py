"""Parsing and stripping of bracketed tool directives in model output.

Directives look like ``[SEARCH: query]``, ``[READ: url]`` or
``[SEARCH_AND_READ: query]``. The keyword is case-insensitive and the payload
is everything between the colon and the closing bracket, trimmed.
"""

from __future__ import annotations

import re

from ..models.tool import ToolCommand, ToolKind

DIRECTIVE_PATTERN = re.compile(
    r"\[\s*(SEARCH_AND_READ|SEARCH|READ)\s*:([^\]]*)\]",
    re.IGNORECASE,
)


def parse_directives(text: str) -> list[ToolCommand]:
    """Return every directive in ``text`` in order of appearance."""
    commands: list[ToolCommand] = []
    for match in DIRECTIVE_PATTERN.finditer(text or ""):
        query = match.group(2).strip()
        if not query:
            continue
        commands.append(ToolCommand(kind=ToolKind(match.group(1).upper()), query=query))
    return commands


def strip_directives(text: str) -> str:
    """Remove directive markers, dropping lines left holding only brackets."""
    lines = []
    for line in (text or "").splitlines():
        if not DIRECTIVE_PATTERN.search(line):
            lines.append(line)
            continue
        cleaned = DIRECTIVE_PATTERN.sub("", line)
        if cleaned.strip(" \t[]"):
            lines.append(cleaned.rstrip())
    return "\n".join(lines).strip()


def build_tool_results_prompt(results_block: str) -> str:
    return (
        "Tool results:\n\n"
        f"{results_block}\n\n"
        "Using the information above, write your final reply to the thread. "
        "Incorporate the results where they are relevant and do not include any "
        "[SEARCH: ...], [READ: ...] or [SEARCH_AND_READ: ...] markers in your answer."
    )
