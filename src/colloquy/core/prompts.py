"""System prompts for the router and for each agent persona."""

from __future__ import annotations

from ..models.agent import PERSONAS, Agent

FIRST_REPLY_BREVITY = (
    "Since you are the first to respond, provide a comprehensive but focused answer."
)
FOLLOW_UP_BREVITY = (
    "Since you are replying to an existing comment, keep your response brief and "
    "concise, like a short Reddit comment."
)

TOOL_USE_INSTRUCTIONS = """Web Search Capability:
You have access to web search and URL reading tools. If you need to verify information, get current data, or research a topic:
1. You can search the web using the format: [SEARCH: <your query>]
2. You can read specific URLs using the format: [READ: <url>]
3. For comprehensive research: [SEARCH_AND_READ: <query>]

When you use these tools, the results will be automatically fetched and included in your context. You can then reference the search results in your response. Use web search judiciously - only when you need to verify facts, get current information, or provide well-sourced answers."""

STYLE_CONSTRAINT = """Markdown Style Constraint:
- ONLY use plain text, **bold**, *italic*, __underline__, and `code blocks`.
- DO NOT use tables, headers (#), or blockquotes.
- Keep your response as close to plain text as possible."""


def resolve_persona(agent: Agent) -> str:
    """Effective persona text for ``agent``."""
    if agent.is_custom:
        return agent.system_prompt or ""
    persona = PERSONAS.get(agent.persona)
    if persona and persona["prompt"]:
        return persona["prompt"]
    return agent.role


def build_agent_prompt(agent: Agent, is_follow_up: bool = False) -> str:
    brevity = FOLLOW_UP_BREVITY if is_follow_up else FIRST_REPLY_BREVITY
    return (
        f'You are participating in a Reddit-like thread as "{agent.name}".\n'
        f"Your persona: {resolve_persona(agent)}\n\n"
        f"{brevity}\n\n"
        f"{TOOL_USE_INSTRUCTIONS}\n\n"
        f"{STYLE_CONSTRAINT}\n\n"
        f"Do not use placeholders."
    )


def build_router_prompt(user_post: str, agents: list[Agent]) -> str:
    """Ask the model to name the single agent best suited to reply first."""
    agent_list = "\n".join(f"- {a.name}: {a.role}" for a in agents)
    example = agents[0].name if agents else "TechGuru"
    return (
        "Given the following user post and a list of agents, select the most "
        "suitable agent to reply first.\n"
        f'User Post: "{user_post}"\n\n'
        f"Agents:\n{agent_list}\n\n"
        f'Respond ONLY with the name of the agent (e.g. "{example}"). '
        f"Do not include any other text."
    )
