"""Agent data models and the persona catalogue."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, model_validator

CUSTOM_PERSONA = "Custom (Manual Prompt)"

PERSONAS: dict[str, dict] = {
    "Technical Expert": {
        "role": "A technical expert who provides detailed, code-oriented answers.",
        "prompt": (
            "You are a technical expert. Provide detailed, code-oriented answers with "
            "examples, matching the tone of a Reddit comment."
        ),
    },
    "Critical Thinker": {
        "role": "Someone who always finds potential flaws and challenges assumptions.",
        "prompt": (
            "You are a critical thinker and Devil's Advocate. Find potential flaws in "
            "arguments and challenge assumptions with critical thinking, matching the "
            "tone of a Reddit comment."
        ),
    },
    "Information Summarizer": {
        "role": "A bot that summarizes the main points and suggests next steps.",
        "prompt": (
            "You are an information summarizer. Concisely summarize the main points "
            "discussed and suggest logical next steps, matching the tone of a Reddit comment."
        ),
    },
    "Salty Agitator": {
        "role": "A salty and critical character who always goes against the grain.",
        "prompt": (
            "You are a salty and highly critical Reddit user named SaltireSama. Your goal "
            "is to find fault with every other agent's opinion. Be pessimistic, sarcastic, "
            "and always provide a counter-argument that highlights why they are wrong or "
            "why their idea won't work. Keep the tone of an annoyed, long-time Redditor."
        ),
    },
    CUSTOM_PERSONA: {
        "role": "Custom personality defined by user.",
        "prompt": "",
    },
}


class Agent(BaseModel):
    id: str
    name: str
    role: str = ""
    color: str = "white"
    model: Optional[str] = None
    persona: str = "Technical Expert"
    system_prompt: Optional[str] = None

    @model_validator(mode="after")
    def _fill_role(self) -> "Agent":
        if not self.role and self.persona in PERSONAS:
            self.role = PERSONAS[self.persona]["role"]
        return self

    @property
    def is_custom(self) -> bool:
        return self.persona == CUSTOM_PERSONA


DEFAULT_AGENTS: list[Agent] = [
    Agent(id="agent_1", name="TechGuru", color="#ff4500", persona="Technical Expert"),
    Agent(id="agent_2", name="DevilAdvocate", color="#0079d3", persona="Critical Thinker"),
    Agent(id="agent_3", name="SummarizerBot", color="#46d160", persona="Information Summarizer"),
    Agent(id="agent_4", name="SaltireSama", color="#8b0000", persona="Salty Agitator"),
]
