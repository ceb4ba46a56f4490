"""API configuration model."""

from __future__ import annotations

from pydantic import BaseModel


class APIConfig(BaseModel):
    api_key: str = ""
    base_url: str = ""
    model: str = ""
