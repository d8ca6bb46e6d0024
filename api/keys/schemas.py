"""
API key request schema.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class KeyCheckRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Left untyped: a non-string key is a wrong key (401), not a bad request.
    apikey: Any = None
