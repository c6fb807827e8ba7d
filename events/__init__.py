"""Event package setup."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EventInfo:
    name: str
    destination: str
    plus: str | None = None
    category: str = "Stocks"
    example: str | None = None
