"""API server configuration dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ApiConfig:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8080
    api_token: str = ""
    max_content_chars: int = 200_000
