"""
Navigation links between client views.
"""

from __future__ import annotations

from urllib.parse import urlencode


def dashboard_link(file_id: str, agent: str | None = None) -> str:
    params = [("file_id", file_id)]
    if agent:
        params.append(("agent", agent))
    return f"dashboard?{urlencode(params)}"
