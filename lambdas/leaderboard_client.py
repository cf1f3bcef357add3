"""
Client for the leaderboard endpoint.

Reads fail soft: errors are logged, surfaced through ``notify`` and an empty
list comes back so a leaderboard view can still render. Writes raise so the
caller can decide what to do (e.g. offer a retry).
"""

from typing import Any, Callable, Dict, List, Optional
import os
import requests

DEFAULT_BASE = os.environ.get("LEADERBOARD_API_URL", "http://localhost:8888/.netlify/functions/leaderboard")
TIMEOUT = 5  # seconds

Notify = Callable[[str, str, str], None]


class LeaderboardError(Exception):
    pass


def _base(base_url: Optional[str]) -> str:
    return base_url or DEFAULT_BASE


def _print_toast(title: str, description: str, variant: str) -> None:
    print(f"[{variant.upper()}] {title}: {description}")


def _error_message(r: requests.Response, fallback: str) -> str:
    try:
        body = r.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("error"):
        return body["error"]
    return fallback


def get_leaderboard(
    difficulty: Optional[str] = None,
    limit: int = 10,
    base_url: Optional[str] = None,
    notify: Optional[Notify] = None,
) -> List[Dict[str, Any]]:
    """GET the top ``limit`` entries, optionally for a single difficulty."""
    params = {}
    if difficulty and difficulty != "all":
        params["difficulty"] = difficulty
    params["limit"] = str(limit)

    try:
        r = requests.get(_base(base_url), params=params, timeout=TIMEOUT)
        if not r.ok:
            raise LeaderboardError(_error_message(r, "Failed to fetch leaderboard"))
        return r.json()
    except (requests.RequestException, LeaderboardError, ValueError) as e:
        print(f"[ERROR] Leaderboard fetch error: {e}")
        (notify or _print_toast)("Error", "Failed to fetch leaderboard", "destructive")
        return []


def add_to_leaderboard(entry: Dict[str, Any], base_url: Optional[str] = None) -> Dict[str, Any]:
    """POST a new entry (without ``id``) and return the stored row."""
    r = requests.post(_base(base_url), json=entry, timeout=TIMEOUT)
    if not r.ok:
        raise LeaderboardError(_error_message(r, "Failed to add score to leaderboard"))
    return r.json()
