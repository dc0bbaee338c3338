from __future__ import annotations

import asyncio
import json
import threading
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol

from .engine.context import IndustryParameters

STORE_VERSION = 1


class ParameterOverrideSource(Protocol):
    """
    External profile store. Returns the raw override mapping for
    (user, industry) or None. Parsing/validation happens in the engine.
    """

    async def get_industry_parameter_overrides(
        self, user_id: str, industry: str
    ) -> Optional[Mapping[str, Any]]: ...


class JsonParameterStore:
    """
    File-backed per-user IndustryParameters overrides.

    {
      "version": 1,
      "users": {
        "<user_id>": {"<industry>": {"baseMargin": 0.35, ..., "complexity": {...}}}
      }
    }
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()

    # -----------------
    # read
    # -----------------

    def load(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        p = self.path
        if not p.exists():
            return {}
        data = json.loads(p.read_text(encoding="utf-8"))
        users = data.get("users") or {}
        if not isinstance(users, dict):
            raise ValueError(f"{p.name}: 'users' must be an object")
        return users

    def get(self, user_id: str, industry: str) -> Optional[Dict[str, Any]]:
        row = (self.load().get(str(user_id)) or {}).get(str(industry))
        return dict(row) if isinstance(row, dict) else row

    async def get_industry_parameter_overrides(
        self, user_id: str, industry: str
    ) -> Optional[Mapping[str, Any]]:
        return await asyncio.to_thread(self.get, user_id, industry)

    # -----------------
    # write
    # -----------------

    def save(self, users: Dict[str, Dict[str, Dict[str, Any]]]) -> None:
        p = self.path
        p.parent.mkdir(parents=True, exist_ok=True)
        payload: Dict[str, Any] = {
            "version": STORE_VERSION,
            "users": {u: dict(sorted(rows.items())) for u, rows in sorted(users.items())},
        }
        p.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def upsert(
        self, *, user_id: str, industry: str, params: Mapping[str, Any]
    ) -> tuple[Optional[Dict[str, Any]], IndustryParameters]:
        """
        Validates before persisting (InvalidParametersError on bad data).
        Returns (previous raw row or None, parsed parameters).
        """
        user_id = (user_id or "").strip()
        industry = (industry or "").strip()
        if not user_id:
            raise ValueError("user_id is required")
        if not industry:
            raise ValueError("industry is required")

        parsed = IndustryParameters.from_dict(industry, params)

        with self._lock:
            users = self.load()
            rows = dict(users.get(user_id) or {})
            existing = rows.get(industry)
            rows[industry] = parsed.to_dict()
            users[user_id] = rows
            self.save(users)
        return existing, parsed

    def delete(self, user_id: str, industry: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            users = self.load()
            rows = dict(users.get(user_id) or {})
            existing = rows.pop(industry, None)
            if rows:
                users[user_id] = rows
            else:
                users.pop(user_id, None)
            self.save(users)
        return existing
