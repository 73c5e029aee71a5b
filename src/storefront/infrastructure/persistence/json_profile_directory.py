"""JSON-file-backed customer profiles for local development."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from storefront.domain.exceptions import GatewayError
from storefront.domain.gateway.profile_directory import ProfileDirectory
from storefront.domain.model.profile import CustomerProfile, SavedAddress


class JsonProfileDirectory(ProfileDirectory):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    # --- ProfileDirectory interface -------------------------------------------

    async def get_profile(self, user_id: str) -> CustomerProfile | None:
        raw = self._load_raw().get(user_id)
        if raw is None:
            return None
        return CustomerProfile(
            first_name=raw.get("first_name", ""),
            last_name=raw.get("last_name", ""),
            phone=raw.get("phone", ""),
            addresses=tuple(SavedAddress(**address) for address in raw.get("addresses", [])),
        )

    def save_profile(self, user_id: str, profile: CustomerProfile) -> None:
        profiles = self._load_raw()
        profiles[user_id] = asdict(profile)
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_path.write_text(json.dumps(profiles, indent=2) + "\n", encoding="utf-8")

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict:
        if not self._file_path.exists():
            return {}
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise GatewayError(f"Profile store unavailable: {exc}") from exc
