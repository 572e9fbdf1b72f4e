"""Shared configuration for the inventory test suite.

Values come from environment variables, then the workspace ``.env.defaults``
file, then the built-in defaults below. Live browser journeys only run when
``INVENTORY_BASE_URL`` is set explicitly in the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict
from urllib.parse import urljoin

from inventory_tests.env_defaults import get_setting

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_STORAGE_KEY = "qa_challenge_products"

ROLE_ELEVATED = "elevated"
ROLE_STANDARD = "standard"


@dataclass(frozen=True)
class ActorProfile:
    """Credentials of one application actor.

    Both roles see identical business behaviour; only ``display_name`` (shown
    in the navbar) differs.
    """

    role: str
    email: str
    password: str
    display_name: str


class InventoryTestConfig:
    """Configuration for the oracle engine and the live journeys."""

    def __init__(self) -> None:
        self.base_url: str = get_setting("INVENTORY_BASE_URL", DEFAULT_BASE_URL)
        self.live_app_configured: bool = bool(os.getenv("INVENTORY_BASE_URL"))

        headless_str = get_setting("PLAYWRIGHT_HEADLESS", "true")
        self.playwright_headless: bool = headless_str.lower() in {"true", "1"}

        self.playwright_timeout_ms: int = int(get_setting("PLAYWRIGHT_TIMEOUT_MS", "30000"))
        self.scenario_timeout_multiplier: int = int(
            get_setting("INVENTORY_SCENARIO_TIMEOUT_MULTIPLIER", "4")
        )
        self.storage_key: str = get_setting("INVENTORY_STORAGE_KEY", DEFAULT_STORAGE_KEY)

        elevated = ActorProfile(
            role=ROLE_ELEVATED,
            email=get_setting("INVENTORY_ELEVATED_EMAIL", "admin@test.com"),
            password=get_setting("INVENTORY_ELEVATED_PASSWORD", "Admin123!"),
            display_name=get_setting("INVENTORY_ELEVATED_NAME", "Admin User"),
        )
        standard = ActorProfile(
            role=ROLE_STANDARD,
            email=get_setting("INVENTORY_STANDARD_EMAIL", "user@test.com"),
            password=get_setting("INVENTORY_STANDARD_PASSWORD", "User123!"),
            display_name=get_setting("INVENTORY_STANDARD_NAME", "Regular User"),
        )
        self._actors: Dict[str, ActorProfile] = {a.role: a for a in (elevated, standard)}

        if self.live_app_configured:
            print(f"[CONFIG] Live journeys enabled against {self.base_url} (storage key={self.storage_key})")

    # ---- actors -----------------------------------------------------------------
    def actor(self, role: str) -> ActorProfile:
        """Return the actor for ``role`` ("elevated" or "standard")."""
        try:
            return self._actors[role]
        except KeyError:
            raise ValueError(
                f"Unknown actor role: {role!r}. Expected one of {sorted(self._actors)}"
            ) from None

    # ---- timing -----------------------------------------------------------------
    @property
    def scenario_timeout(self) -> float:
        """Seconds a whole journey may take (several times the step timeout)."""
        return self.playwright_timeout_ms / 1000 * self.scenario_timeout_multiplier

    # ---- utility helpers --------------------------------------------------------
    def url(self, path: str) -> str:
        """Return an absolute URL for the provided path."""
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))


# Singleton instance - initialized on first import
settings = InventoryTestConfig()
