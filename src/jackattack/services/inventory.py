from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from jackattack.services.content import PowerUpCatalog, Theme, ThemeCatalog

logger = logging.getLogger(__name__)


class InventoryError(RuntimeError):
    pass


@dataclass(frozen=True)
class PurchaseResult:
    ok: bool
    message: str
    coins: int


@dataclass
class Profile:
    """Cosmetics and power-ups owned by the local player."""

    powerups: dict[str, int] = field(default_factory=dict)
    unlocked_themes: list[str] = field(default_factory=list)
    selected_theme: str | None = None

    @staticmethod
    def default(themes: ThemeCatalog) -> "Profile":
        return Profile(unlocked_themes=list(themes.default_unlocked), selected_theme=themes.default.id)

    @staticmethod
    def from_dict(d: Mapping[str, object], themes: ThemeCatalog) -> "Profile":
        prof = Profile.default(themes)
        raw_pu = d.get("powerups", {})
        if isinstance(raw_pu, dict):
            prof.powerups = {k: v for k, v in raw_pu.items() if isinstance(k, str) and isinstance(v, int) and v > 0}
        raw_unlocked = d.get("unlocked_themes")
        if isinstance(raw_unlocked, list):
            for tid in raw_unlocked:
                if isinstance(tid, str) and tid not in prof.unlocked_themes:
                    prof.unlocked_themes.append(tid)
        sel = d.get("selected_theme")
        if isinstance(sel, str):
            prof.selected_theme = sel
        return prof

    def to_dict(self) -> dict[str, object]:
        return {
            "powerups": dict(self.powerups),
            "unlocked_themes": list(self.unlocked_themes),
            "selected_theme": self.selected_theme,
        }


class InventoryService:
    def __init__(self, profile_path: Path, powerups: PowerUpCatalog, themes: ThemeCatalog) -> None:
        self._path = profile_path
        self.powerups = powerups
        self.themes = themes
        self.profile = self._load_or_create()

    def _load_or_create(self) -> Profile:
        if not self._path.exists():
            prof = Profile.default(self.themes)
            self._write(prof)
            return prof
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load inventory from %s: %s", self._path, e)
            return Profile.default(self.themes)
        if not isinstance(raw, dict):
            return Profile.default(self.themes)
        return Profile.from_dict(raw, self.themes)

    def _write(self, prof: Profile) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(prof.to_dict(), indent=2), encoding="utf-8")

    def save(self) -> None:
        self._write(self.profile)

    # -------- Power-ups --------
    def quantity(self, powerup_id: str) -> int:
        return int(self.profile.powerups.get(powerup_id, 0))

    def purchase(self, powerup_id: str, coins: int) -> PurchaseResult:
        """Buy one power-up. `coins` is the current balance; the result carries the new one."""
        pu = self.powerups.get(powerup_id)
        if pu is None:
            return PurchaseResult(ok=False, message=f"Unknown power-up: {powerup_id}", coins=coins)
        if coins < pu.cost:
            return PurchaseResult(ok=False, message=f"Not enough coins for {pu.name}.", coins=coins)
        self.profile.powerups[powerup_id] = self.quantity(powerup_id) + 1
        self.save()
        return PurchaseResult(ok=True, message=f"Purchased {pu.name}.", coins=coins - pu.cost)

    def use(self, powerup_id: str) -> bool:
        owned = self.quantity(powerup_id)
        if owned <= 0:
            return False
        if owned == 1:
            del self.profile.powerups[powerup_id]
        else:
            self.profile.powerups[powerup_id] = owned - 1
        self.save()
        return True

    # -------- Themes --------
    def is_unlocked(self, theme_id: str) -> bool:
        return theme_id in self.profile.unlocked_themes

    def unlock(self, theme_id: str) -> bool:
        if self.themes.get(theme_id) is None:
            raise InventoryError(f"Unknown theme: {theme_id}")
        if self.is_unlocked(theme_id):
            return False
        self.profile.unlocked_themes.append(theme_id)
        self.save()
        return True

    def select_theme(self, theme_id: str) -> bool:
        if self.themes.get(theme_id) is None or not self.is_unlocked(theme_id):
            return False
        self.profile.selected_theme = theme_id
        self.save()
        return True

    def current_theme(self) -> Theme:
        sel = self.profile.selected_theme
        if sel is not None and self.is_unlocked(sel):
            theme = self.themes.get(sel)
            if theme is not None:
                return theme
        return self.themes.default

    def themes_with_status(self) -> list[tuple[Theme, bool]]:
        return [(t, self.is_unlocked(t.id)) for t in self.themes.themes]
