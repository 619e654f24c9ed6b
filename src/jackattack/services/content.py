from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping

from jsonschema import Draft202012Validator

ConditionType = Literal[
    "win",
    "win_without_attacks",
    "win_fast",
    "win_with_cards_left",
    "use_power_cards",
    "perfect_game",
]
Rarity = Literal["common", "rare", "epic", "legendary"]


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _optional_str(obj: Mapping[str, object], key: str) -> str | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


@dataclass(frozen=True)
class ChallengeCondition:
    type: ConditionType
    value: int | None = None


@dataclass(frozen=True)
class ChallengeReward:
    coins: int
    unlock_id: str | None = None


@dataclass(frozen=True)
class Challenge:
    id: str
    name: str
    description: str
    emoji: str
    condition: ChallengeCondition
    reward: ChallengeReward
    difficulty: str


@dataclass(frozen=True)
class ChallengeCatalog:
    challenges: tuple[Challenge, ...]

    def get(self, challenge_id: str) -> Challenge | None:
        for c in self.challenges:
            if c.id == challenge_id:
                return c
        return None


@dataclass(frozen=True)
class PowerUp:
    id: str
    name: str
    emoji: str
    description: str
    cost: int
    effect: str
    rarity: Rarity


@dataclass(frozen=True)
class PowerUpCatalog:
    powerups: dict[str, PowerUp]

    def get(self, powerup_id: str) -> PowerUp | None:
        return self.powerups.get(powerup_id)


@dataclass(frozen=True)
class Theme:
    id: str
    name: str
    emoji: str
    description: str
    card_back_color: str
    table_background: str
    unlock_condition: str | None = None
    is_default: bool = False


@dataclass(frozen=True)
class ThemeCatalog:
    themes: tuple[Theme, ...]
    default_unlocked: tuple[str, ...]

    def get(self, theme_id: str) -> Theme | None:
        for t in self.themes:
            if t.id == theme_id:
                return t
        return None

    @property
    def default(self) -> Theme:
        for t in self.themes:
            if t.is_default:
                return t
        return self.themes[0]


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _load_validated(self, name: str) -> dict[str, object]:
        path = self._data_dir / f"{name}.json"
        raw = _load_json(path)
        schema = _load_json(self._schema_dir / f"{name}.schema.json")
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError(f"{name}.json must be an object")
        return raw

    def load_challenges(self) -> ChallengeCatalog:
        raw = self._load_validated("challenges")
        items = raw.get("challenges")
        if not isinstance(items, list):
            raise ContentError("challenges.json.challenges must be a list")

        out: list[Challenge] = []
        seen: set[str] = set()
        for item in items:
            if not isinstance(item, dict):
                continue
            cond_raw = item.get("condition")
            reward_raw = item.get("reward")
            if not isinstance(cond_raw, dict) or not isinstance(reward_raw, dict):
                raise ContentError("challenge condition and reward must be objects")
            value = cond_raw.get("value")
            ch = Challenge(
                id=_require_str(item, "id"),
                name=_require_str(item, "name"),
                description=_require_str(item, "description"),
                emoji=_require_str(item, "emoji"),
                condition=ChallengeCondition(
                    type=_require_str(cond_raw, "type"),  # type: ignore[arg-type]
                    value=value if isinstance(value, int) else None,
                ),
                reward=ChallengeReward(
                    coins=_require_int(reward_raw, "coins"),
                    unlock_id=_optional_str(reward_raw, "unlock_id"),
                ),
                difficulty=_require_str(item, "difficulty"),
            )
            if ch.id in seen:
                raise ContentError(f"Duplicate challenge id: {ch.id}")
            seen.add(ch.id)
            out.append(ch)
        # Pool order matters: the daily pick indexes into it.
        return ChallengeCatalog(challenges=tuple(out))

    def load_powerups(self) -> PowerUpCatalog:
        raw = self._load_validated("powerups")
        items = raw.get("powerups")
        if not isinstance(items, list):
            raise ContentError("powerups.json.powerups must be a list")
        out: dict[str, PowerUp] = {}
        for item in items:
            if not isinstance(item, dict):
                continue
            pu = PowerUp(
                id=_require_str(item, "id"),
                name=_require_str(item, "name"),
                emoji=_require_str(item, "emoji"),
                description=_require_str(item, "description"),
                cost=_require_int(item, "cost"),
                effect=_require_str(item, "effect"),
                rarity=_require_str(item, "rarity"),  # type: ignore[arg-type]
            )
            out[pu.id] = pu
        return PowerUpCatalog(powerups=out)

    def load_themes(self) -> ThemeCatalog:
        raw = self._load_validated("themes")
        items = raw.get("themes")
        if not isinstance(items, list):
            raise ContentError("themes.json.themes must be a list")
        themes: list[Theme] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            themes.append(
                Theme(
                    id=_require_str(item, "id"),
                    name=_require_str(item, "name"),
                    emoji=_require_str(item, "emoji"),
                    description=_require_str(item, "description"),
                    card_back_color=_require_str(item, "card_back_color"),
                    table_background=_require_str(item, "table_background"),
                    unlock_condition=_optional_str(item, "unlock_condition"),
                    is_default=bool(item.get("is_default", False)),
                )
            )
        defaults_raw = raw.get("default_unlocked", [])
        defaults = tuple(x for x in defaults_raw if isinstance(x, str)) if isinstance(defaults_raw, list) else ()
        known = {t.id for t in themes}
        for tid in defaults:
            if tid not in known:
                raise ContentError(f"default_unlocked references unknown theme: {tid}")
        return ThemeCatalog(themes=tuple(themes), default_unlocked=defaults)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_challenges()
        _ = self.load_powerups()
        _ = self.load_themes()
