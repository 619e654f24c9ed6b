from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    package_root: Path
    data_dir: Path
    schema_dir: Path
    userdata_dir: Path

    @property
    def stats_path(self) -> Path:
        return self.userdata_dir / "stats.json"

    @property
    def legacy_stats_path(self) -> Path:
        return self.userdata_dir / "stats_v1.json"

    @property
    def challenge_path(self) -> Path:
        return self.userdata_dir / "daily_challenge.json"

    @property
    def inventory_path(self) -> Path:
        return self.userdata_dir / "inventory.json"

    @property
    def telemetry_path(self) -> Path:
        return self.userdata_dir / "telemetry.jsonl"


def get_paths(userdata_dir: Path | None = None) -> Paths:
    # src/jackattack/paths.py -> parent: jackattack
    package_root = Path(__file__).resolve().parent
    data_dir = package_root / "data"
    schema_dir = data_dir / "schemas"
    if userdata_dir is None:
        env = os.environ.get("JACKATTACK_HOME")
        userdata_dir = Path(env) if env else Path.home() / ".jackattack"
    return Paths(
        package_root=package_root,
        data_dir=data_dir,
        schema_dir=schema_dir,
        userdata_dir=userdata_dir,
    )
