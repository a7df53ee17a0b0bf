"""Command-line loot simulator for balancing loot tables."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Sequence

from rpgloot.config import (
    LootConfig,
    configure_logging,
    get_default_config_path,
    load_config,
    save_config,
)
from rpgloot.core.rng import RNG
from rpgloot.data.errors import DataError
from rpgloot.data.repositories import (
    DEFAULT_EXPLORATION_TYPE,
    AreaLootRepository,
    EquipmentCategoriesRepository,
    ExplorationModifiersRepository,
    MonsterLootRepository,
)
from rpgloot.domain.loot_models import LootPayload
from rpgloot.services import EquipmentResolver, LootService, LootServiceError

from .render import format_payload, format_summary


def build_loot_service(definitions_path: str | Path | None, rng: RNG) -> LootService:
    return LootService(
        monster_loot_repo=MonsterLootRepository(base_path=definitions_path),
        area_loot_repo=AreaLootRepository(base_path=definitions_path),
        exploration_repo=ExplorationModifiersRepository(base_path=definitions_path),
        resolver=EquipmentResolver(
            categories_repo=EquipmentCategoriesRepository(base_path=definitions_path)
        ),
        rng=rng,
    )


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="rpgloot", description="Simulate loot drops.")
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON config file")
    parser.add_argument("--definitions", type=str, default=None, help="Definitions directory")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible rolls")
    parser.add_argument("--count", type=int, default=1, help="Number of rolls to simulate")
    parser.add_argument("--strict", action="store_true", help="Fail on unknown ids")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Write the effective settings to the config file before running",
    )
    subparsers = parser.add_subparsers(dest="source", required=True)

    monster = subparsers.add_parser("monster", help="Roll loot for a defeated monster")
    monster.add_argument("monster_id")
    monster.add_argument("--level", type=int, required=True, help="Player level")
    monster.add_argument("--area", type=str, default=None, help="Area the fight happened in")

    area = subparsers.add_parser("area", help="Roll loot for exploring an area")
    area.add_argument("area_id")
    area.add_argument("--level", type=int, required=True, help="Player level")
    area.add_argument("--exploration", type=str, default=DEFAULT_EXPLORATION_TYPE)

    subparsers.add_parser("check", help="Validate definition files and their references")
    return parser.parse_args(argv)


def _merge_config(args: argparse.Namespace) -> LootConfig:
    config = load_config(args.config)
    if args.definitions is not None:
        config.definitions_path = args.definitions
    if args.seed is not None:
        config.seed = args.seed
    if args.strict:
        config.strict = True
    return config


def _run_check(definitions_path: str | Path | None) -> int:
    monsters = MonsterLootRepository(base_path=definitions_path)
    areas = AreaLootRepository(base_path=definitions_path)
    try:
        tags = set(EquipmentCategoriesRepository(base_path=definitions_path).ids())
        exploration_types = set(ExplorationModifiersRepository(base_path=definitions_path).ids())
        for repo in (monsters, areas):
            repo.check_references(tags, exploration_types)
    except DataError as exc:
        print(f"Error: {exc}")
        return 1
    print(
        f"Definitions OK: {len(monsters.ids())} monster tables, "
        f"{len(areas.ids())} area tables, {len(tags)} equipment tags."
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the simulator and return a process exit code."""
    args = _parse_args(argv)
    config = _merge_config(args)
    configure_logging(config)
    if args.save_config:
        config_path = args.config or get_default_config_path()
        save_config(config, config_path)
        print(f"Saved config to {config_path}")
    if args.source == "check":
        return _run_check(config.definitions_path)
    service = build_loot_service(config.definitions_path, RNG(config.seed))

    payloads: List[LootPayload] = []
    try:
        for _ in range(max(1, args.count)):
            if args.source == "monster":
                payload = service.generate_monster_loot(
                    args.monster_id, args.level, args.area, strict=config.strict
                )
            else:
                payload = service.generate_area_loot(
                    args.area_id, args.level, args.exploration, strict=config.strict
                )
            payloads.append(payload)
    except (DataError, LootServiceError) as exc:
        print(f"Error: {exc}")
        return 1

    lines = format_payload(payloads[0]) if len(payloads) == 1 else format_summary(payloads)
    for line in lines:
        print(line)
    return 0
