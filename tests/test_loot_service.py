import logging
import time
from types import MappingProxyType

import pytest

from rpgloot.core.rng import RNG
from rpgloot.domain.loot_models import LootPayload
from rpgloot.services import (
    LootService,
    LootSourceNotFoundError,
    UnknownExplorationTypeError,
    calculate_experience_reward,
)
from rpgloot.services import loot_service

BEGINNER_WEAPONS = {"iron_sword", "steel_dagger", "oak_staff", "hunting_bow"}


def _service(seed: int = 1) -> LootService:
    return LootService(rng=RNG(seed))


def _flat_gold_area(gold: int, **extra: object) -> dict:
    table = {"recommendedLevel": 3, "goldRange": [gold, gold], "drops": []}
    table.update(extra)
    return {"id": "flat_gold", "lootTable": table}


def test_guaranteed_drop_scenario() -> None:
    monster = {
        "lootTable": {
            "level": 1,
            "goldRange": [10, 20],
            "drops": [
                {
                    "equipmentTypes": ["beginner_weapon"],
                    "dropChance": 1.0,
                    "rarityWeights": {"common": 1.0},
                }
            ],
        }
    }
    service = _service()
    for seed in range(20):
        payload = service.generate_monster_loot(monster, 1, rng=RNG(seed))
        assert 10 <= payload.gold <= 20
        assert len(payload.items) == 1
        item = payload.items[0]
        assert item.rarity == "common"
        assert item.quantity == 1
        assert item.id in BEGINNER_WEAPONS
        assert payload.experience == 60


def test_beginner_weapon_drop_at_matching_level() -> None:
    monster = {
        "lootTable": {
            "level": 5,
            "goldRange": [10, 20],
            "drops": [
                {
                    "itemType": "beginner_weapon",
                    "dropChance": 1.0,
                    "rarityWeights": {"common": 1.0},
                    "quantityRange": [1, 1],
                }
            ],
        }
    }
    service = _service()
    for seed in range(20):
        payload = service.generate_monster_loot(monster, 5, "forest_path", rng=RNG(seed))
        assert 10 <= payload.gold <= 20
        assert len(payload.items) == 1
        assert payload.items[0].rarity == "common"
        assert payload.items[0].quantity == 1
        assert payload.items[0].id in BEGINNER_WEAPONS


def test_inline_table_repairs_ranges_and_skips_sourceless_entries() -> None:
    monster = {
        "lootTable": {
            "level": 5,
            "goldRange": [20, 10],
            "drops": [
                {
                    "itemType": "beginner_weapon",
                    "dropChance": 1.0,
                    "rarityWeights": {"common": 1.0},
                    "quantityRange": [3, 1],
                },
                {"dropChance": 1.0},
                {"items": [], "dropChance": 1.0},
                "not an entry",
                {"items": ["slime_gel"], "dropChance": 7.5, "rarityWeights": {"common": -1}},
            ],
        }
    }
    payload = _service().generate_monster_loot(monster, 5, rng=RNG(4))

    assert payload.gold == 20
    assert [(item.id in BEGINNER_WEAPONS, item.quantity) for item in payload.items] == [
        (True, 3),
        (False, 1),
    ]
    assert payload.items[1].id == "slime_gel"


def test_inline_table_accepts_tuples_and_read_only_mappings() -> None:
    entry = MappingProxyType(
        {
            "equipmentTypes": ("beginner_weapon",),
            "dropChance": 1.0,
            "rarityWeights": MappingProxyType({"common": 1.0}),
            "quantityRange": (2, 2),
        }
    )
    monster = MappingProxyType(
        {"lootTable": MappingProxyType({"level": 5, "goldRange": (10, 20), "drops": (entry,)})}
    )
    payload = _service().generate_monster_loot(monster, 5, rng=RNG(8))

    assert 10 <= payload.gold <= 20
    assert len(payload.items) == 1
    assert payload.items[0].id in BEGINNER_WEAPONS
    assert payload.items[0].quantity == 2


def test_monster_gold_uses_area_bonus() -> None:
    monster = {"level": 3, "goldRange": [10, 10], "drops": []}
    service = _service()

    assert service.generate_monster_loot(monster, 3).gold == 10
    assert service.generate_monster_loot(monster, 3, "forest_path").gold == 10
    assert service.generate_monster_loot(monster, 3, "abandoned_mine").gold == 15
    assert service.generate_monster_loot(monster, 3, "ancient_ruins").gold == 20
    bonus_area = {"recommendedLevel": 3, "areaBonus": {"goldMultiplier": 1.2}}
    assert service.generate_monster_loot(monster, 3, bonus_area).gold == 12


def test_unknown_monster_area_keeps_base_gold() -> None:
    monster = {"level": 3, "goldRange": [10, 10], "drops": []}
    service = _service()
    assert service.generate_monster_loot(monster, 3, "no_such_area").gold == 10
    with pytest.raises(LootSourceNotFoundError):
        service.generate_monster_loot(monster, 3, "no_such_area", strict=True)


def test_same_seed_gives_same_payload() -> None:
    first = _service(42).generate_monster_loot("fire_dragon", 20)
    second = _service(42).generate_monster_loot("fire_dragon", 20)
    assert first == second


def test_unknown_monster_gives_empty_payload() -> None:
    payload = _service().generate_monster_loot("no_such_monster", 5)
    assert payload == LootPayload()
    assert payload.is_empty


def test_unknown_area_gives_empty_payload() -> None:
    assert _service().generate_area_loot("no_such_area", 5).is_empty


def test_strict_mode_raises_for_unknown_sources() -> None:
    service = _service()
    with pytest.raises(LootSourceNotFoundError):
        service.generate_monster_loot("no_such_monster", 5, strict=True)
    with pytest.raises(LootSourceNotFoundError):
        service.generate_area_loot("no_such_area", 5, strict=True)
    with pytest.raises(LootSourceNotFoundError):
        service.generate_monster_loot({"lootTable": "missing"}, 1, strict=True)


def test_invalid_inline_table_is_ignored(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="rpgloot.services.loot_service"):
        payload = _service().generate_monster_loot({"lootTable": ["not", "a", "table"]}, 1)
    assert payload.is_empty
    assert "Ignoring invalid monster loot table" in caplog.text


def test_unknown_exploration_falls_back_to_standard() -> None:
    service = _service()
    area = _flat_gold_area(10)
    assert service.generate_area_loot(area, 3, "sprint").gold == 10
    assert service.exploration_modifier("sprint").id == "standard"
    with pytest.raises(UnknownExplorationTypeError):
        service.generate_area_loot(area, 3, "sprint", strict=True)


def test_exploration_gold_multipliers_are_ordered() -> None:
    service = _service()
    area = _flat_gold_area(10)
    gold = {
        exploration: service.generate_area_loot(area, 3, exploration).gold
        for exploration in ("quick", "standard", "thorough", "treasure_hunt")
    }
    assert gold == {"quick": 7, "standard": 10, "thorough": 13, "treasure_hunt": 25}


def test_exploration_average_gold_is_ordered_for_shipped_area() -> None:
    averages = []
    for exploration in ("quick", "standard", "thorough", "treasure_hunt"):
        service = _service(7)
        total = sum(
            service.generate_area_loot("forest_path", 3, exploration).gold for _ in range(300)
        )
        averages.append(total / 300)
    assert averages == sorted(averages)


def test_area_gold_multiplier_applies() -> None:
    area = _flat_gold_area(10, areaBonus={"goldMultiplier": 1.5})
    assert _service().generate_area_loot(area, 3).gold == 15


def test_exploration_types_filter_entries() -> None:
    area = {
        "recommendedLevel": 1,
        "goldRange": [1, 1],
        "drops": [
            {
                "items": ["healing_herb"],
                "dropChance": 1.0,
                "explorationTypes": ["resource_gathering"],
            }
        ],
    }
    service = _service()
    assert service.generate_area_loot(area, 1, "standard").items == []
    gathered = service.generate_area_loot(area, 1, "resource_gathering").items
    assert [item.id for item in gathered] == ["healing_herb"]


def test_unresolved_entries_are_dropped() -> None:
    monster = {
        "level": 1,
        "goldRange": [5, 5],
        "drops": [
            {"itemType": "no_such_tag", "dropChance": 1.0},
            {"itemType": "retired_relics", "dropChance": 1.0},
            {"items": ["slime_gel"], "dropChance": 1.0, "quantityRange": [2, 2]},
        ],
    }
    payload = _service().generate_monster_loot(monster, 1)
    assert [(item.id, item.quantity) for item in payload.items] == [("slime_gel", 2)]
    assert payload.gold == 5


def test_formula_gold_without_gold_range() -> None:
    monster = {"level": 4, "drops": []}
    service = _service(3)
    for _ in range(100):
        gold = service.generate_monster_loot(monster, 4).gold
        # 10 + 4 * 5 = 30, +/- 15%
        assert 25 <= gold <= 35


def test_overleveled_player_earns_more_formula_gold() -> None:
    monster = {"level": 2, "drops": []}
    low = sum(_service(5).generate_monster_loot(monster, 2).gold for _ in range(50))
    high = sum(_service(5).generate_monster_loot(monster, 12).gold for _ in range(50))
    assert high > low


def test_scarcity_floor_for_level_appropriate_content() -> None:
    service = _service(11)
    for table in service._monster_loot_repo.all():
        rewarded = sum(
            1
            for _ in range(60)
            if not service.generate_monster_loot(table.id, max(1, table.level)).is_empty
        )
        assert rewarded / 60 >= 0.3, table.id
    for table in service._area_loot_repo.all():
        rewarded = sum(
            1
            for _ in range(60)
            if not service.generate_area_loot(table.id, max(1, table.level)).is_empty
        )
        assert rewarded / 60 >= 0.3, table.id


def test_shipped_tables_yield_valid_items() -> None:
    service = _service(13)
    categories = service.resolver.categories
    known_ids = {item_id for pool in categories.values() for item_id in pool}
    for table in service._monster_loot_repo.all():
        for entry in table.drops:
            known_ids.update(entry.items)
    for _ in range(50):
        payload = service.generate_monster_loot("fire_dragon", 25)
        for item in payload.items:
            assert item.id in known_ids
            assert item.quantity >= 1


def test_experience_reward() -> None:
    assert calculate_experience_reward(5, 5) == 100
    assert calculate_experience_reward(5, 1) == 140
    assert calculate_experience_reward(5, 15) == 10
    assert calculate_experience_reward(5, 100) == 10


def test_area_loot_has_no_experience() -> None:
    assert _service().generate_area_loot("forest_path", 3).experience == 0


def test_payload_to_dict() -> None:
    monster = {"level": 1, "goldRange": [3, 3], "drops": [{"items": ["slime_gel"], "dropChance": 1.0}]}
    payload = _service().generate_monster_loot(monster, 1)
    data = payload.to_dict()
    assert data["gold"] == 3
    assert data["items"][0]["id"] == "slime_gel"
    assert set(data["items"][0]) == {"id", "rarity", "quantity"}


def test_slow_generation_is_logged(monkeypatch, caplog) -> None:
    monkeypatch.setattr(loot_service, "SLOW_GENERATION_MS", -1.0)
    with caplog.at_level(logging.WARNING, logger="rpgloot.services.loot_service"):
        _service().generate_monster_loot("slime", 1, "starting_village")
    assert "Loot generation took" in caplog.text


def test_generation_scales_with_entry_count() -> None:
    drops = [{"items": [f"item_{index}"], "dropChance": 0.5} for index in range(40)]
    monster = {"level": 5, "goldRange": [1, 10], "drops": drops}
    service = _service(21)
    started = time.perf_counter()
    for _ in range(200):
        service.generate_monster_loot(monster, 5)
    assert time.perf_counter() - started < 5.0
