import copy
import json
from pathlib import Path

from rpgloot.core.rng import RNG
from rpgloot.data.repositories import EquipmentCategoriesRepository
from rpgloot.domain.defs import CategoryTag, CategoryUnion, ExplicitItems, LootEntryDef, NoSource
from rpgloot.services.equipment_resolver import EquipmentResolver, source_of


def _resolver() -> EquipmentResolver:
    return EquipmentResolver(categories_repo=EquipmentCategoriesRepository())


def test_nature_equipment_resolves_within_pool() -> None:
    resolver = _resolver()
    rng = RNG(17)
    entry = {"itemType": "nature_equipment", "dropChance": 0.5}
    results = [resolver.resolve_concrete_item_id(entry, rng) for _ in range(50)]

    assert set(results) <= {"oak_staff", "leather_armor", "nature_charm"}
    assert len(set(results)) >= 2


def test_shipped_pools_match_expected_members() -> None:
    resolver = _resolver()
    expected = {
        "beginner_weapon": {"iron_sword", "steel_dagger", "oak_staff", "hunting_bow"},
        "beginner_armor": {"leather_armor", "cloth_robe"},
        "knight_weapons": {"iron_sword", "steel_sword", "blessed_mace"},
        "wizard_weapons": {"oak_staff", "crystal_staff"},
        "rogue_weapons": {"steel_dagger", "poisoned_blade"},
        "forest_equipment": {"oak_staff", "leather_armor", "ranger_cloak"},
        "metal_equipment": {"iron_sword", "steel_sword", "chain_mail", "plate_armor"},
    }
    for tag, members in expected.items():
        assert set(resolver.pool_for(tag)) == members


def test_explicit_items_win_over_tags() -> None:
    resolver = _resolver()
    rng = RNG(1)
    entry = {
        "items": ["dragon_scale"],
        "equipmentTypes": ["knight_weapons"],
        "itemType": "wizard_weapons",
    }
    assert {resolver.resolve_concrete_item_id(entry, rng) for _ in range(20)} == {"dragon_scale"}


def test_equipment_types_win_over_item_type() -> None:
    resolver = _resolver()
    rng = RNG(2)
    entry = {"equipmentTypes": ["knight_weapons"], "itemType": "wizard_weapons"}
    results = {resolver.resolve_concrete_item_id(entry, rng) for _ in range(50)}
    assert results <= {"iron_sword", "steel_sword", "blessed_mace"}


def test_equipment_types_union_is_deduplicated() -> None:
    resolver = EquipmentResolver(
        categories={"a": ["sword", "shield"], "b": ["shield", "helm"]}
    )
    rng = RNG(4)
    entry = LootEntryDef(drop_chance=1.0, equipment_types=("a", "b"))
    results = {resolver.resolve_concrete_item_id(entry, rng) for _ in range(100)}
    assert results == {"sword", "shield", "helm"}
    assert resolver._union_pools(("a", "b")) == ("sword", "shield", "helm")


def test_unresolvable_entries_return_none() -> None:
    resolver = _resolver()
    rng = RNG(5)
    for entry in (
        None,
        42,
        "nature_equipment",
        {},
        {"equipmentTypes": []},
        {"itemType": ""},
        {"itemType": "no_such_tag"},
        {"equipmentTypes": ["no_such_tag"]},
        {"itemType": "retired_relics"},
        LootEntryDef(drop_chance=0.5),
    ):
        assert resolver.resolve_concrete_item_id(entry, rng) is None


def test_snake_case_records_are_accepted() -> None:
    resolver = _resolver()
    rng = RNG(6)
    result = resolver.resolve_concrete_item_id({"equipment_types": ["wizard_weapons"]}, rng)
    assert result in {"oak_staff", "crystal_staff"}


def test_source_of_reports_priority() -> None:
    assert source_of({"items": ["a"], "itemType": "b"}) == ExplicitItems(("a",))
    assert source_of({"equipmentTypes": ["x"], "itemType": "b"}) == CategoryUnion(("x",))
    assert source_of({"itemType": "b"}) == CategoryTag("b")
    assert source_of({"items": [], "equipmentTypes": []}) == NoSource()
    assert source_of(object()) == NoSource()


def test_resolution_does_not_mutate_tables(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    categories = {"nature_equipment": ["oak_staff", "leather_armor", "nature_charm"]}
    _write_json(definitions_dir / "equipment_categories.json", categories)
    resolver = EquipmentResolver(
        categories_repo=EquipmentCategoriesRepository(base_path=definitions_dir)
    )
    entry = {"itemType": "nature_equipment", "dropChance": 0.3}
    entry_before = copy.deepcopy(entry)
    pool_before = resolver.pool_for("nature_equipment")
    rng = RNG(9)

    for _ in range(1000):
        resolver.resolve_concrete_item_id(entry, rng)

    assert entry == entry_before
    assert resolver.pool_for("nature_equipment") == pool_before
    assert dict(resolver.categories) == {
        "nature_equipment": ("oak_staff", "leather_armor", "nature_charm")
    }


def _write_json(path: Path, data: dict) -> None:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _make_definitions_dir(tmp_path: Path) -> Path:
    definitions_dir = tmp_path / "definitions"
    definitions_dir.mkdir()
    return definitions_dir
