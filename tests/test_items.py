import random

import pytest

from depths.core.ids import SequentialIds
from depths.items import Item, Rarity, EquipSlot, ItemType, MAX_ENCHANT_LEVEL
from depths.loot import ItemGenerator, LootTable, LootEntry, CombatLootGenerator
from depths.stats import Stats
from depths.core.combat_system.enemy import Enemy


class ScriptedRng:
    """Returns queued random() values; other draws are deterministic."""

    def __init__(self, *values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)

    def randint(self, a, b):
        return a

    def choice(self, seq):
        return seq[0]

    def shuffle(self, seq):
        pass


def make_sword(**kw):
    data = dict(id='sword', name='Sword', rarity=Rarity.RARE, level=10, slot=EquipSlot.WEAPON,
                stats=Stats(atk=20, crit=1.5))
    data.update(kw)
    return Item(**data)


def test_gold_value_and_score():
    sword = make_sword()
    assert sword.gold_value == 400  # 200 * 10/5
    assert sword.get_score() == 90  # 50 * 1.2 * 1.5 (weapon)
    assert sword.icon


def test_effective_stats_scale_with_enchant():
    sword = make_sword(enchant_level=5)
    eff = sword.get_effective_stats()
    assert eff.atk == 30
    assert eff.crit == 2.25
    assert sword.gold_value == 800
    assert sword.display_name == 'Sword +5'


def test_enchant_fails_on_high_roll_at_level_nine():
    sword = make_sword(enchant_level=9)
    res = sword.enchant(rng=ScriptedRng(0.35))
    assert not res.success
    assert sword.enchant_level == 9


def test_enchant_success_recomputes_value():
    sword = make_sword()
    res = sword.enchant(rng=ScriptedRng(0.1))
    assert res.success
    assert sword.enchant_level == 1
    assert sword.gold_value == sword.calculate_gold_value() == 480


def test_enchant_caps_at_max_level():
    sword = make_sword(enchant_level=9)
    assert sword.enchant(guaranteed_success=True).success
    assert sword.enchant_level == MAX_ENCHANT_LEVEL
    res = sword.enchant(guaranteed_success=True)
    assert not res.success
    assert res.message == "Maximum enchant level reached"
    assert sword.enchant_level == MAX_ENCHANT_LEVEL


def test_enchant_never_decreases():
    rng = random.Random(7)
    sword = make_sword()
    last = 0
    for _ in range(200):
        sword.enchant(rng=rng)
        assert last <= sword.enchant_level <= MAX_ENCHANT_LEVEL
        last = sword.enchant_level
    assert sword.enchant_level == MAX_ENCHANT_LEVEL


def test_enchant_cost_grows():
    sword = make_sword()
    assert sword.enchant_cost() == 100
    sword.enchant_level = 2
    assert sword.enchant_cost() == 225


def test_serialization_roundtrip_keeps_behavior():
    sword = make_sword(enchant_level=3, set_id='warrior_set', set_name="Warrior's Valor")
    data = sword.to_dict()
    assert data['enchantLevel'] == 3
    assert data['setId'] == 'warrior_set'
    copy = Item.from_dict(data)
    assert copy.get_score() == sword.get_score()
    assert copy.get_effective_stats() == sword.get_effective_stats()
    assert copy.gold_value == sword.gold_value


def test_from_dict_recomputes_missing_gold_value():
    data = make_sword().to_dict()
    del data['goldValue']
    assert Item.from_dict(data).gold_value == 400


def test_from_dict_rejects_unknown_rarity():
    data = make_sword().to_dict()
    data['rarity'] = 'shiny'
    with pytest.raises(ValueError):
        Item.from_dict(data)


def test_compare_with_reports_deltas():
    better = make_sword(id='b', stats=Stats(atk=30))
    worse = make_sword(id='w', stats=Stats(atk=20))
    diff = better.compare_with(worse)
    assert diff['ATK'] == 10
    assert diff['score'] == 0


def test_item_generator_uses_injected_ids():
    gen = ItemGenerator(ids=SequentialIds('item'), rng=random.Random(1))
    item = gen.generate(10, 'rare', 'weapon')
    assert item.id == 'item_1'
    assert item.slot == EquipSlot.WEAPON
    assert item.type == ItemType.EQUIPMENT
    assert item.stats.atk > 0
    assert gen.generate(10, 'rare').id == 'item_2'


def test_set_piece_is_stamped():
    gen = ItemGenerator(ids=SequentialIds('item'), rng=random.Random(2))
    piece = gen.generate_set_piece(5, 'epic', 'mage_set', 'Arcane Wisdom', 'helmet')
    assert piece.is_set_item()
    assert piece.name.startswith('Arcane Wisdom')


def test_loot_table_roll_follows_weights():
    table = LootTable('t', [LootEntry(Rarity.COMMON, 1), LootEntry(Rarity.EPIC, 1)])
    assert table.roll(ScriptedRng(0.1)) == Rarity.COMMON
    assert table.roll(ScriptedRng(0.9)) == Rarity.EPIC
    assert LootTable('empty').roll(ScriptedRng(0.5)) == Rarity.COMMON


def test_boss_always_drops_an_item():
    rng = random.Random(4)
    boss = Enemy('Dragon', 5, 'boss', rng=rng)
    loot = CombatLootGenerator(ItemGenerator(ids=SequentialIds('item'), rng=rng), rng=rng).generate_loot([boss])
    assert len(loot['items']) == 1
    assert 40 <= loot['gold'] <= 60
