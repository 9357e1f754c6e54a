from types import SimpleNamespace

from depths.core.combat_system import Hero, HeroClass
from depths.equipment import Equipment, active_tiers, set_bonus, get_set_info
from depths.items import Item, ItemType
from depths.stats import Stats


def gear(item_id, slot, level=1, stats=None, **kw):
    return Item(id=item_id, name=item_id.title(), rarity='rare', level=level, slot=slot,
                stats=stats or Stats(), **kw)


def test_set_tiers_are_cumulative():
    eq = Equipment(SimpleNamespace(level=10))
    for slot in ('helmet', 'chest', 'boots'):
        assert eq.equip(gear(slot, slot, set_id='warrior_set')).success
    assert eq.get_set_counts() == {'warrior_set': 3}
    total = eq.get_total_stats()
    assert total.hp == 150
    assert total.defense == 30
    assert total.atk == 10
    (active,) = eq.get_active_set_bonuses()
    assert [t.pieces for t in active.tiers] == [2, 3]


def test_set_helpers():
    assert set_bonus('warrior_set', 1) == Stats()
    assert len(active_tiers('warrior_set', 5)) == 4
    assert active_tiers('nope', 5) == []
    assert get_set_info('mage_set').name == 'Arcane Wisdom'
    assert get_set_info('warrior_set').tiers[-1].special == 'Battle Rage'


def test_total_stats_include_enchant():
    eq = Equipment()
    eq.equip(gear('sword', 'weapon', stats=Stats(atk=20), enchant_level=5))
    eq.equip(gear('helm', 'helmet', stats=Stats(hp=10)))
    assert eq.get_total_stats() == Stats(hp=10, atk=30)


def test_accessories_fill_both_slots_then_replace_first():
    eq = Equipment()
    res1 = eq.equip(gear('ring1', 'accessory'))
    res2 = eq.equip(gear('ring2', 'accessory'))
    res3 = eq.equip(gear('ring3', 'accessory'))
    assert res1.value == ('accessory1', None)
    assert res2.value[0] == 'accessory2'
    slot, previous = res3.value
    assert slot == 'accessory1'
    assert previous.id == 'ring1'
    assert eq.get('accessory2').id == 'ring2'


def test_explicit_slot_must_match():
    eq = Equipment()
    assert not eq.equip(gear('ring', 'accessory'), 'weapon').success
    assert not eq.equip(gear('ring', 'accessory'), 'pocket').success
    assert eq.equip(gear('ring', 'accessory'), 'accessory2').success
    assert eq.is_slot_empty('accessory1')


def test_level_gate():
    eq = Equipment(SimpleNamespace(level=4))
    res = eq.equip(gear('axe', 'weapon', level=5))
    assert not res.success
    assert 'requires level 5' in res.message
    assert eq.is_slot_empty('weapon')


def test_non_equipment_rejected():
    potion = gear('potion', 'accessory', type=ItemType.CONSUMABLE)
    res = Equipment().equip(potion)
    assert not res.success
    assert res.message == 'Invalid item or not equipment type'


def test_unequip():
    eq = Equipment()
    assert not eq.unequip('weapon').success
    eq.equip(gear('sword', 'weapon'))
    res = eq.unequip('weapon')
    assert res.value.id == 'sword'
    assert eq.equipped_items() == []


def test_hero_stats_follow_equipment():
    hero = Hero('Brom', HeroClass.WARRIOR)
    eq = Equipment(hero)
    eq.equip(gear('plate', 'chest', stats=Stats(hp=40, defense=12)))
    assert hero.max_hp == 190
    assert hero.defense == 42
    eq.unequip('chest')
    assert hero.max_hp == 150
    assert hero.current_hp == 150


def test_from_dict_skips_unknown_slot(caplog):
    eq = Equipment()
    eq.equip(gear('sword', 'weapon', stats=Stats(atk=5)))
    data = eq.to_dict()
    data['slots']['pocket'] = None
    with caplog.at_level('WARNING'):
        loaded = Equipment.from_dict(data)
    assert loaded.get('weapon').id == 'sword'
    assert 'pocket' in caplog.text
