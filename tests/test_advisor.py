from types import SimpleNamespace

from depths.advisor import InventoryAdvisor
from depths.equipment import Equipment
from depths.inventory import Inventory
from depths.items import Item
from depths.stats import Stats


def gear(item_id, slot='weapon', rarity='common', level=1, stats=None, **kw):
    return Item(id=item_id, name=item_id.title(), rarity=rarity, level=level, slot=slot,
                stats=stats or Stats(atk=10), **kw)


def make_advisor(*items, level=5):
    inventory = Inventory()
    inventory.add_items(items)
    return InventoryAdvisor(inventory, Equipment(SimpleNamespace(level=level)))


def test_higher_power_wins():
    advisor = make_advisor(gear('weak'), gear('strong', stats=Stats(atk=20)))
    assert advisor.find_best_for_slot('weapon').id == 'strong'


def test_ties_broken_by_rarity_then_level():
    advisor = make_advisor(gear('plain', level=3), gear('rare', rarity='rare', level=1), gear('old', level=2))
    assert advisor.find_best_for_slot('weapon').id == 'rare'
    advisor = make_advisor(gear('a', level=2), gear('b', level=4))
    assert advisor.find_best_for_slot('weapon').id == 'b'


def test_items_above_level_are_ignored():
    advisor = make_advisor(gear('big', level=9, stats=Stats(atk=99)), gear('small'))
    assert advisor.find_best_for_slot('weapon').id == 'small'
    assert make_advisor(gear('big', level=9)).find_best_for_slot('weapon') is None


def test_role_weights_change_the_pick():
    tanky = gear('tanky', 'chest', stats=Stats(defense=20))
    sharp = gear('sharp', 'chest', stats=Stats(atk=15))
    advisor = make_advisor(tanky, sharp)
    assert advisor.find_best_for_slot('chest', role='tank').id == 'tanky'
    assert advisor.find_best_for_slot('chest', role='dps').id == 'sharp'


def test_auto_equip_is_idempotent():
    advisor = make_advisor(gear('sword', stats=Stats(atk=20)), gear('dagger'),
                           gear('cap', 'helmet', stats=Stats(hp=5)))
    first = advisor.auto_equip_best()
    assert first.swaps == 2
    assert advisor.equipment.get('weapon').id == 'sword'
    assert 'dagger' in advisor.inventory
    assert 'sword' not in advisor.inventory
    second = advisor.auto_equip_best()
    assert second.swaps == 0
    assert not second.success
    assert second.message == 'Already using best items'


def test_auto_equip_swaps_old_item_back():
    advisor = make_advisor(gear('dagger'))
    advisor.auto_equip_best()
    advisor.inventory.add_item(gear('sword', stats=Stats(atk=30)))
    result = advisor.auto_equip_best()
    assert [i.id for i in result.equipped] == ['sword']
    assert 'dagger' in advisor.inventory


def test_auto_equip_reports_level_skips():
    advisor = make_advisor(gear('big', level=9), level=5)
    result = advisor.auto_equip_best()
    assert result.swaps == 0
    assert [(s.item.id, s.reason) for s in result.skipped] == [('big', 'skipped: level too low')]


def test_auto_equip_fills_both_accessories():
    advisor = make_advisor(gear('ring1', 'accessory', stats=Stats(crit=2)),
                           gear('ring2', 'accessory', stats=Stats(crit=1)))
    advisor.auto_equip_best()
    assert advisor.equipment.get('accessory1').id == 'ring1'
    assert advisor.equipment.get('accessory2').id == 'ring2'
    assert len(advisor.inventory) == 0


def test_auto_sell_keeps_set_items_and_better_rarities():
    advisor = make_advisor(gear('junk'), gear('piece', set_id='warrior_set'),
                           gear('shiny', rarity='rare'))
    res = advisor.auto_sell_by_rarity('common')
    assert res.success
    assert [i.id for i in advisor.inventory.items] == ['piece', 'shiny']
    assert advisor.inventory.gold == 2  # common level 1: floor(10 * 1/5)


def test_auto_salvage_totals_materials():
    advisor = make_advisor(gear('a'), gear('b', rarity='uncommon'))
    res = advisor.auto_salvage_by_rarity()
    assert res.value.dust == 3
    assert not advisor.auto_salvage_by_rarity().success
