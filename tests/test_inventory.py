import pytest

from depths.inventory import Inventory, ItemFilter, Materials
from depths.items import Item, Rarity, EquipSlot


def item(item_id, rarity='common', level=5, slot='weapon', name=None):
    return Item(id=item_id, name=name or item_id.title(), rarity=rarity, level=level, slot=slot)


def test_full_inventory_rejects_item():
    inv = Inventory(max_slots=1)
    assert inv.add_item(item('a')).success
    res = inv.add_item(item('b'))
    assert not res.success
    assert res.message == 'Inventory is full!'
    assert [i.id for i in inv.items] == ['a']


def test_duplicate_id_rejected():
    inv = Inventory(max_slots=5)
    inv.add_item(item('a'))
    assert not inv.add_item(item('a')).success
    assert len(inv) == 1


def test_add_items_splits_added_and_failed():
    inv = Inventory(max_slots=2)
    out = inv.add_items([item('a'), item('b'), item('c')])
    assert [i.id for i in out['added']] == ['a', 'b']
    assert [i.id for i in out['failed']] == ['c']


def test_remove_missing_item():
    res = Inventory().remove_item('ghost')
    assert not res.success
    assert res.message == 'Item not found in inventory'


def test_filtered_items_sort_order():
    inv = Inventory()
    inv.add_items([
        item('low', 'legendary', level=2),
        item('boots', 'rare', level=10, slot='boots'),
        item('helm', 'rare', level=10, slot='helmet'),
        item('epic', 'epic', level=10, slot='legs'),
        item('b_sword', 'rare', level=10, slot='weapon', name='B Sword'),
        item('a_sword', 'rare', level=10, slot='weapon', name='A Sword'),
    ])
    order = [i.id for i in inv.filtered_items()]
    assert order == ['epic', 'a_sword', 'b_sword', 'helm', 'boots', 'low']


def test_filter_by_criteria():
    inv = Inventory()
    inv.add_items([item('a', level=3), item('b', 'rare', level=8), item('c', 'rare', level=12, slot='boots')])
    rare = inv.filtered_items(ItemFilter(rarity='rare', max_level=10))
    assert [i.id for i in rare] == ['b']
    assert [i.id for i in inv.items_by_slot(EquipSlot.BOOTS)] == ['c']
    assert len(inv.items_by_rarity(Rarity.RARE)) == 2


def test_sell_item_pays_gold_value():
    inv = Inventory(gold=5)
    inv.add_item(item('a'))
    res = inv.sell_item('a')
    assert res.success
    assert res.value == 10
    assert inv.gold == 15
    assert 'a' not in inv
    assert not inv.sell_item('a').success


def test_sell_items_totals():
    inv = Inventory()
    inv.add_items([item('a'), item('b', 'uncommon')])
    res = inv.sell_items(['a', 'b', 'ghost'])
    assert res.value == 60
    assert not inv.sell_items(['ghost']).success


def test_salvage_rare_item():
    inv = Inventory()
    inv.add_item(item('r', 'rare'))
    res = inv.salvage_item('r')
    assert res.value == Materials(dust=5, crystals=1)
    assert len(inv) == 0


def test_salvage_legendary_yields_gems():
    inv = Inventory()
    inv.add_item(item('l', 'legendary'))
    assert inv.salvage_item('l').value == Materials(dust=25, gems=2)


def test_expand_costs_grow():
    inv = Inventory(gold=5000)
    assert inv.expansion_cost() == 1000
    res = inv.expand(10)
    assert res.success
    assert res.value == 60
    assert inv.gold == 4000
    assert inv.expansion_cost() == 1200


def test_expand_without_gold_fails():
    inv = Inventory(gold=999)
    res = inv.expand(10)
    assert not res.success
    assert res.message == 'Not enough gold!'
    assert inv.max_slots == 50
    assert inv.gold == 999


def test_expand_respects_slot_cap():
    inv = Inventory(max_slots=95, gold=10000)
    assert not inv.expand(10).success
    assert inv.expand(5).success
    assert inv.max_slots == 100
    assert not inv.expand(1).success


def test_remove_gold_validation():
    inv = Inventory(gold=10)
    assert not inv.remove_gold(-1).success
    assert not inv.remove_gold(11).success
    assert inv.remove_gold(10).success
    assert inv.gold == 0


def test_statistics():
    inv = Inventory(max_slots=4)
    inv.add_items([item('a'), item('b', 'rare', slot='boots')])
    stats = inv.statistics()
    assert stats['free_slots'] == 2
    assert stats['by_rarity']['rare'] == 1
    assert stats['by_slot']['boots'] == 1
    assert stats['total_value'] == 10 + 200


def test_from_dict_truncates_overflow(caplog):
    inv = Inventory(max_slots=3)
    inv.add_items([item('a'), item('b'), item('c')])
    data = inv.to_dict()
    data['maxSlots'] = 2
    with caplog.at_level('WARNING'):
        loaded = Inventory.from_dict(data)
    assert [i.id for i in loaded.items] == ['a', 'b']
    assert 'only 2 slots' in caplog.text


@pytest.mark.parametrize('slots', [1, 3])
def test_never_exceeds_capacity(slots):
    inv = Inventory(max_slots=slots)
    inv.add_items(item(f'i{n}') for n in range(10))
    assert len(inv) == slots
    assert inv.is_full()
