import random

from depths.core.combat import Battle, BattleOutcome
from depths.core.combat_system import Enemy, Hero, HeroClass, StatusEffect
from depths.inventory import Inventory


def make_party(level=10):
    return [
        Hero('Brom', HeroClass.WARRIOR, level=level),
        Hero('Aria', HeroClass.ARCHER, level=level),
        Hero('Sel', HeroClass.CLERIC, level=level),
    ]


def stunned_boss(rng):
    boss = Enemy('Dragon', 20, 'boss', rng=rng)
    boss.add_status_effect(StatusEffect('Stun', 99, 'debuff', stun=True))
    return boss


def skills_used(battle, hero):
    prefix = f"{hero.name} uses "
    return [line[len(prefix):] for line in battle.log if line.startswith(prefix)]


def test_strong_party_wins_and_gets_rewards():
    rng = random.Random(3)
    party = make_party()
    enemies = Enemy.generate_group(2, 1, rng=rng)
    report = Battle(party, enemies, rng=rng).run()

    assert report.outcome == BattleOutcome.VICTORY
    assert report.victory
    assert report.rounds >= 1
    assert report.experience == 100  # 50 * avg level 1 * 2 enemies
    assert all(not e.is_alive for e in enemies)
    assert set(report.loot) == {'gold', 'items'}
    assert report.loot['gold'] > 0
    assert all(h.experience == 100 for h in party if h.is_alive)


def test_weak_party_is_defeated():
    rng = random.Random(8)
    mage = Hero('Ilya', HeroClass.MAGE)
    boss = Enemy('Dragon', 20, 'boss', rng=rng)
    report = Battle([mage], [boss], rng=rng).run(max_rounds=50)

    assert report.outcome == BattleOutcome.DEFEAT
    assert not mage.is_alive
    assert mage.current_hp == 0
    assert report.experience == 0


def test_round_limit_times_out():
    rng = random.Random(1)
    hero = Hero('Brom', HeroClass.WARRIOR)
    enemy = Enemy('Goblin', 1, rng=rng)
    hero.add_status_effect(StatusEffect('Stun', 99, 'debuff', stun=True))
    enemy.add_status_effect(StatusEffect('Stun', 99, 'debuff', stun=True))
    report = Battle([hero], [enemy], rng=rng).run(max_rounds=3)

    assert report.outcome == BattleOutcome.TIMEOUT
    assert report.rounds == 3
    # combat state is cleared afterwards
    assert not hero.is_stunned()


def test_hp_stays_in_bounds_every_round():
    rng = random.Random(21)
    party = make_party(level=3)
    enemies = Enemy.generate_group(3, 3, rng=rng)
    battle = Battle(party, enemies, rng=rng)
    while not battle.is_over and battle.round < 50:
        battle.run_round()
        for c in battle.combatants():
            assert 0 <= c.current_hp <= c.max_hp
            assert c.is_alive == (c.current_hp > 0)


def test_run_round_is_noop_after_end():
    rng = random.Random(3)
    battle = Battle(make_party(), Enemy.generate_group(1, 1, rng=rng), rng=rng)
    battle.run()
    rounds = battle.round
    assert battle.run_round() == BattleOutcome.VICTORY
    assert battle.round == rounds


def test_loot_from_separate_battles_fits_one_inventory():
    inventory = Inventory()
    for seed in (1, 2):
        rng = random.Random(seed)
        bosses = [Enemy('Ogre', 1, 'boss', rng=rng) for _ in range(2)]
        for boss in bosses:
            boss.take_damage(100000)
        report = Battle(make_party(), bosses, rng=rng).run()
        assert report.victory
        assert len(report.loot['items']) == 2
        for item in report.loot['items']:
            assert inventory.add_item(item).success
    assert len(inventory) == 4


# ---------------- Skills ----------------

def test_cooldowns_gate_skill_use():
    rng = random.Random(4)
    brom = Hero('Brom', HeroClass.WARRIOR)
    battle = Battle([brom], [stunned_boss(rng)], rng=rng)
    for _ in range(5):
        battle.run_round()
    assert skills_used(battle, brom) == [
        'Heavy Slash', 'Shield Bash', 'Heavy Slash', 'Battle Cry', 'Heavy Slash',
    ]
    assert brom.cooldowns['Heavy Slash'] == 2
    assert brom.cooldowns['Battle Cry'] == 4


def test_skill_effects_expire():
    rng = random.Random(4)
    brom = Hero('Brom', HeroClass.WARRIOR)
    boss = stunned_boss(rng)
    battle = Battle([brom], [boss], rng=rng)
    battle.run_round()
    battle.run_round()
    assert boss.effects.has('Stunned')
    battle.run_round()
    assert not boss.effects.has('Stunned')

    battle.run_round()
    assert brom.effects.has('Battle Cry')
    assert brom.get_combat_stats().atk == 32  # 25 * 1.3
    for _ in range(3):
        battle.run_round()
    assert not brom.effects.has('Battle Cry')
    assert brom.get_combat_stats().atk == 25


def test_divine_shield_lasts_one_round():
    rng = random.Random(9)
    uther = Hero('Uther', HeroClass.PALADIN)
    battle = Battle([uther], [stunned_boss(rng)], rng=rng)
    battle.run_round()
    battle.run_round()
    assert skills_used(battle, uther) == ['Smite', 'Divine Shield']
    assert uther.effects.has_immunity()
    assert uther.take_damage(500) == 0
    battle.run_round()
    assert not uther.effects.has_immunity()
    assert uther.cooldowns['Divine Shield'] == 4


def test_cleric_heals_only_wounded_allies():
    rng = random.Random(6)
    brom = Hero('Brom', HeroClass.WARRIOR)
    sel = Hero('Sel', HeroClass.CLERIC)
    battle = Battle([brom, sel], [stunned_boss(rng)], rng=rng)
    battle.run_round()
    assert skills_used(battle, sel) == ['Holy Smite']
    brom.current_hp = 40
    battle.run_round()
    assert skills_used(battle, sel) == ['Holy Smite', 'Heal']
    assert brom.current_hp == 140
    assert '  Brom recovers 100 HP' in battle.log


def test_skill_state_cleared_after_battle():
    rng = random.Random(3)
    party = make_party()
    Battle(party, Enemy.generate_group(2, 1, rng=rng), rng=rng).run()
    for hero in party:
        assert hero.cooldowns == {}
        assert len(hero.effects) == 0
