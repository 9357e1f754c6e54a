"""Turn-based combat primitives shared by heroes and enemies."""
from .models import (
    AttackResult, CombatStats, Element, EnemyType, HeroClass, HeroRarity, Position,
    PositionBonus, Role, StatusEffect,
)
from .effects import StatusEffectList
from .resolver import (
    CombatResolver, apply_damage, apply_true_damage, hit_chance, mitigate, resolve_attack,
)
from .ai import choose_target
from .skills import CLASS_SKILLS, Skill, SkillKind, SkillTarget, skills_for, use_skill
from .enemy import Enemy
from .hero import Hero

__all__ = [
    'AttackResult', 'CombatStats', 'Element', 'EnemyType', 'HeroClass', 'HeroRarity',
    'Position', 'PositionBonus', 'Role', 'StatusEffect', 'StatusEffectList',
    'CombatResolver', 'apply_damage', 'apply_true_damage', 'hit_chance', 'mitigate',
    'resolve_attack', 'choose_target', 'CLASS_SKILLS', 'Skill', 'SkillKind', 'SkillTarget',
    'skills_for', 'use_skill', 'Enemy', 'Hero'
]
