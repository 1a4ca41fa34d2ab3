"""Element matchups and damage calculation.

The chart follows the classic monster type chart. Immunities are folded
into the resisted multiplier so that every attack deals some damage.
Pairs that are not listed are neutral.
"""

import math
from enum import Enum
from typing import Dict, FrozenSet


class Element(str, Enum):
    NORMAL = 'Normal'
    FIRE = 'Fire'
    WATER = 'Water'
    ELECTRIC = 'Electric'
    GRASS = 'Grass'
    ICE = 'Ice'
    FIGHTING = 'Fighting'
    POISON = 'Poison'
    GROUND = 'Ground'
    FLYING = 'Flying'
    PSYCHIC = 'Psychic'
    BUG = 'Bug'
    ROCK = 'Rock'
    GHOST = 'Ghost'
    DRAGON = 'Dragon'
    DARK = 'Dark'
    STEEL = 'Steel'
    FAIRY = 'Fairy'


SUPER_EFFECTIVE = 2.0
NEUTRAL = 1.0
RESISTED = 0.5

E = Element

# attacker -> defenders it hits for double damage
_STRONG_AGAINST: Dict[Element, FrozenSet[Element]] = {
    E.NORMAL: frozenset(),
    E.FIRE: frozenset({E.GRASS, E.ICE, E.BUG, E.STEEL}),
    E.WATER: frozenset({E.FIRE, E.GROUND, E.ROCK}),
    E.ELECTRIC: frozenset({E.WATER, E.FLYING}),
    E.GRASS: frozenset({E.WATER, E.GROUND, E.ROCK}),
    E.ICE: frozenset({E.GRASS, E.GROUND, E.FLYING, E.DRAGON}),
    E.FIGHTING: frozenset({E.NORMAL, E.ICE, E.ROCK, E.DARK, E.STEEL}),
    E.POISON: frozenset({E.GRASS, E.FAIRY}),
    E.GROUND: frozenset({E.FIRE, E.ELECTRIC, E.POISON, E.ROCK, E.STEEL}),
    E.FLYING: frozenset({E.GRASS, E.FIGHTING, E.BUG}),
    E.PSYCHIC: frozenset({E.FIGHTING, E.POISON}),
    E.BUG: frozenset({E.GRASS, E.PSYCHIC, E.DARK}),
    E.ROCK: frozenset({E.FIRE, E.ICE, E.FLYING, E.BUG}),
    E.GHOST: frozenset({E.PSYCHIC, E.GHOST}),
    E.DRAGON: frozenset({E.DRAGON}),
    E.DARK: frozenset({E.PSYCHIC, E.GHOST}),
    E.STEEL: frozenset({E.ICE, E.ROCK, E.FAIRY}),
    E.FAIRY: frozenset({E.FIGHTING, E.DRAGON, E.DARK}),
}

# attacker -> defenders that resist it (immunities included)
_WEAK_AGAINST: Dict[Element, FrozenSet[Element]] = {
    E.NORMAL: frozenset({E.ROCK, E.STEEL, E.GHOST}),
    E.FIRE: frozenset({E.FIRE, E.WATER, E.ROCK, E.DRAGON}),
    E.WATER: frozenset({E.WATER, E.GRASS, E.DRAGON}),
    E.ELECTRIC: frozenset({E.ELECTRIC, E.GRASS, E.DRAGON, E.GROUND}),
    E.GRASS: frozenset({E.FIRE, E.GRASS, E.POISON, E.FLYING, E.BUG, E.DRAGON, E.STEEL}),
    E.ICE: frozenset({E.FIRE, E.WATER, E.ICE, E.STEEL}),
    E.FIGHTING: frozenset({E.POISON, E.FLYING, E.PSYCHIC, E.BUG, E.FAIRY, E.GHOST}),
    E.POISON: frozenset({E.POISON, E.GROUND, E.ROCK, E.GHOST, E.STEEL}),
    E.GROUND: frozenset({E.GRASS, E.BUG, E.FLYING}),
    E.FLYING: frozenset({E.ELECTRIC, E.ROCK, E.STEEL}),
    E.PSYCHIC: frozenset({E.PSYCHIC, E.STEEL, E.DARK}),
    E.BUG: frozenset({E.FIRE, E.FIGHTING, E.POISON, E.FLYING, E.GHOST, E.STEEL, E.FAIRY}),
    E.ROCK: frozenset({E.FIGHTING, E.GROUND, E.STEEL}),
    E.GHOST: frozenset({E.DARK, E.NORMAL}),
    E.DRAGON: frozenset({E.STEEL, E.FAIRY}),
    E.DARK: frozenset({E.FIGHTING, E.DARK, E.FAIRY}),
    E.STEEL: frozenset({E.FIRE, E.WATER, E.ELECTRIC, E.STEEL}),
    E.FAIRY: frozenset({E.FIRE, E.POISON, E.STEEL}),
}

del E


def effectiveness(attacker: Element, defender: Element) -> float:
    """Multiplier applied when ``attacker`` hits ``defender``."""
    attacker = Element(attacker)
    defender = Element(defender)
    if defender in _STRONG_AGAINST[attacker]:
        return SUPER_EFFECTIVE
    if defender in _WEAK_AGAINST[attacker]:
        return RESISTED
    return NEUTRAL


def calculate_damage(base_power: int, attacker: Element, defender: Element) -> int:
    """Damage dealt by a card of ``attacker`` element with ``base_power``.

    Rounds half up and never returns a negative value.
    """
    raw = max(0, base_power) * effectiveness(attacker, defender)
    return int(math.floor(raw + 0.5))
