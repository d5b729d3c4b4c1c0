"""
Pairing primitives shared by every generator: circle-method round robin,
standard bracket seeding order and power-of-two padding.

All functions are deterministic: the same input always gives the same output.
"""
import math
from typing import List, Sequence, Tuple

from .exceptions import InvalidInput

# Padding for odd round robins; never equal to a real team id
_BYE = object()


def round_robin_round(teams: Sequence[str], round_index: int) -> List[Tuple[str, str]]:
    """
    Pairings for one round of a round robin using the circle method.

    The first team stays fixed and the rest rotate right by ``round_index``
    positions; position i then plays position n-1-i, the lower position at
    home. An odd list gets a bye marker appended before rotating and any pairing
    against it is dropped.

    For [A, B, C, D]:
    round 0 -> A-D, B-C
    round 1 -> A-C, D-B
    round 2 -> A-B, C-D
    """
    padded = list(teams)
    if len(padded) % 2 == 1:
        padded.append(_BYE)
    n = len(padded)
    if n < 2:
        return []

    fixed, rest = padded[0], padded[1:]
    shift = round_index % len(rest)
    if shift:
        rest = rest[-shift:] + rest[:-shift]
    order = [fixed] + rest

    pairings = []
    for i in range(n // 2):
        home, away = order[i], order[n - 1 - i]
        if home is _BYE or away is _BYE:
            continue
        pairings.append((home, away))
    return pairings


def next_power_of_two(n: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if n <= 0:
        return 0
    return 2 ** math.ceil(math.log2(n))


def calculate_byes(n: int) -> int:
    """Calculate number of byes needed to fill a bracket of ``n`` seeds."""
    return next_power_of_two(n) - n


def bye_seeds(n: int) -> List[int]:
    """Seeds receiving a first-round bye: the strongest ``calculate_byes(n)``."""
    return list(range(1, calculate_byes(n) + 1))


def standard_seed_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 teams: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if bracket_size < 1 or bracket_size & (bracket_size - 1):
        raise InvalidInput(f"Bracket size must be a power of two, got {bracket_size}")
    if bracket_size == 1:
        return [1]
    if bracket_size == 2:
        return [1, 2]

    half_size = bracket_size // 2
    upper_half = standard_seed_order(half_size)

    # Each upper seed meets its complement in the first round
    lower_half = [bracket_size + 1 - seed for seed in upper_half]

    result = []
    for u, l in zip(upper_half, lower_half):
        result.extend([u, l])
    return result


def fold_pairs(entrants: Sequence) -> List[Tuple]:
    """Pair first with last, second with second-to-last, and so on."""
    n = len(entrants)
    return [(entrants[i], entrants[n - 1 - i]) for i in range(n // 2)]
