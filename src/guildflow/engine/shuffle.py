# src/guildflow/engine/shuffle.py
"""Unbiased shuffling and round-robin assignment.

shuffle_assign() shuffles items and targets independently and then deals
items onto targets like cards: item i goes to target i mod len(targets).
Target loads therefore differ by at most one, which a uniform random
bucket choice would not guarantee.
"""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence


def fisher_yates_shuffle[T](items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a uniformly shuffled copy of items. The input is not modified."""
    source = rng if rng is not None else random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = source.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def shuffle_assign(
    items: Sequence[str],
    targets: Sequence[str],
    rng: random.Random | None = None,
) -> dict[str, list[str]]:
    """Deal shuffled items round-robin onto shuffled targets.

    Every target appears in the result, possibly with no items. Keys keep
    the shuffled target order.

    Raises:
        ValueError: If targets is empty
    """
    if not targets:
        raise ValueError("shuffle_assign needs at least one target")
    shuffled_items = fisher_yates_shuffle(items, rng)
    shuffled_targets = fisher_yates_shuffle(targets, rng)

    assigned: dict[str, list[str]] = {target: [] for target in shuffled_targets}
    for index, item in enumerate(shuffled_items):
        assigned[shuffled_targets[index % len(shuffled_targets)]].append(item)
    return assigned


def assignment_flags(prefix: str, assigned: Mapping[str, Sequence[str]]) -> dict[str, str]:
    """One flag per target that received items: `<prefix>_<target>` -> "a, b"."""
    return {f"{prefix}_{target}": ", ".join(items) for target, items in assigned.items() if items}
