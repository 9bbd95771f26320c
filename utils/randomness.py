import random
from typing import List, MutableSequence, TypeVar

T = TypeVar("T")


def shuffle_in_place(items: MutableSequence[T], rng: random.Random = None) -> MutableSequence[T]:
    """Fisher-Yates shuffle. Mutates and returns `items`."""
    rng = rng or random
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def shuffled_copy(items: List[T], rng: random.Random = None) -> List[T]:
    return shuffle_in_place(list(items), rng)
