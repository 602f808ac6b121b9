from itertools import islice
from typing import Callable, Iterable, Iterator, Mapping, Tuple

from tracker.domain import Transaction


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def lazy_top_categories(
    totals: Mapping[str, float], k: int
) -> Iterator[Tuple[str, float]]:
    # sorted() keeps mapping order among equal totals, also with reverse=True
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    yield from islice(ordered, max(0, k))


def newest_first(trans: Iterable[Transaction], k: int) -> Iterator[Transaction]:
    ordered = sorted(trans, key=lambda t: t.date, reverse=True)
    yield from islice(ordered, max(0, k))
