from __future__ import annotations

from .errors import AggregatorDrainedError
from .types import AggregationKey, AggregationValue, Position


class RepertoireAggregator:
    """Collects studied moves keyed by (question position, side).

    Two states: building (insert allowed) and drained. `drain()` hands out
    the whole content once; after that inserts raise and further drains
    return nothing.
    """

    def __init__(self) -> None:
        self._entries: dict[AggregationKey, AggregationValue] = {}
        self._drained = False

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def is_drained(self) -> bool:
        return self._drained

    def insert(self, key: AggregationKey, result: Position, move: str, comment: str = "") -> None:
        if self._drained:
            raise AggregatorDrainedError("cannot insert into a drained repertoire aggregator")

        value = self._entries.setdefault(key, AggregationValue())
        comments = value.answers.setdefault(result, {}).setdefault(move, [])
        if comment:
            comments.append(comment)

    def drain(self) -> list[tuple[AggregationKey, AggregationValue]]:
        entries = list(self._entries.items())
        self._entries = {}
        self._drained = True
        return entries
