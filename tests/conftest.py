import itertools
import typing

import pytest

from dicenotation.roll import Cup, Rollable, SidedDie


class StubRollable(Rollable):
    """Rolls a preset sequence of values, cycling once exhausted."""

    def __init__(self, rolls: typing.Sequence[int], low: int, high: int, label: str = "S"):
        super().__init__()
        self.rolls = itertools.cycle(rolls)
        self.low = low
        self.high = high
        self.label = label

    def roll(self) -> int:
        return next(self.rolls)

    def minimum(self) -> int:
        return self.low

    def maximum(self) -> int:
        return self.high

    def notation(self) -> str:
        return self.label


@pytest.fixture
def stub() -> typing.Callable[..., StubRollable]:
    return StubRollable


@pytest.fixture
def four_d6() -> Cup:
    return Cup.from_rollable(SidedDie(6), 4)
