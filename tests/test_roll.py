"""Unit tests for the dice pool and the leaf dice."""

import random

import pytest

from dicenotation.modifiers import Arithmetic, DropKeep
from dicenotation.roll import (
    Cup,
    CustomDie,
    FudgeDie,
    IllegalValue,
    PercentileDie,
    SidedDie,
    UnknownExpression,
)


class TestCup:
    def test_empty_cup(self) -> None:
        cup = Cup()
        assert cup.is_empty()
        assert cup.roll() == 0
        assert cup.minimum() == 0
        assert cup.maximum() == 0
        assert cup.notation() == "0"
        assert len(cup) == 0

    def test_empty_nested_cups_are_dropped(self) -> None:
        cup = Cup(Cup(), SidedDie(6), Cup(Cup()))
        assert cup.count() == 1
        assert cup.notation() == "D6"

    def test_with_added_rollable_returns_new_cup(self) -> None:
        cup = Cup(SidedDie(6))
        bigger = cup.with_added_rollable(SidedDie(4), SidedDie(4))
        assert bigger is not cup
        assert len(cup) == 1
        assert len(bigger) == 3
        assert bigger.notation() == "D6+2D4"

    def test_with_added_empty_cup_is_a_no_op(self) -> None:
        cup = Cup(SidedDie(6))
        assert cup.with_added_rollable(Cup()) is cup

    def test_iteration_keeps_insertion_order(self) -> None:
        dice = [SidedDie(4), SidedDie(6), SidedDie(8)]
        assert list(Cup(*dice)) == dice

    def test_notation_groups_identical_items(self) -> None:
        assert Cup(SidedDie(6), SidedDie(6), SidedDie(6)).notation() == "3D6"
        assert Cup(SidedDie(3), SidedDie(4), SidedDie(3)).notation() == "2D3+D4"

    def test_notation_only_groups_dice(self, stub) -> None:
        cup = Cup(stub([1], 1, 1, "X"), SidedDie(4), stub([1], 1, 1, "X"), SidedDie(4))
        assert cup.notation() == "X+2D4+X"

    def test_notation_keeps_modified_items_apart(self) -> None:
        cup = Cup(Arithmetic(SidedDie(4), "+", 3), Arithmetic(SidedDie(4), "+", 3))
        assert cup.notation() == "D4+3+D4+3"
        keep = Cup(DropKeep(Cup(SidedDie(6)), "KH", 1), DropKeep(Cup(SidedDie(6)), "KH", 1))
        assert keep.notation() == "D6KH1+D6KH1"

    def test_bounds_are_summed(self) -> None:
        cup = Cup(SidedDie(6), SidedDie(4), FudgeDie())
        assert cup.minimum() == 1
        assert cup.maximum() == 11

    def test_roll_is_within_bounds(self) -> None:
        rng = random.Random(42)
        cup = Cup(SidedDie(6, rng), SidedDie(20, rng), CustomDie(-3, 5, rng=rng))
        for _ in range(50):
            assert cup.minimum() <= cup.roll() <= cup.maximum()

    def test_roll_sums_items(self, stub) -> None:
        cup = Cup(stub([2], 1, 3), stub([5], 1, 6))
        assert cup.roll() == 7

    def test_from_rollable(self) -> None:
        cup = Cup.from_rollable(SidedDie(8), 3)
        assert len(cup) == 3
        assert cup.notation() == "3D8"
        items = list(cup)
        assert items[0] is not items[1]

    def test_from_rollable_invalid_quantity(self) -> None:
        with pytest.raises(IllegalValue):
            Cup.from_rollable(SidedDie(6), 0)

    def test_from_empty_cup(self) -> None:
        assert Cup.from_rollable(Cup(), 4).is_empty()


class TestSidedDie:
    def test_bounds(self) -> None:
        die = SidedDie(12)
        assert die.size() == 12
        assert die.minimum() == 1
        assert die.maximum() == 12
        assert die.notation() == "D12"

    def test_too_few_sides(self) -> None:
        with pytest.raises(IllegalValue):
            SidedDie(1)

    def test_from_notation(self) -> None:
        assert SidedDie.from_notation("d20").sides == 20

    def test_from_invalid_notation(self) -> None:
        with pytest.raises(UnknownExpression):
            SidedDie.from_notation("DX")

    def test_roll_uses_rng(self) -> None:
        die = SidedDie(6, random.Random(1))
        expected = random.Random(1).randint(1, 6)
        assert die.roll() == expected


class TestOtherDice:
    def test_percentile(self) -> None:
        die = PercentileDie()
        assert die.notation() == "D%"
        assert (die.minimum(), die.maximum()) == (1, 100)

    def test_fudge(self) -> None:
        die = FudgeDie(random.Random(5))
        assert die.notation() == "DF"
        assert die.size() == 3
        for _ in range(20):
            assert die.roll() in (-1, 0, 1)

    def test_custom(self) -> None:
        die = CustomDie(-3, -2, -1)
        assert die.notation() == "D[-3,-2,-1]"
        assert (die.minimum(), die.maximum()) == (-3, -1)

    def test_custom_rolls_a_face(self) -> None:
        die = CustomDie(2, 4, 8, rng=random.Random(9))
        for _ in range(20):
            assert die.roll() in (2, 4, 8)

    def test_custom_needs_two_faces(self) -> None:
        with pytest.raises(IllegalValue):
            CustomDie(4)

    def test_custom_from_notation(self) -> None:
        assert CustomDie.from_notation("D[1, 3,5]").faces == (1, 3, 5)

    def test_custom_from_invalid_notation(self) -> None:
        with pytest.raises(UnknownExpression):
            CustomDie.from_notation("D[1,a]")
