import copy
import random
import typing

from dicenotation.tracing import NullTracer, Trace, Tracer


class DiceError(ValueError):
    pass


class UnknownExpression(DiceError):
    pass


class UnknownAlgorithm(DiceError):
    pass


class IllegalValue(DiceError):
    pass


class CanNotBeRolled(DiceError):
    pass


class Rollable:
    def __init__(self, tracer: typing.Optional[Tracer] = None) -> None:
        self.tracer = tracer if tracer is not None else NullTracer()

    def roll(self) -> int:
        raise NotImplementedError

    def minimum(self) -> int:
        raise NotImplementedError

    def maximum(self) -> int:
        raise NotImplementedError

    def notation(self) -> str:
        raise NotImplementedError

    def set_tracer(self, tracer: Tracer) -> None:
        self.tracer = tracer

    def _trace(self, operation: str, result: int, line: str) -> int:
        self.tracer.append(
            Trace(self, "%s.%s" % (self.__class__.__name__, operation), result, line)
        )
        return result

    def __repr__(self) -> str:
        return self.notation()


def _join(values: typing.Iterable[int]) -> str:
    return " + ".join(str(x) for x in values)


class Die(Rollable):
    def __init__(
        self, rng: typing.Any = None, tracer: typing.Optional[Tracer] = None
    ) -> None:
        super().__init__(tracer)
        self.rng = rng if rng is not None else random

    def size(self) -> int:
        raise NotImplementedError

    def draw(self) -> int:
        raise NotImplementedError

    def roll(self) -> int:
        result = self.draw()
        return self._trace("roll", result, str(result))

    def minimum(self) -> int:
        result = self.lowest()
        return self._trace("minimum", result, str(result))

    def maximum(self) -> int:
        result = self.highest()
        return self._trace("maximum", result, str(result))

    def lowest(self) -> int:
        raise NotImplementedError

    def highest(self) -> int:
        raise NotImplementedError


class SidedDie(Die):
    def __init__(
        self,
        sides: int,
        rng: typing.Any = None,
        tracer: typing.Optional[Tracer] = None,
    ) -> None:
        if sides < 2:
            raise IllegalValue(
                "Your die must have at least 2 sides, %s given" % sides
            )
        super().__init__(rng, tracer)
        self.sides = sides

    @classmethod
    def from_notation(
        cls, text: str, rng: typing.Any = None, tracer: typing.Optional[Tracer] = None
    ) -> "SidedDie":
        body = text.strip().upper()
        if not body.startswith("D") or not body[1:].isdigit():
            raise UnknownExpression("the submitted die format `%s` is invalid" % text)
        return cls(int(body[1:]), rng, tracer)

    def size(self) -> int:
        return self.sides

    def draw(self) -> int:
        return self.rng.randint(1, self.sides)

    def lowest(self) -> int:
        return 1

    def highest(self) -> int:
        return self.sides

    def notation(self) -> str:
        return "D%d" % self.sides


class PercentileDie(SidedDie):
    def __init__(
        self, rng: typing.Any = None, tracer: typing.Optional[Tracer] = None
    ) -> None:
        super().__init__(100, rng, tracer)

    def notation(self) -> str:
        return "D%"


class FudgeDie(Die):
    def size(self) -> int:
        return 3

    def draw(self) -> int:
        return self.rng.randint(-1, 1)

    def lowest(self) -> int:
        return -1

    def highest(self) -> int:
        return 1

    def notation(self) -> str:
        return "DF"


class CustomDie(Die):
    def __init__(
        self,
        *faces: int,
        rng: typing.Any = None,
        tracer: typing.Optional[Tracer] = None
    ) -> None:
        if len(faces) < 2:
            raise IllegalValue(
                "Your die must have at least 2 sides, %d given" % len(faces)
            )
        super().__init__(rng, tracer)
        self.faces = tuple(int(face) for face in faces)

    @classmethod
    def from_notation(
        cls, text: str, rng: typing.Any = None, tracer: typing.Optional[Tracer] = None
    ) -> "CustomDie":
        body = text.strip().upper()
        if not (body.startswith("D[") and body.endswith("]")):
            raise UnknownExpression("the submitted die format `%s` is invalid" % text)
        faces = []
        for face in body[2:-1].split(","):
            try:
                faces.append(int(face.strip()))
            except ValueError:
                raise UnknownExpression(
                    "the submitted die format `%s` is invalid" % text
                )
        return cls(*faces, rng=rng, tracer=tracer)

    def size(self) -> int:
        return len(self.faces)

    def draw(self) -> int:
        return self.rng.choice(self.faces)

    def lowest(self) -> int:
        return min(self.faces)

    def highest(self) -> int:
        return max(self.faces)

    def notation(self) -> str:
        return "D[%s]" % ",".join(str(face) for face in self.faces)


def _is_valid_item(rollable: Rollable) -> bool:
    return not (isinstance(rollable, Cup) and rollable.is_empty())


class Cup(Rollable):
    """An ordered pool of rollables whose results are summed.

    Empty cups are never stored as children, so a cup only ever contains
    something that can actually be rolled.
    """

    def __init__(self, *items: Rollable, tracer: typing.Optional[Tracer] = None):
        super().__init__(tracer)
        self.items: typing.Tuple[Rollable, ...] = tuple(
            item for item in items if _is_valid_item(item)
        )

    @classmethod
    def from_rollable(
        cls,
        rollable: Rollable,
        quantity: int = 1,
        tracer: typing.Optional[Tracer] = None,
    ) -> "Cup":
        if quantity < 1:
            raise IllegalValue(
                "The quantity of dice `%s` is not valid. Should be > 0" % quantity
            )
        if not _is_valid_item(rollable):
            return cls(tracer=tracer)
        items = [rollable] + [copy.copy(rollable) for _ in range(quantity - 1)]
        return cls(*items, tracer=tracer)

    def with_added_rollable(self, *items: Rollable) -> "Cup":
        added = tuple(item for item in items if _is_valid_item(item))
        if not added:
            return self
        return self.__class__(*(self.items + added), tracer=self.tracer)

    def is_empty(self) -> bool:
        return len(self.items) == 0

    def count(self) -> int:
        return len(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> typing.Iterator[Rollable]:
        return iter(self.items)

    def roll(self) -> int:
        values = [item.roll() for item in self.items]
        return self._trace("roll", sum(values), _join(values))

    def minimum(self) -> int:
        values = [item.minimum() for item in self.items]
        return self._trace("minimum", sum(values), _join(values))

    def maximum(self) -> int:
        values = [item.maximum() for item in self.items]
        return self._trace("maximum", sum(values), _join(values))

    def notation(self) -> str:
        if self.is_empty():
            return "0"
        # Only leaf dice collapse into a count prefix; "2D4+3" would read
        # back as a single modified pool.
        parts: typing.List[typing.List[typing.Any]] = []
        dice: typing.Dict[str, typing.List[typing.Any]] = {}
        for item in self.items:
            key = item.notation()
            if not isinstance(item, Die):
                parts.append([key, 1])
            elif key in dice:
                dice[key][1] += 1
            else:
                dice[key] = [key, 1]
                parts.append(dice[key])
        return "+".join(
            key if count == 1 else "%d%s" % (count, key) for key, count in parts
        )
