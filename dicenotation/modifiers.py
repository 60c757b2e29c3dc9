import sys
import typing

from dicenotation.roll import (
    CanNotBeRolled,
    Cup,
    IllegalValue,
    Rollable,
    UnknownAlgorithm,
    _join,
)
from dicenotation.tracing import Tracer

# Stand-in for "no upper bound" on exploding rolls.
UNBOUNDED = sys.maxsize

DEFAULT_MAX_EXPLOSIONS = 100


class Modifier(Rollable):
    def __init__(self, inner: Rollable, tracer: typing.Optional[Tracer] = None):
        super().__init__(tracer)
        self.inner = inner

    def get_inner_rollable(self) -> Rollable:
        return self.inner

    def wraps_inner(self) -> bool:
        """Whether the inner notation needs parentheses to read back the same.

        A term takes at most one drop/keep or explode, followed by at most two
        arithmetic operations, so anything the inner notation already spends
        of that budget forces a composite.
        """
        if "+" in self.inner.notation():
            return True
        algorithm, arithmetic = _suffix(self.inner)
        if isinstance(self, Arithmetic):
            return arithmetic >= 2
        return algorithm or arithmetic > 0

    def inner_notation(self) -> str:
        result = self.inner.notation()
        if self.wraps_inner():
            return "(%s)" % result
        return result


def _suffix(rollable: Rollable) -> typing.Tuple[bool, int]:
    """Return (has drop/keep or explode, arithmetic count) ending the notation."""
    if isinstance(rollable, Cup) and len(rollable) == 1:
        return _suffix(next(iter(rollable)))
    if not isinstance(rollable, Modifier):
        return False, 0
    if rollable.wraps_inner():
        algorithm, arithmetic = False, 0
    else:
        algorithm, arithmetic = _suffix(rollable.inner)
    if isinstance(rollable, Arithmetic):
        return algorithm, arithmetic + 1
    return True, arithmetic


def _truncated_div(lhs: int, rhs: int) -> int:
    result = abs(lhs) // rhs
    return result if lhs >= 0 else -result


class Arithmetic(Modifier):
    ADDITION = "+"
    SUBTRACTION = "-"
    MULTIPLICATION = "*"
    DIVISION = "/"
    EXPONENTIATION = "^"

    OPERATORS: typing.Dict[str, typing.Callable[[int, int], int]] = {
        ADDITION: lambda lhs, rhs: lhs + rhs,
        SUBTRACTION: lambda lhs, rhs: lhs - rhs,
        MULTIPLICATION: lambda lhs, rhs: lhs * rhs,
        DIVISION: _truncated_div,
        EXPONENTIATION: lambda lhs, rhs: lhs ** rhs,
    }

    def __init__(
        self,
        inner: Rollable,
        operator: str,
        value: int,
        tracer: typing.Optional[Tracer] = None,
    ) -> None:
        if operator not in self.OPERATORS:
            raise UnknownAlgorithm("Invalid or Unsupported operator `%s`" % operator)
        if value < 0:
            raise IllegalValue("The submitted value `%s` is invalid" % value)
        if operator == self.DIVISION and value == 0:
            raise IllegalValue("Division by zero is not supported")
        super().__init__(inner, tracer)
        self.operator = operator
        self.value = value

    def op(self, lhs: int) -> int:
        return self.OPERATORS[self.operator](lhs, self.value)

    def _line(self, lhs: int) -> str:
        return "%s %s %s" % (lhs, self.operator, self.value)

    def _is_monotonic(self) -> bool:
        return not (self.operator == self.EXPONENTIATION and self.value % 2 == 0)

    def roll(self) -> int:
        lhs = self.inner.roll()
        return self._trace("roll", self.op(lhs), self._line(lhs))

    def minimum(self) -> int:
        if self._is_monotonic():
            lhs = self.inner.minimum()
            return self._trace("minimum", self.op(lhs), self._line(lhs))
        low, high = self.inner.minimum(), self.inner.maximum()
        if low <= 0 <= high:
            lhs = 0
        else:
            lhs = min(low, high, key=abs)
        return self._trace("minimum", self.op(lhs), self._line(lhs))

    def maximum(self) -> int:
        if self._is_monotonic():
            lhs = self.inner.maximum()
            return self._trace("maximum", self.op(lhs), self._line(lhs))
        low, high = self.inner.minimum(), self.inner.maximum()
        lhs = max(low, high, key=abs)
        return self._trace("maximum", self.op(lhs), self._line(lhs))

    def notation(self) -> str:
        return "%s%s%s" % (self.inner_notation(), self.operator, self.value)


class DropKeep(Modifier):
    DROP_HIGHEST = "DH"
    DROP_LOWEST = "DL"
    KEEP_HIGHEST = "KH"
    KEEP_LOWEST = "KL"

    OPERATORS = (DROP_HIGHEST, DROP_LOWEST, KEEP_HIGHEST, KEEP_LOWEST)

    def __init__(
        self,
        inner: Rollable,
        operator: str,
        threshold: int,
        tracer: typing.Optional[Tracer] = None,
    ) -> None:
        operator = operator.upper()
        if operator not in self.OPERATORS:
            raise CanNotBeRolled("Unknown or unsupported sortable algorithm `%s`" % operator)
        if not isinstance(inner, Cup) or inner.is_empty():
            raise CanNotBeRolled("The inner rollable `%s` is not a dice pool" % inner)
        if threshold < 1:
            raise CanNotBeRolled("The threshold `%s` must be greater than 0" % threshold)
        if operator in (self.DROP_HIGHEST, self.DROP_LOWEST):
            valid = threshold < len(inner)
        else:
            valid = threshold <= len(inner)
        if not valid:
            raise CanNotBeRolled(
                "The number of rollable objects `%d` MUST be greater or equal than the threshold value `%d`"
                % (len(inner), threshold)
            )
        super().__init__(inner, tracer)
        self.operator = operator
        self.threshold = threshold

    def select(self, values: typing.Iterable[int]) -> typing.List[int]:
        ordered = sorted(values)
        if self.operator == self.DROP_LOWEST:
            return ordered[self.threshold :]
        elif self.operator == self.DROP_HIGHEST:
            return ordered[: -self.threshold]
        elif self.operator == self.KEEP_LOWEST:
            return ordered[: self.threshold]
        else:
            return ordered[-self.threshold :]

    def _calculate(self, operation: str, values: typing.List[int]) -> int:
        kept = self.select(values)
        return self._trace(operation, sum(kept), _join(kept))

    def roll(self) -> int:
        return self._calculate("roll", [item.roll() for item in self.inner])

    def minimum(self) -> int:
        return self._calculate("minimum", [item.minimum() for item in self.inner])

    def maximum(self) -> int:
        return self._calculate("maximum", [item.maximum() for item in self.inner])

    def notation(self) -> str:
        return "%s%s%d" % (self.inner_notation(), self.operator, self.threshold)


def _leaves(rollable: Rollable) -> typing.Iterator[Rollable]:
    if isinstance(rollable, Cup):
        for item in rollable:
            yield from _leaves(item)
    else:
        yield rollable


class Explode(Modifier):
    """Re-rolls each die of the inner pool for as long as it meets the condition.

    Nested pools are opened up so that every die explodes on its own, and a
    rollable that is not a pool is treated as a pool of one. Every die must be
    able to roll a value that stops the explosion, and the re-rolls of a single
    die are capped at ``max_explosions``.

    A die may not explode on a negative value (``4DF!<0`` is refused), which
    keeps every roll at or above :meth:`minimum`.
    """

    EQUALS = "="
    GREATER_THAN = ">"
    LESSER_THAN = "<"

    COMPARISONS: typing.Dict[str, typing.Callable[[int, int], bool]] = {
        EQUALS: lambda value, threshold: value == threshold,
        GREATER_THAN: lambda value, threshold: value > threshold,
        LESSER_THAN: lambda value, threshold: value < threshold,
    }

    def __init__(
        self,
        inner: Rollable,
        compare: str,
        threshold: int,
        max_explosions: int = DEFAULT_MAX_EXPLOSIONS,
        tracer: typing.Optional[Tracer] = None,
    ) -> None:
        if compare not in self.COMPARISONS:
            raise CanNotBeRolled("The comparison `%s` is not valid or supported" % compare)
        if max_explosions < 0:
            raise IllegalValue(
                "The explosion limit `%s` must be positive or zero" % max_explosions
            )
        super().__init__(inner, tracer)
        self.compare = compare
        self.threshold = threshold
        self.max_explosions = max_explosions
        self.items = tuple(_leaves(inner))
        if not self.items:
            raise CanNotBeRolled("The submitted pool can not be empty")
        bounds = [(item.minimum(), item.maximum()) for item in self.items]
        if not all(self._can_stop(low, high) for low, high in bounds):
            raise CanNotBeRolled(
                "This pool `%s` will explode indefinitely with `%s%s`"
                % (inner.notation(), compare, threshold)
            )
        if not any(self._can_explode(low, high) for low, high in bounds):
            raise CanNotBeRolled(
                "This pool `%s` can never explode with `%s%s`"
                % (inner.notation(), compare, threshold)
            )
        # Each extra roll follows an exploding value, so none may be negative.
        if any(self._lowest_explosion(low, high) < 0 for low, high in bounds):
            raise CanNotBeRolled(
                "This pool `%s` can explode on a negative value with `%s%s`"
                % (inner.notation(), compare, threshold)
            )

    def _can_stop(self, low: int, high: int) -> bool:
        if self.compare == self.GREATER_THAN:
            return low <= self.threshold
        elif self.compare == self.LESSER_THAN:
            return high >= self.threshold
        return not (low == high == self.threshold)

    def _can_explode(self, low: int, high: int) -> bool:
        if self.compare == self.GREATER_THAN:
            return high > self.threshold
        elif self.compare == self.LESSER_THAN:
            return low < self.threshold
        return low <= self.threshold <= high

    def _lowest_explosion(self, low: int, high: int) -> int:
        if not self._can_explode(low, high):
            return 0
        if self.compare == self.GREATER_THAN:
            return max(self.threshold + 1, low)
        elif self.compare == self.LESSER_THAN:
            return low
        return self.threshold

    def matches(self, value: int) -> bool:
        return self.COMPARISONS[self.compare](value, self.threshold)

    def _explode(self, rollable: Rollable) -> typing.List[int]:
        values = [rollable.roll()]
        while self.matches(values[-1]) and len(values) <= self.max_explosions:
            values.append(rollable.roll())
        return values

    def roll(self) -> int:
        values: typing.List[int] = []
        for item in self.items:
            values.extend(self._explode(item))
        return self._trace("roll", sum(values), _join(values))

    def minimum(self) -> int:
        result = self.inner.minimum()
        return self._trace("minimum", result, str(result))

    def maximum(self) -> int:
        return self._trace("maximum", UNBOUNDED, "unbounded")

    def notation(self) -> str:
        if self.compare == self.EQUALS and self.threshold == 1:
            return "%s!" % self.inner_notation()
        return "%s!%s%d" % (self.inner_notation(), self.compare, self.threshold)
