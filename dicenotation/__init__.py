from dicenotation.factory import Factory
from dicenotation.modifiers import Arithmetic, DropKeep, Explode
from dicenotation.roll import (
    CanNotBeRolled,
    Cup,
    CustomDie,
    DiceError,
    FudgeDie,
    IllegalValue,
    PercentileDie,
    Rollable,
    SidedDie,
    UnknownAlgorithm,
    UnknownExpression,
)
from dicenotation.roll_parser import ExpressionParser
from dicenotation.tracing import LogTracer, MemoryTracer, NullTracer, Trace, Tracer
