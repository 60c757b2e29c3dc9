import logging
import typing

from dicenotation.modifiers import DEFAULT_MAX_EXPLOSIONS, Arithmetic, DropKeep, Explode
from dicenotation.roll import (
    Cup,
    CustomDie,
    Die,
    FudgeDie,
    PercentileDie,
    Rollable,
    SidedDie,
)
from dicenotation.roll_parser import Definition, ExpressionParser
from dicenotation.tracing import NullTracer, Tracer

logger = logging.getLogger(__name__)


class Factory:
    def __init__(
        self,
        parser: typing.Optional[ExpressionParser] = None,
        tracer: typing.Optional[Tracer] = None,
        rng: typing.Any = None,
        max_explosions: int = DEFAULT_MAX_EXPLOSIONS,
    ) -> None:
        self.parser = parser if parser is not None else ExpressionParser()
        self.tracer = tracer if tracer is not None else NullTracer()
        self.rng = rng
        self.max_explosions = max_explosions

    def new_instance(self, expression: str) -> Rollable:
        result = self.create_from_parsed_definition(self.parser.parse(expression))
        logger.debug("built `%s` from `%s`", result.notation(), expression)
        return result

    def create_from_parsed_definition(self, parsed: typing.List[Definition]) -> Rollable:
        pool = Cup(tracer=self.tracer)
        for part in parsed:
            pool = self._add_rollable(pool, part)
        return self._flatten(pool)

    def _add_rollable(self, pool: Cup, part: Definition) -> Cup:
        rollable = self._create_rollable(part["definition"])
        for modifier in part["modifiers"]:
            rollable = self._decorate(rollable, modifier)
        rollable = self._flatten(rollable)
        # An unmodified pool joins the surrounding pool die by die.
        if isinstance(rollable, Cup):
            return pool.with_added_rollable(*rollable)
        return pool.with_added_rollable(rollable)

    def _create_rollable(self, definition: Definition) -> Rollable:
        if "composite" in definition:
            return self.create_from_parsed_definition(definition["composite"])
        simple = definition["simple"]
        return Cup.from_rollable(
            self._create_die(simple["type"]), simple["quantity"], tracer=self.tracer
        )

    def _create_die(self, notation: str) -> Die:
        if notation == "DF":
            return FudgeDie(self.rng, self.tracer)
        elif notation == "D%":
            return PercentileDie(self.rng, self.tracer)
        elif "[" in notation:
            return CustomDie.from_notation(notation, self.rng, self.tracer)
        return SidedDie.from_notation(notation, self.rng, self.tracer)

    def _decorate(self, rollable: Rollable, modifier: Definition) -> Rollable:
        if modifier["modifier"] == "arithmetic":
            return Arithmetic(
                rollable, modifier["operator"], modifier["value"], tracer=self.tracer
            )
        elif modifier["modifier"] == "dropkeep":
            return DropKeep(
                rollable, modifier["operator"], modifier["value"], tracer=self.tracer
            )
        return Explode(
            rollable,
            modifier["operator"],
            modifier["value"],
            max_explosions=self.max_explosions,
            tracer=self.tracer,
        )

    @staticmethod
    def _flatten(rollable: Rollable) -> Rollable:
        if isinstance(rollable, Cup) and len(rollable) == 1:
            return next(iter(rollable))
        return rollable
