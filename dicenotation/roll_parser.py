import os
import typing

import lark

from dicenotation.roll import UnknownAlgorithm, UnknownExpression

DEFAULT_SIDES = 6
DEFAULT_QUANTITY = 1
DEFAULT_THRESHOLD = 1

Definition = typing.Dict[str, typing.Any]

# Terminals that can only show up while a pool is still being read.
_POOL_TERMINALS = {"DIE", "FUDGE", "PERCENT", "CUSTOM", "LPAR"}
_MODIFIER_TERMINALS = {"EXPLODE", "DROPKEEP", "ARITHMETIC"}


@lark.v_args(inline=True)
class _NotationTransformer(lark.Transformer):
    def __init__(self, default_sides: int = DEFAULT_SIDES) -> None:
        super().__init__()
        self.default_sides = default_sides

    def start(self, expression: typing.Optional[typing.List[Definition]] = None):
        return [] if expression is None else expression

    def expression(self, *terms: Definition) -> typing.List[Definition]:
        return list(terms)

    def term(self, pool: Definition, modifiers: typing.List[Definition]) -> Definition:
        return {"definition": pool, "modifiers": modifiers}

    def simple(self, quantity, _die, face) -> Definition:
        return {
            "simple": {
                "type": "D%s" % (self.default_sides if face is None else face),
                "quantity": DEFAULT_QUANTITY if quantity is None else int(quantity),
            }
        }

    def composite(self, expression: typing.List[Definition]) -> Definition:
        return {"composite": expression}

    def face(self, token: lark.Token) -> str:
        return str(token).upper()

    def modifiers(self, *modifiers: Definition) -> typing.List[Definition]:
        return list(modifiers)

    def algorithm(self, token: lark.Token, threshold) -> Definition:
        value = DEFAULT_THRESHOLD if threshold is None else int(threshold)
        if token.type == "DROPKEEP":
            return {"modifier": "dropkeep", "operator": token.upper(), "value": value}
        return {"modifier": "explode", "operator": token[1:] or "=", "value": value}

    def arithmetic(self, token: lark.Token) -> Definition:
        return {"modifier": "arithmetic", "operator": token[0], "value": int(token[1:])}


_grammar_file = os.path.join(os.path.dirname(__file__), "notation.lark")
with open(_grammar_file) as f:
    _grammar = lark.Lark(f, parser="lalr")


def _offending(text: str, e: lark.exceptions.UnexpectedInput) -> str:
    token = getattr(e, "token", None)
    if isinstance(e, lark.exceptions.UnexpectedEOF) or (
        token is not None and token.type == "$END"
    ):
        return ""
    if e.pos_in_stream is None:
        return text
    return text[e.pos_in_stream :]


def _expected(e: lark.exceptions.UnexpectedInput) -> typing.Set[str]:
    return set(getattr(e, "expected", None) or getattr(e, "allowed", None) or ())


class ExpressionParser:
    """Turns dice notation into a list of pool definitions.

    Each definition is a plain ``dict`` holding a ``definition`` (either
    ``{"simple": {"type": "D6", "quantity": 2}}`` or ``{"composite": [...]}``)
    and an ordered ``modifiers`` list. Nothing is rolled or validated beyond
    the grammar; that is left to the factory.
    """

    def __init__(self, default_sides: int = DEFAULT_SIDES) -> None:
        self.default_sides = default_sides

    def parse(self, expression: str) -> typing.List[Definition]:
        text = expression.strip()
        try:
            tree = _grammar.parse(text)
        except lark.exceptions.UnexpectedInput as e:
            raise self._translate(text, e)
        return _NotationTransformer(self.default_sides).transform(tree)

    def _translate(self, text: str, e: lark.exceptions.UnexpectedInput) -> Exception:
        expected = _expected(e)
        offending = _offending(text, e)
        token = getattr(e, "token", None)
        if (token is not None and token.type in _MODIFIER_TERMINALS) or (
            offending
            and offending[0] not in "()"
            and expected & _MODIFIER_TERMINALS
            and not expected & _POOL_TERMINALS
        ):
            return UnknownAlgorithm(
                "the submitted modifier `%s` is invalid or not supported" % offending
            )
        return UnknownExpression(
            "the submitted expression `%s` is invalid or not supported" % text
        )


def parse(text: str) -> typing.List[Definition]:
    return ExpressionParser().parse(text)
