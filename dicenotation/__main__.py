import argparse
import logging
import sys
import typing

from dicenotation.factory import Factory
from dicenotation.roll import DiceError
from dicenotation.roll_parser import ExpressionParser
from dicenotation.settings import load_settings
from dicenotation.tracing import LogTracer

logger = logging.getLogger("dicenotation")


def _argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dicenotation", description="Roll dice notation expressions."
    )
    parser.add_argument("expressions", nargs="+", metavar="EXPR")
    parser.add_argument("--times", type=int, default=1, help="rolls per expression")
    parser.add_argument("--settings", help="YAML file overriding the default settings")
    parser.add_argument(
        "--trace", action="store_true", default=None, help="log every evaluation step"
    )
    return parser


def main(argv: typing.List[str] = sys.argv) -> int:
    args = _argument_parser().parse_args(argv[1:])
    try:
        settings = load_settings(args.settings)
    except (OSError, DiceError) as e:
        print("error: %s" % e)
        return 1

    trace = settings["trace"] if args.trace is None else args.trace
    logging.basicConfig(level="DEBUG" if trace else settings["log_level"])

    factory = Factory(
        parser=ExpressionParser(default_sides=settings["default_sides"]),
        tracer=LogTracer(logger) if trace else None,
        max_explosions=settings["max_explosions"],
    )

    status = 0
    for expression in args.expressions:
        try:
            rollable = factory.new_instance(expression)
        except DiceError as e:
            print("error: %s" % e)
            status = 1
            continue
        rolls = [rollable.roll() for _ in range(args.times)]
        print(
            "%s: %s (min %d, max %d)"
            % (
                rollable.notation(),
                ", ".join(str(x) for x in rolls),
                rollable.minimum(),
                rollable.maximum(),
            )
        )
    return status


if __name__ == "__main__":
    sys.exit(main())
