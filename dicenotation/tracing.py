import logging
import typing

if typing.TYPE_CHECKING:
    from dicenotation.roll import Rollable


class Trace:
    """One evaluation step: which node ran, which method, and what it summed."""

    def __init__(self, rollable: "Rollable", source: str, result: int, line: str):
        self.rollable = rollable
        self.source = source
        self.result = result
        self.line = line

    @property
    def operation(self) -> str:
        return self.source.rsplit(".", 1)[-1]

    def as_dict(self) -> typing.Dict[str, typing.Any]:
        return {
            "source": self.source,
            "notation": self.rollable.notation(),
            "line": self.line,
            "result": self.result,
        }

    def __repr__(self) -> str:
        return "[%s] - %s : %s = %s" % (
            self.source,
            self.rollable.notation(),
            self.line,
            self.result,
        )


class Tracer:
    def append(self, trace: Trace) -> None:
        raise NotImplementedError


class NullTracer(Tracer):
    def append(self, trace: Trace) -> None:
        pass


class MemoryTracer(Tracer):
    def __init__(self) -> None:
        self.traces: typing.List[Trace] = []

    def append(self, trace: Trace) -> None:
        self.traces.append(trace)

    def clear(self) -> None:
        self.traces.clear()

    def __len__(self) -> int:
        return len(self.traces)

    def __iter__(self) -> typing.Iterator[Trace]:
        return iter(self.traces)


class LogTracer(Tracer):
    def __init__(
        self, logger: typing.Optional[logging.Logger] = None, level: int = logging.DEBUG
    ) -> None:
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.level = level

    def append(self, trace: Trace) -> None:
        if not self.logger.isEnabledFor(self.level):
            return
        self.logger.log(
            self.level,
            "[%s] - %s : %s = %s",
            trace.source,
            trace.rollable.notation(),
            trace.line,
            trace.result,
        )
