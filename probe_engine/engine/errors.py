"""Exception hierarchy for the probe pipeline."""

from __future__ import annotations


class ProbeError(Exception):
    """Base class for every error raised by probe_engine."""


class InvalidTargetError(ProbeError, ValueError):
    """Target is neither an IPv4 literal nor a domain name."""

    def __init__(self, target: str) -> None:
        super().__init__(f"Invalid target: {target!r}")
        self.target = target


class SpawnError(ProbeError):
    """The external tool could not be started."""


class ParseError(ProbeError, ValueError):
    """A recognised line carries a field that is not a valid number."""

    def __init__(self, line: str, field: str, value: str) -> None:
        super().__init__(f"cannot parse {field}={value!r}")
        self.line = line
        self.field = field
        self.value = value


class CollectionError(ProbeError):
    """Buffered collection produced no usable result."""


class ProcessExitError(CollectionError):
    """The external tool exited with a non-zero status."""

    def __init__(self, argv: list[str], returncode: int) -> None:
        super().__init__(f"{argv[0]} exited with status {returncode}")
        self.argv = argv
        self.returncode = returncode


class StreamingUnsupportedError(ProbeError):
    """The output sink cannot flush incrementally."""


class SinkClosedError(ProbeError):
    """The output sink no longer accepts writes (caller went away)."""
