"""Line parsers: one line of tool output in, at most one event out."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from probe_engine.engine.errors import ParseError
from probe_engine.engine.models import (
    CycleEvent,
    HopEvent,
    LatencyProbeEvent,
    ParsedEvent,
    RouteProbeEvent,
)

logger = logging.getLogger(__name__)


def _atoi(value: str) -> int:
    """Lenient integer conversion: anything unparsable counts as 0."""
    try:
        return int(value)
    except ValueError:
        return 0


class LineParser(ABC):
    """Turns a raw stdout line into a :data:`ParsedEvent`.

    ``parse`` returns ``None`` for lines that carry nothing of interest.
    It may raise :class:`ParseError` for a recognised line with a bad
    numeric field; callers skip such lines (see :func:`apply_parser`).
    """

    name: str = "base"

    @abstractmethod
    def parse(self, line: str) -> ParsedEvent | None: ...


class MtrRawParser(LineParser):
    """Parser for ``mtr --raw`` output.

    Recognised records::

        x <cycle> <cycle_id>
        h <hop> <address>
        p <hop> <rtt_usec> <cycle_id>

    Never raises; malformed numbers become 0.
    """

    name = "mtr"

    def parse(self, line: str) -> ParsedEvent | None:
        parts = line.split()
        if not parts:
            return None

        kind = parts[0]
        if kind == "x" and len(parts) >= 3:
            return CycleEvent(cycle=_atoi(parts[1]), cycle_id=_atoi(parts[2]))
        if kind == "h" and len(parts) >= 3:
            return HopEvent(hop=_atoi(parts[1]), ip=parts[2])
        if kind == "p" and len(parts) >= 4:
            return RouteProbeEvent(
                hop=_atoi(parts[1]),
                rtt=_atoi(parts[2]),
                cycle_id=_atoi(parts[3]),
            )
        return None


class PingParser(LineParser):
    """Parser for iputils / BusyBox ``ping`` echo-reply lines."""

    name = "ping"

    def parse(self, line: str) -> ParsedEvent | None:
        if "bytes from" not in line:
            return None

        seq = ""
        time_ms = ""
        for field in line.split():
            if field.startswith("icmp_seq="):
                seq = field[len("icmp_seq="):]
            elif field.startswith("seq="):  # BusyBox
                seq = field[len("seq="):]
            elif field.startswith("time="):
                time_ms = field[len("time="):].removesuffix(" ms").strip()

        if not seq or not time_ms:
            return None

        try:
            rtt = float(time_ms)
        except ValueError:
            raise ParseError(line, "time", time_ms) from None

        return LatencyProbeEvent(seq=_atoi(seq), rtt_ms=rtt, raw_line=line)


def apply_parser(parser: LineParser, line: str) -> ParsedEvent | None:
    """Run *parser* on *line*, skipping lines that fail numeric parsing."""
    try:
        return parser.parse(line)
    except ParseError as exc:
        logger.debug("parser=%s skipped line %r: %s", parser.name, line, exc)
        return None
