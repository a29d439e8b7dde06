"""Buffered collector: all events after a clean exit, or an error."""

from __future__ import annotations

import logging

from probe_engine.engine.models import ParsedEvent
from probe_engine.engine.parsers import LineParser, apply_parser
from probe_engine.engine.runner import ProcessHandle

logger = logging.getLogger(__name__)


async def collect(handle: ProcessHandle, parser: LineParser) -> list[ParsedEvent]:
    """Parse stdout of *handle* to completion.

    Raises :class:`~probe_engine.engine.errors.ProcessExitError` if the tool
    fails; events read before the failure are discarded.
    """
    handle.claim(collect)
    events: list[ParsedEvent] = []
    try:
        async for line in handle.lines():
            event = apply_parser(parser, line)
            if event is not None:
                events.append(event)
        await handle.wait()
    except BaseException:
        await handle.release()
        raise

    logger.debug("pid=%d collected %d events", handle.pid, len(events))
    return events
