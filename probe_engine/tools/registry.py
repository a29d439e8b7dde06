"""Probe tool registry: maps a probe kind to its command line and parser."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from probe_engine.engine.models import ProbeKind
from probe_engine.engine.parsers import LineParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeTool:
    """Registration record for a single diagnostic binary."""

    kind: ProbeKind
    description: str
    binary: str
    args: Callable[[str], list[str]]
    parser_factory: Callable[[], LineParser]

    def argv(self, target: str) -> list[str]:
        return [self.binary, *self.args(target)]

    def parser(self) -> LineParser:
        return self.parser_factory()


class ToolRegistry:
    """Central store of probe tools, one per :class:`ProbeKind`."""

    def __init__(self) -> None:
        self._tools: dict[ProbeKind, ProbeTool] = {}

    def register(self, tool: ProbeTool) -> None:
        self._tools[tool.kind] = tool
        logger.info("Registered probe %s (binary=%s)", tool.kind.value, tool.binary)

    def get(self, kind: ProbeKind | str) -> ProbeTool:
        try:
            return self._tools[ProbeKind(kind)]
        except (KeyError, ValueError):
            raise ValueError(f"Probe '{kind}' not found") from None

    def kinds(self) -> list[ProbeKind]:
        return list(self._tools)
