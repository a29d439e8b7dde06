"""CLI adapter: runs one probe and prints a JSON array or NDJSON to stdout."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from probe_engine import create_service
from probe_engine.engine.errors import InvalidTargetError, ProbeError
from probe_engine.engine.models import ProbeKind


class StdoutSink:
    """Sink over a binary stdout."""

    def __init__(self, stream=None) -> None:
        self._stream = stream or sys.stdout.buffer

    async def write(self, data: bytes) -> None:
        self._stream.write(data)

    async def flush(self) -> None:
        self._stream.flush()


async def run_cli(kind: ProbeKind, target: str, streaming: bool = False) -> int:
    service = create_service()
    try:
        if streaming:
            ok = await service.run_streaming(kind, target, StdoutSink())
            return 0 if ok else 1
        events = await service.run_buffered(kind, target)
    except InvalidTargetError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 2
    except ProbeError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 1

    print(json.dumps([e.model_dump(mode="json", by_alias=True) for e in events]), flush=True)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(prog="probe-cli", description="Run ping or mtr and print JSON.")
    parser.add_argument("kind", choices=[k.value for k in ProbeKind])
    parser.add_argument("target")
    parser.add_argument("--stream", action="store_true", help="print NDJSON as results arrive")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(asyncio.run(run_cli(ProbeKind(args.kind), args.target, streaming=args.stream)))


if __name__ == "__main__":
    main()
