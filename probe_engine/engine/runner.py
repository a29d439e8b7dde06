"""Process runner: spawns a diagnostic tool and hands out its streams."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from probe_engine.engine.errors import ProcessExitError, SpawnError

logger = logging.getLogger(__name__)

DEFAULT_LINE_LIMIT = 64 * 1024


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r\n")


async def _skip_line(stream: asyncio.StreamReader) -> bool:
    """Consume up to and including the next newline; False at EOF."""
    while True:
        try:
            await stream.readuntil(b"\n")
            return True
        except asyncio.LimitOverrunError as exc:
            await stream.read(exc.consumed)
        except asyncio.IncompleteReadError:
            return False


class ProcessHandle:
    """One spawned child process.

    Owns the child's stdout/stderr pipes and its exit status. A handle is
    driven by exactly one consumer (see :meth:`claim`) and must be waited
    on exactly once, after its readers are done.
    """

    def __init__(self, argv: list[str], process: asyncio.subprocess.Process) -> None:
        self.argv = argv
        self._process = process
        self._owner: object | None = None
        self._waited = False

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    @property
    def has_stderr(self) -> bool:
        return self._process.stderr is not None

    def claim(self, owner: object) -> None:
        if self._owner is not None:
            raise RuntimeError(f"process {self.pid} is already driven by {self._owner!r}")
        self._owner = owner

    # -- reading ------------------------------------------------------------

    async def lines(self) -> AsyncIterator[str]:
        """Yield stdout lines in order, without their line terminator.

        A line longer than the reader limit is dropped whole.
        """
        stdout = self._process.stdout
        if stdout is None:
            return
        while True:
            try:
                raw = await stdout.readuntil(b"\n")
            except asyncio.IncompleteReadError as exc:
                if exc.partial:
                    yield _decode(exc.partial)
                return
            except asyncio.LimitOverrunError:
                logger.warning("pid=%d dropped over-long stdout line", self.pid)
                if not await _skip_line(stdout):
                    return
                continue
            yield _decode(raw)

    async def read_stderr(self, size: int) -> bytes:
        """Return the next chunk of stderr, ``b""`` at EOF."""
        stderr = self._process.stderr
        if stderr is None:
            return b""
        return await stderr.read(size)

    # -- lifecycle ----------------------------------------------------------

    async def wait(self) -> None:
        """Wait for exit; raise :class:`ProcessExitError` on non-zero status."""
        if self._waited:
            raise RuntimeError(f"process {self.pid} was already waited on")
        returncode = await self._process.wait()
        self._waited = True
        logger.info("pid=%d %s exited with status %d", self.pid, self.argv[0], returncode)
        if returncode != 0:
            raise ProcessExitError(self.argv, returncode)

    def kill(self) -> None:
        if self._process.returncode is None:
            try:
                self._process.kill()
            except ProcessLookupError:
                pass

    async def release(self) -> None:
        """Kill the child if still running and reap it, ignoring its status."""
        if self._waited:
            return
        self.kill()
        try:
            await self.wait()
        except ProcessExitError:
            pass


class ProcessRunner:
    """Creates :class:`ProcessHandle` objects via asyncio subprocesses."""

    def __init__(self, line_limit: int = DEFAULT_LINE_LIMIT) -> None:
        self._line_limit = line_limit

    async def spawn(self, argv: list[str], capture_stderr: bool = True) -> ProcessHandle:
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE if capture_stderr else asyncio.subprocess.DEVNULL,
                limit=self._line_limit,
            )
        except OSError as exc:
            raise SpawnError(f"cannot start {argv[0]}: {exc.strerror or exc}") from exc

        logger.info("pid=%d started: %s", process.pid, " ".join(argv))
        return ProcessHandle(argv, process)
