"""Module supervisor: inline documentation for warden/engine/supervisor.py."""
#
# PURPOSE:
# Runs one worker process per session and turns its output into session telemetry.
#
# KEY RESPONSIBILITIES:
# - Spawn the worker with stdout and stderr piped separately
# - Classify every output line and apply it to the session telemetry
# - Record the exit status exactly once (CompletionTracker)
# - Kill the child on every exit path, including a failed start()
#
# INTEGRATION:
# - Used by: warden/engine/registry.py
# - Depends on: warden/toolkit/output_classifier.py, warden/toolkit/executable.py
#

# warden/engine/supervisor.py
# Owns one worker process: spawn, stdout/stderr capture, completion tracking.

from __future__ import annotations

import asyncio
import logging
import os
import signal
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from warden.engine.models import (
    Completion,
    Finding,
    SessionSnapshot,
    SessionState,
    Statistics,
)
from warden.errors import ErrorCode, SignalError, SpawnError, WaitError
from warden.toolkit.executable import ExecutableResolver
from warden.toolkit.output_classifier import RawLine, classify_line

logger = logging.getLogger(__name__)

# Longest single output line accepted before the reader skips it.
STREAM_LIMIT = 1024 * 1024
# How long aclose() waits for background tasks after killing the process.
CLOSE_TIMEOUT_SECONDS = 5.0


class CompletionTracker:
    """Write-once cell holding the terminal Completion of a session."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._completion: Optional[Completion] = None
        self._done = asyncio.Event()

    @property
    def is_set(self) -> bool:
        with self._lock:
            return self._completion is not None

    def get(self) -> Optional[Completion]:
        with self._lock:
            return self._completion

    def record(self, completion: Completion) -> bool:
        """Store the completion. Returns False (and keeps the first one) if already set."""
        with self._lock:
            if self._completion is not None:
                return False
            self._completion = completion
        self._done.set()
        return True

    async def wait(self) -> Completion:
        await self._done.wait()
        completion = self.get()
        assert completion is not None
        return completion


class SessionSupervisor:
    """
    One supervised run of the worker executable.

    Three background tasks share the session telemetry: a stdout reader, a
    stderr reader and the completion waiter. Statistics, findings and raw
    output each have their own lock so the readers never contend on an
    unrelated field; snapshots copy each field independently.

    Use SessionSupervisor.start() to create one. The child process is killed
    if the supervisor is closed, leaves an ``async with`` block, or is
    garbage collected while the process is still running.
    """

    def __init__(
        self,
        session_id: str,
        client: str,
        argv: Sequence[str],
        process: asyncio.subprocess.Process,
        command: Sequence[str],
    ):
        self.session_id = session_id
        self.client = client
        self._argv: Tuple[str, ...] = tuple(argv)
        self._process = process
        self._process_id: int = process.pid
        self.command: Tuple[str, ...] = tuple(command)
        self.started_at = datetime.now(timezone.utc)

        self._stats_lock = threading.Lock()
        self._statistics = Statistics()
        self._findings_lock = threading.Lock()
        self._findings: List[Finding] = []
        self._output_lock = threading.Lock()
        self._raw_output: List[str] = []

        self.completion = CompletionTracker()
        self._readers: List[asyncio.Task] = []
        self._waiter: Optional[asyncio.Task] = None
        self._launched = False

    @property
    def argv(self) -> Tuple[str, ...]:
        return self._argv

    @property
    def process_id(self) -> int:
        return self._process_id

    @property
    def state(self) -> SessionState:
        if not self._launched:
            return SessionState.STARTING
        if self.completion.is_set:
            return SessionState.COMPLETED
        return SessionState.RUNNING

    @property
    def is_running(self) -> bool:
        return self._process.returncode is None and not self.completion.is_set

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    async def start(
        cls,
        client: str,
        session_id: str,
        argv: Sequence[str],
        resolver: ExecutableResolver,
    ) -> "SessionSupervisor":
        """Spawn the worker and start the capture and completion tasks."""
        try:
            prefix = list(resolver())
        except SpawnError:
            raise
        except Exception as exc:
            raise SpawnError(
                f"could not resolve worker executable: {exc}",
                details={"session_id": session_id},
            ) from exc

        if not prefix or not prefix[0]:
            raise SpawnError(
                "worker executable resolver returned no program to run",
                details={"session_id": session_id},
            )
        command = prefix + list(argv)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=STREAM_LIMIT,
            )
        except FileNotFoundError as exc:
            raise SpawnError(
                f"worker executable '{command[0]}' not found",
                code=ErrorCode.TOOL_NOT_INSTALLED,
                details={"session_id": session_id, "command": command},
            ) from exc
        except OSError as exc:
            raise SpawnError(
                f"failed to start '{command[0]}': {exc}",
                details={"session_id": session_id, "command": command},
            ) from exc

        try:
            supervisor = cls(session_id, client, argv, process, command)
            supervisor._launch()
        except BaseException:
            _force_kill(process)
            raise

        logger.info(
            f"[{session_id}] started '{command[0]} {list(argv)}' as process {supervisor.process_id}"
        )
        return supervisor

    def _launch(self) -> None:
        assert self._process.stdout is not None and self._process.stderr is not None
        self._readers = [
            asyncio.create_task(
                self._capture(self._process.stdout, "stdout"),
                name=f"warden-{self.session_id}-stdout",
            ),
            asyncio.create_task(
                self._capture(self._process.stderr, "stderr"),
                name=f"warden-{self.session_id}-stderr",
            ),
        ]
        self._waiter = asyncio.create_task(
            self._wait_for_exit(), name=f"warden-{self.session_id}-wait"
        )
        self._launched = True

    def stop(self) -> None:
        """
        Send SIGTERM to the worker. Does not wait for it to exit; the
        completion waiter observes the exit.
        """
        if not self.is_running:
            raise SignalError(
                f"process {self.process_id} has already exited",
                details={"session_id": self.session_id, "process_id": self.process_id},
            )
        try:
            os.kill(self.process_id, signal.SIGTERM)
        except OSError as exc:
            raise SignalError(
                f"could not signal process {self.process_id}: {exc}",
                details={"session_id": self.session_id, "process_id": self.process_id},
            ) from exc
        logger.info(f"[{self.session_id}] sent SIGTERM to process {self.process_id}")

    def kill(self) -> None:
        """Force-kill the worker if it is still running."""
        if self._process.returncode is None:
            logger.warning(f"[{self.session_id}] killing process {self.process_id}")
            _force_kill(self._process)

    async def wait(self) -> Completion:
        return await self.completion.wait()

    async def wait_drained(self) -> None:
        """Wait until both output streams reached EOF and every line was classified."""
        if self._readers:
            await asyncio.gather(*self._readers)

    async def aclose(self) -> None:
        self.kill()
        tasks = [t for t in (*self._readers, self._waiter) if t is not None]
        if not tasks:
            return
        _, pending = await asyncio.wait(tasks, timeout=CLOSE_TIMEOUT_SECONDS)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                f"[{self.session_id}] {len(pending)} background task(s) cancelled on close"
            )

    async def __aenter__(self) -> "SessionSupervisor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __del__(self):
        process = getattr(self, "_process", None)
        if process is not None and process.returncode is None:
            try:
                os.kill(process.pid, signal.SIGKILL)
            except OSError:
                # Already reaped, or never ours to kill.
                pass

    # ------------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------------

    async def _capture(self, stream: asyncio.StreamReader, name: str) -> None:
        while True:
            try:
                line = await stream.readuntil(b"\n")
            except asyncio.IncompleteReadError as exc:
                # EOF: whatever is left is the final, unterminated line.
                line = exc.partial
            except asyncio.LimitOverrunError as exc:
                await stream.read(exc.consumed)
                await _skip_rest_of_line(stream)
                logger.warning(f"[{self.session_id}] skipped oversized {name} line")
                self._append_raw(f"[{name}] line exceeded {STREAM_LIMIT} bytes and was skipped")
                continue
            except Exception as exc:
                logger.error(f"[{self.session_id}] {name} capture failed: {exc}")
                self._append_raw(f"[{name}] capture failed: {exc}")
                return
            if not line:
                return
            self.ingest(line.decode("utf-8", errors="replace"))

    async def _wait_for_exit(self) -> None:
        try:
            code = await self._process.wait()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error = WaitError(
                f"waiting for process {self.process_id} failed: {exc}",
                details={"session_id": self.session_id},
            )
            logger.error(f"[{self.session_id}] child process {self.process_id} completed with error {error}")
            self.completion.record(Completion.with_error(error.message))
            return

        logger.info(f"[{self.session_id}] child process {self.process_id} completed with code {code}")
        self.completion.record(Completion.with_status(code))

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------

    def ingest(self, line: str) -> None:
        """Classify one output line and apply it to the session telemetry."""
        classified = classify_line(line)
        if classified is None:
            return
        if isinstance(classified, Statistics):
            with self._stats_lock:
                self._statistics = classified
        elif isinstance(classified, Finding):
            with self._findings_lock:
                self._findings.append(classified)
        elif isinstance(classified, RawLine):
            self._append_raw(classified.text)

    def _append_raw(self, text: str) -> None:
        with self._output_lock:
            self._raw_output.append(text)

    @property
    def statistics(self) -> Statistics:
        with self._stats_lock:
            return replace(self._statistics)

    @property
    def findings(self) -> List[Finding]:
        with self._findings_lock:
            return list(self._findings)

    @property
    def raw_output(self) -> List[str]:
        with self._output_lock:
            return list(self._raw_output)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            client=self.client,
            argv=self.argv,
            process_id=self.process_id,
            started_at=self.started_at,
            state=self.state,
            statistics=self.statistics,
            findings=self.findings,
            raw_output=self.raw_output,
            completion=self.completion.get(),
        )


def _force_kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass


async def _skip_rest_of_line(stream: asyncio.StreamReader) -> None:
    """Discard input up to and including the next newline (or EOF)."""
    while True:
        try:
            await stream.readuntil(b"\n")
            return
        except asyncio.LimitOverrunError as exc:
            await stream.read(exc.consumed)
        except asyncio.IncompleteReadError:
            return
