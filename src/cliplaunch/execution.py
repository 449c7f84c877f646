"""Execution pipeline: run a synthesized command against clipaste.

Lifecycle per run is Idle -> Running -> Succeeded | Failed. A new run
supersedes the previous result; if an earlier run finishes after a later
one started, its result is returned to its own caller but never stored.
Process failures are captured in the result, never raised.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from cliplaunch.errors import CliplaunchError
from cliplaunch.log_utils import log_context, log_event

logger = logging.getLogger(__name__)

NOTIFY_SUCCESS = "success"
NOTIFY_FAILURE = "failure"

# (kind, title, message)
Notifier = Callable[[str, str, str], None]
StatusListener = Callable[["ExecutionStatus"], None]


class ExecutionStatus(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ExecutionError:
    message: str
    returncode: int | None = None
    stderr: str = ""


@dataclass(frozen=True)
class ExecutionResult:
    status: ExecutionStatus
    program: str
    argv: tuple[str, ...] = ()
    raw_output: bytes = b""
    output: str = ""
    returncode: int | None = None
    error: ExecutionError | None = None
    generation: int = 0
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])


def decode_output(data: bytes | str | None) -> str:
    """Decode process output as UTF-8, or describe it when it is not text."""
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return f"<{len(data)} bytes of non-UTF-8 output>"


def _failure_message(program: str, returncode: int, stderr: str, stdout: str) -> str:
    detail = stderr.strip() or stdout.strip()
    message = f"{program} exited with code {returncode}"
    return f"{message}: {detail}" if detail else message


class ExecutionPipeline:
    """Runs one clipaste invocation at a time, last run wins."""

    def __init__(
        self,
        *,
        notifier: Optional[Notifier] = None,
        on_status: Optional[StatusListener] = None,
        timeout: float | None = None,
    ) -> None:
        self._notifier = notifier
        self._on_status = on_status
        self._timeout = timeout
        self._generation = 0
        self._status = ExecutionStatus.IDLE
        self._result: ExecutionResult | None = None
        self._last_command: tuple[str, tuple[str, ...]] | None = None

    @property
    def status(self) -> ExecutionStatus:
        return self._status

    @property
    def result(self) -> ExecutionResult | None:
        return self._result

    @property
    def generation(self) -> int:
        return self._generation

    def _set_status(self, status: ExecutionStatus) -> None:
        self._status = status
        if self._on_status is not None:
            self._on_status(status)

    def _notify(self, kind: str, title: str, message: str) -> None:
        if self._notifier is not None:
            self._notifier(kind, title, message)

    async def execute(self, program: str, argv: Sequence[str]) -> ExecutionResult:
        """Run ``program`` with ``argv`` (no shell) and return the final result."""
        self._generation += 1
        generation = self._generation
        args = tuple(argv)
        self._last_command = (program, args)

        running = ExecutionResult(
            status=ExecutionStatus.RUNNING, program=program, argv=args, generation=generation
        )
        self._result = running
        self._set_status(ExecutionStatus.RUNNING)

        with log_context(run_id=running.run_id, program=program):
            log_event(logger, "execution.start", argv=list(args), generation=generation)
            result = await self._run(running)
            log_event(
                logger,
                "execution.finish",
                status=result.status.value,
                returncode=result.returncode,
                output_bytes=len(result.raw_output),
            )

            if generation != self._generation:
                log_event(logger, "execution.stale_result", level=logging.DEBUG, generation=generation)
                return result

        self._result = result
        self._set_status(result.status)
        if result.status is ExecutionStatus.SUCCEEDED:
            self._notify(NOTIFY_SUCCESS, "Done", "")
        else:
            self._notify(NOTIFY_FAILURE, "Clipaste error", result.error.message if result.error else "")
        return result

    async def run_again(self) -> ExecutionResult:
        """Restart the pipeline with the most recent program and argv."""
        if self._last_command is None:
            raise CliplaunchError("Nothing has been run yet")
        program, argv = self._last_command
        return await self.execute(program, argv)

    async def _run(self, running: ExecutionResult) -> ExecutionResult:
        def failed(message: str, **extra) -> ExecutionResult:
            return ExecutionResult(
                status=ExecutionStatus.FAILED,
                program=running.program,
                argv=running.argv,
                generation=running.generation,
                run_id=running.run_id,
                error=ExecutionError(
                    message=message,
                    returncode=extra.get("returncode"),
                    stderr=extra.get("stderr", ""),
                ),
                returncode=extra.get("returncode"),
                raw_output=extra.get("raw_output", b""),
                output=extra.get("output", ""),
            )

        try:
            proc = await asyncio.create_subprocess_exec(
                running.program,
                *running.argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.warning("Executable not found: %s", running.program)
            return failed(f"Executable not found: {running.program}")
        except PermissionError as exc:
            logger.warning("Executable not runnable: %s (%s)", running.program, exc)
            return failed(f"Executable is not runnable: {running.program} ({exc.strerror or exc})")
        except (OSError, ValueError) as exc:
            # ValueError: argv with an embedded NUL byte
            logger.exception("Failed to start %s", running.program)
            return failed(f"Failed to start {running.program}: {exc}")

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.communicate()
            return failed(f"{running.program} timed out after {self._timeout}s")

        output = decode_output(stdout)
        stderr_text = decode_output(stderr)
        if proc.returncode != 0:
            return failed(
                _failure_message(running.program, proc.returncode, stderr_text, output),
                returncode=proc.returncode,
                stderr=stderr_text,
                raw_output=stdout or b"",
                output=output,
            )

        return ExecutionResult(
            status=ExecutionStatus.SUCCEEDED,
            program=running.program,
            argv=running.argv,
            raw_output=stdout or b"",
            output=output,
            returncode=proc.returncode,
            generation=running.generation,
            run_id=running.run_id,
        )
