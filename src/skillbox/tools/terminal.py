"""Command execution capability used to run skill scripts."""

import asyncio
import logging
import shlex
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Awaitable, Callable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ExecutionRequest(BaseModel):
    """A command to run, with the policy it must run under."""

    command: list[str] = Field(min_length=1)
    working_directory: Path
    timeout: float = Field(gt=0)  # seconds
    requires_approval: bool = True

    @property
    def command_line(self) -> str:
        """Shell-quoted rendering of the command, for display only."""
        return shlex.join(self.command)


class ExecutionResult(BaseModel):
    """
    Outcome reported by a Terminal.

    `error` is set for anything other than a clean exit: non-zero exit code,
    timeout, spawn failure or denied approval.
    """

    output: str = ""
    exit_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


Approver = Callable[[ExecutionRequest], Awaitable[bool] | bool]


class Terminal(ABC):
    """Runs commands on behalf of the dispatcher."""

    @abstractmethod
    async def run(self, request: ExecutionRequest) -> ExecutionResult:
        """
        Execute a request and report its combined output.

        Args:
            request: Command, working directory and policy

        Returns:
            ExecutionResult with stdout and stderr combined
        """


class SubprocessTerminal(Terminal):
    """
    Terminal that spawns commands as local subprocesses.

    The command list is passed straight to the OS without a shell. When a
    request requires approval, the approver is asked before the first run of
    each (working directory, interpreter, script) combination; approvals last
    for the lifetime of this terminal. Without an approver such requests are
    refused.
    """

    def __init__(self, approver: Approver | None = None):
        self.approver = approver
        self._approved: set[tuple[str, ...]] = set()

    @staticmethod
    def _approval_key(request: ExecutionRequest) -> tuple[str, ...]:
        return (str(request.working_directory), *request.command[:2])

    def is_approved(self, request: ExecutionRequest) -> bool:
        return self._approval_key(request) in self._approved

    def approve(self, request: ExecutionRequest) -> None:
        """Pre-approve the script targeted by request."""
        self._approved.add(self._approval_key(request))

    async def _check_approval(self, request: ExecutionRequest) -> bool:
        if not request.requires_approval or self.is_approved(request):
            return True
        if self.approver is None:
            return False

        result = self.approver(request)
        if asyncio.iscoroutine(result):
            result = await result
        if result:
            self.approve(request)
        return bool(result)

    async def run(self, request: ExecutionRequest) -> ExecutionResult:
        if not await self._check_approval(request):
            logger.info(f"Execution not approved: {request.command_line}")
            return ExecutionResult(
                error=f"Error: Execution of '{request.command_line}' was not approved"
            )

        logger.info(
            f"Running '{request.command_line}' in {request.working_directory}"
        )
        try:
            process = await asyncio.create_subprocess_exec(
                *request.command,
                cwd=request.working_directory,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning(f"Failed to start '{request.command_line}': {e}")
            return ExecutionResult(error=f"Error starting command: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=request.timeout
            )
        except asyncio.TimeoutError:
            try:
                process.kill()
            except ProcessLookupError:
                pass  # exited on its own before the kill
            await process.wait()
            logger.warning(f"Timed out after {request.timeout:g}s: {request.command_line}")
            return ExecutionResult(
                exit_code=process.returncode,
                error=f"Error: Command timed out after {request.timeout:g} seconds",
            )

        output = _combine(stdout, stderr)
        if process.returncode != 0:
            return ExecutionResult(
                output=output,
                exit_code=process.returncode,
                error=f"Command exited with code {process.returncode}:\n{output}",
            )
        return ExecutionResult(
            output=output or "Command completed with no output",
            exit_code=process.returncode,
        )


def _combine(stdout: bytes | None, stderr: bytes | None) -> str:
    output = stdout.decode(errors="replace") if stdout else ""
    error = stderr.decode(errors="replace") if stderr else ""
    if output and error:
        return f"{output}\n{error}"
    return output or error
