"""Build toolchain runner.

Runs the configured build commands one after another as awaited
subprocesses. Each command string is split shell-style and may reference
`{output_dir}`, which is replaced with the staging directory; the same path is
exported as EASEL_BUILD_OUTPUT_DIR for tools that read it from the environment.

Output is captured and written to the log once the command exits. There is
no incremental progress reporting.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex

from easel.helpers.exceptions import BuildFailure

logger = logging.getLogger(__name__)

OUTPUT_DIR_ENV = "EASEL_BUILD_OUTPUT_DIR"

# Captured output is truncated to this many characters per stream in logs
_LOG_TAIL_CHARS = 4000


def render_command(command: str, output_dir: str) -> list[str]:
    """Split a configured command and substitute the output directory.

    Raises:
        BuildFailure: If the command is empty or cannot be parsed
    """
    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise BuildFailure(f"Invalid build command {command!r}: {e}") from e
    if not argv:
        raise BuildFailure("Empty build command")
    return [arg.replace("{output_dir}", output_dir) for arg in argv]


def _tail(data: bytes) -> str:
    text = data.decode("utf-8", errors="replace").strip()
    if len(text) > _LOG_TAIL_CHARS:
        return "..." + text[-_LOG_TAIL_CHARS:]
    return text


async def run_command(argv: list[str], cwd: str, output_dir: str, timeout_s: float | None = None) -> None:
    """Run one build command to completion.

    Args:
        argv: Program and arguments
        cwd: Working directory (the project root)
        output_dir: Staging directory, exported in the environment
        timeout_s: Kill the process after this many seconds (None = no limit)

    Raises:
        BuildFailure: Command missing, timed out, or exited non-zero
    """
    env = dict(os.environ)
    env[OUTPUT_DIR_ENV] = output_dir
    logger.info(f"[Rebuild] Running: {shlex.join(argv)}")
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise BuildFailure(f"Could not start {argv[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise BuildFailure(f"{argv[0]} timed out after {timeout_s:g}s") from None

    out, err = _tail(stdout), _tail(stderr)
    if proc.returncode != 0:
        if out:
            logger.error(f"[Rebuild] {argv[0]} stdout:\n{out}")
        if err:
            logger.error(f"[Rebuild] {argv[0]} stderr:\n{err}")
        raise BuildFailure(f"{argv[0]} exited with code {proc.returncode}")

    if out:
        logger.info(f"[Rebuild] {argv[0]} output:\n{out}")
    if err:
        logger.info(f"[Rebuild] {argv[0]} stderr:\n{err}")


async def run_build(commands: list[str], cwd: str, output_dir: str, timeout_s: float | None = None) -> None:
    """Run every build command in order, stopping at the first failure.

    Raises:
        BuildFailure: From the first command that fails
    """
    if not commands:
        raise BuildFailure("No build commands configured")
    for command in commands:
        await run_command(render_command(command, output_dir), cwd, output_dir, timeout_s)
