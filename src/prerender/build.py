"""External build step — run the app's own build command before rendering.

The command is handed to the shell unchanged with inherited stdio, so the
user sees the build tool's own output.  Only its exit status matters.
"""

from __future__ import annotations

import asyncio

from prerender._errors import BuildError


async def run_build(command: str) -> None:
    """Run *command* through the shell.

    Raises:
        BuildError: If the command exits with a non-zero status.

    """
    process = await asyncio.create_subprocess_shell(command)
    returncode = await process.wait()
    if returncode != 0:
        msg = f"Build failed with exit code {returncode}: {command}"
        raise BuildError(msg)
