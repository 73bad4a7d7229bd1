"""Service for spawning host processes."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


class ProcessService:
    """Spawns host subprocesses on the running event loop."""

    def build_env(self, extra: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """Return the current environment overlaid with `extra`."""
        env = dict(os.environ)
        if extra:
            env.update(extra)
        return env

    async def spawn(
        self,
        args: list[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
        shell: bool = False,
    ) -> asyncio.subprocess.Process:
        """Start a process without waiting for it.

        Args:
            args: Argument vector, or a single shell line when `shell` is set
            env: Extra environment variables on top of the current environment
            cwd: Working directory
            shell: Run `args[0]` through the system shell

        Raises:
            OSError: If the process cannot be started
        """
        full_env = self.build_env(env)
        logger.debug(f"Spawning {args} in {cwd or os.getcwd()}")
        if shell:
            return await asyncio.create_subprocess_shell(args[0], env=full_env, cwd=cwd)
        return await asyncio.create_subprocess_exec(*args, env=full_env, cwd=cwd)

    async def run(
        self,
        args: list[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
        shell: bool = False,
    ) -> int:
        """Run a process to completion and return its exit code.

        Raises:
            OSError: If the process cannot be started
        """
        process = await self.spawn(args, env=env, cwd=cwd, shell=shell)
        return await process.wait()
