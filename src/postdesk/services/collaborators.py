"""External process collaborators: post scaffolder and site deploy."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from postdesk.content.errors import EntryNotFoundError, ExternalProcessError

logger = structlog.get_logger()

# git exits 1 from `commit` when the tree is clean
NOTHING_TO_COMMIT = 1


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one external process invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic(self) -> str:
        """Captured error text, preferring stderr."""
        return (self.stderr or self.stdout).strip()


ProcessRunner = Callable[[Sequence[str], Path], Awaitable[ProcessResult]]
Scaffolder = Callable[[str], Awaitable[ProcessResult]]
Deployer = Callable[[str], Awaitable[ProcessResult]]


async def run_process(argv: Sequence[str], cwd: Path) -> ProcessResult:
    """Run a command to completion and capture its output.

    Args:
        argv: Program and arguments.
        cwd: Working directory.

    Returns:
        Exit code and decoded output streams.

    Raises:
        ExternalProcessError: If the process cannot be started.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.error("process_spawn_failed", argv=list(argv), error=str(e))
        raise ExternalProcessError(f"Failed to start {argv[0]}: {e}") from e

    stdout, stderr = await process.communicate()
    return ProcessResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


class ScriptScaffolder:
    """Creates a post by invoking the site's scaffolding script.

    Runs ``<shell> <script> post <name>`` from the content root. What the
    script lays down inside the new post is not inspected here.
    """

    def __init__(
        self,
        script: Path,
        cwd: Path,
        shell: str = "fish",
        runner: ProcessRunner = run_process,
    ) -> None:
        self.script = script
        self.cwd = cwd
        self.shell = shell
        self.runner = runner

    async def __call__(self, name: str) -> ProcessResult:
        argv = [str(self.script), "post", name]
        if self.shell:
            argv.insert(0, self.shell)

        logger.info("scaffold_starting", name=name)
        result = await self.runner(argv, self.cwd)
        if not result.ok:
            logger.warning("scaffold_failed", name=name, returncode=result.returncode)
        return result


class GitDeployer:
    """Publishes the site repository with add, commit and push.

    A commit that finds nothing to change is treated as success, which also
    means a silently ineffective ``add`` goes unnoticed.
    """

    def __init__(self, repo: Path, runner: ProcessRunner = run_process) -> None:
        self.repo = repo
        self.runner = runner

    async def _step(
        self,
        name: str,
        argv: list[str],
        allowed: tuple[int, ...] = (0,),
    ) -> ProcessResult:
        result = await self.runner(argv, self.repo)
        if result.returncode not in allowed:
            logger.warning("deploy_step_failed", step=name, returncode=result.returncode)
            raise ExternalProcessError(
                f"git {name} failed: {result.stderr}",
                output=result.diagnostic,
            )
        logger.info("deploy_step_done", step=name, returncode=result.returncode)
        return result

    async def __call__(self, message: str) -> ProcessResult:
        if not self.repo.is_dir():
            raise EntryNotFoundError("Site directory not found", str(self.repo))

        await self._step("add", ["git", "add", "."])
        await self._step(
            "commit",
            ["git", "commit", "-am", message],
            allowed=(0, NOTHING_TO_COMMIT),
        )
        return await self._step("push", ["git", "push"])
