"""Collaborators invoked as external processes."""

from postdesk.services.collaborators import (
    Deployer,
    GitDeployer,
    ProcessResult,
    ProcessRunner,
    Scaffolder,
    ScriptScaffolder,
    run_process,
)

__all__ = [
    "Deployer",
    "GitDeployer",
    "ProcessResult",
    "ProcessRunner",
    "Scaffolder",
    "ScriptScaffolder",
    "run_process",
]
