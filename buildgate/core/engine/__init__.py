"""Engine — dependency resolution, directory scoping, and stage execution."""

from buildgate.core.engine.resolver import (
    DependencyError,
    DependencyResolver,
    InstallFailedError,
    InstallVerificationFailedError,
    NoPackageManagerError,
    ResolvedTool,
    ResolverObserver,
)
from buildgate.core.engine.runner import (
    PipelineObserver,
    PipelineRunner,
    StageExecutionError,
    run_pipeline,
)
from buildgate.core.engine.workdir import DirectoryTransitionError, enter_directory, with_directory

__all__ = [
    "DependencyError",
    "DependencyResolver",
    "DirectoryTransitionError",
    "InstallFailedError",
    "InstallVerificationFailedError",
    "NoPackageManagerError",
    "PipelineObserver",
    "PipelineRunner",
    "ResolvedTool",
    "ResolverObserver",
    "StageExecutionError",
    "enter_directory",
    "run_pipeline",
    "with_directory",
]
