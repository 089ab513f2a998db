"""
Built-in pipeline — used when no buildgate.yml is found.

Checks a Rust book style repository: builds the helper crates, runs the
test suites, spellchecks, builds the book, and validates its links.
"""

from __future__ import annotations

from buildgate.core.models.pipeline import PipelineConfig
from buildgate.core.models.requirement import ToolRequirement
from buildgate.core.models.stage import Stage

DEFAULT_TOOLS: tuple[ToolRequirement, ...] = (
    ToolRequirement(command="cargo", package="cargo"),
    ToolRequirement(command="mdbook", package="mdbook"),
    ToolRequirement(command="aspell", package="aspell"),
    ToolRequirement(command="shellcheck", package="shellcheck"),
)

INSTALL_PLUGIN_STAGE = Stage(
    label="install-mdbook-trpl",
    description="Installing 'mdbook-trpl' to cargo's global bin directory",
    command=("cargo", "install", "--path", "packages/mdbook-trpl"),
    on_failure_message="Failed to install mdbook-trpl via 'cargo install'",
    success_message="'mdbook-trpl' installed successfully",
)

_BEFORE_PLUGIN: tuple[Stage, ...] = (
    Stage(
        label="build-trpl",
        description="Building the 'trpl' package (inside packages/trpl/)",
        working_directory="packages/trpl",
        command=("cargo", "build"),
        on_failure_message="'cargo build' failed in packages/trpl/",
        success_message="Successfully built 'trpl' package",
    ),
    Stage(
        label="test-main",
        description="Running main project tests with 'cargo test'",
        command=("cargo", "test"),
        on_failure_message="'cargo test' failed in the main project",
        success_message="Main project tests passed",
    ),
    Stage(
        label="test-mdbook-trpl",
        description="Building and testing the 'mdbook-trpl' package (inside packages/mdbook-trpl/)",
        working_directory="packages/mdbook-trpl",
        command=("cargo", "test"),
        on_failure_message="'cargo test' failed in packages/mdbook-trpl/",
        success_message="Successfully tested 'mdbook-trpl' package",
    ),
)

_AFTER_PLUGIN: tuple[Stage, ...] = (
    Stage(
        label="spellcheck",
        description="Running spellcheck script (ci/spellcheck.sh list)",
        command=("bash", "ci/spellcheck.sh", "list"),
        on_failure_message="'bash ci/spellcheck.sh list' failed",
        success_message="Spellcheck script ran successfully",
    ),
    Stage(
        label="build-book",
        description="Building mdBook documentation with 'mdbook build'",
        command=("mdbook", "build"),
        on_failure_message="'mdbook build' failed. Check your book configuration.",
        success_message="mdBook documentation built successfully",
    ),
    Stage(
        label="run-lfp",
        description="Running custom tool: 'cargo run --bin lfp src'",
        command=("cargo", "run", "--bin", "lfp", "src"),
        on_failure_message="Failed to run 'cargo run --bin lfp src'. Is the binary correctly built?",
        success_message="Custom tool 'lfp' executed successfully",
    ),
    Stage(
        label="validate",
        description="Running validation script: 'bash ci/validate.sh'",
        command=("bash", "ci/validate.sh"),
        on_failure_message="'bash ci/validate.sh' failed",
        success_message="Validation script completed successfully",
    ),
    Stage(
        label="linkcheck",
        description="Running link checker: 'bash scripts/linkcheck.sh book'",
        command=("bash", "scripts/linkcheck.sh", "book"),
        on_failure_message="'bash scripts/linkcheck.sh book' failed. Check for broken links.",
        success_message="Link checking completed successfully",
    ),
)


def default_pipeline(install_plugin: bool = False) -> PipelineConfig:
    """Build the built-in pipeline.

    Args:
        install_plugin: Also install the mdbook-trpl preprocessor
            globally, between its tests and the spellcheck.
    """
    middle = (INSTALL_PLUGIN_STAGE,) if install_plugin else ()
    return PipelineConfig(
        name="rust-book",
        tools=DEFAULT_TOOLS,
        stages=_BEFORE_PLUGIN + middle + _AFTER_PLUGIN,
    )
