"""Invoke tasks for the Witness development workflow.

Every task shells out to the `uv` CLI so the virtual environment, test runs,
linting, and local serving of the archive API all use the same toolchain.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"
LINT_TARGETS = ("src", "tests", "tasks.py")


def _run_uv(ctx: Context, args: Sequence[str], *, echo: bool = True) -> None:
    """Run `uv` with ``args`` under a PTY, echoing the quoted command."""
    ctx.run(shlex.join(("uv", *args)), echo=echo, pty=True)


@task
def sync(ctx: Context, dev: bool = True) -> None:
    """Install the project and, by default, the development extra."""
    args = ["sync"]
    if dev:
        args.extend(["--extra", "dev"])
    _run_uv(ctx, args)


@task(help={"clean": "Empty dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into `dist/`."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _run_uv(ctx, ["build"])


@task(
    help={
        "k": "pytest -k expression for test selection.",
        "path": "Test path (defaults to tests/).",
        "options": "Extra flags passed to pytest unchanged.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite.

    Args:
        ctx: Invoke execution context.
        k: Expression selecting a subset of tests.
        path: File or directory to collect from.
        options: Additional pytest arguments.
    """
    args: list[str] = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    if options:
        args.extend(shlex.split(options))
    args.append(path)
    _run_uv(ctx, args)


@task(help={"fix": "Let ruff apply safe fixes.", "check_format": "Also run ruff format --check."})
def lint(ctx: Context, fix: bool = False, check_format: bool = False) -> None:
    """Lint the sources and tests with ruff."""
    if check_format:
        _run_uv(ctx, ["run", "ruff", "format", "--check", *LINT_TARGETS])
    args = ["run", "ruff", "check", *LINT_TARGETS]
    if fix:
        args.append("--fix")
    _run_uv(ctx, args)


@task
def mypy(ctx: Context) -> None:
    """Type-check the `witness` package."""
    _run_uv(ctx, ["run", "mypy", "src"])


@task(
    help={
        "manifest": "Manifest URL or path to serve instead of the configured one.",
        "port": "Port to bind.",
    }
)
def serve(ctx: Context, manifest: str = "", port: int = 8080) -> None:
    """Serve the archive JSON API locally with the Flask debugger enabled."""
    args = ["run", "witness"]
    if manifest:
        args.extend(["--manifest", manifest])
    args.extend(["serve", "--port", str(port), "--debug"])
    _run_uv(ctx, args)


@task
def ci(ctx: Context) -> None:
    """Run the same lint, type, and test steps as CI."""
    ctx.invoke(lint, check_format=True)
    ctx.invoke(mypy)
    ctx.invoke(tests)


namespace = Collection(sync, build, tests, lint, mypy, serve, ci)
