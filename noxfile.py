"""Nox sessions for the tubescript test, lint and type-check workflow."""

import nox

nox.options.sessions = ["tests", "lint", "typecheck"]
SOURCES = ("src", "tests", "noxfile.py")


@nox.session(python=["3.11", "3.12", "3.13"])
def tests(session: nox.Session) -> None:
    """Run the offline unit tests."""
    session.install("-e", ".[dev]")
    session.run("pytest", *session.posargs)


@nox.session
def lint(session: nox.Session) -> None:
    """Check style and formatting with ruff."""
    session.install("-e", ".[dev]")
    session.run("ruff", "check", *SOURCES)
    session.run("ruff", "format", "--check", *SOURCES)


@nox.session
def typecheck(session: nox.Session) -> None:
    """Type-check the library package."""
    session.install("-e", ".[dev]")
    session.run("mypy", "src/tubescript")


@nox.session
def coverage(session: nox.Session) -> None:
    """Run the tests with line coverage for the package."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "--cov=tubescript",
        "--cov-report=term-missing",
        "--cov-report=xml",
        *session.posargs,
    )
