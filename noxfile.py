"""Nox sessions for Sensor Shell.

``nox`` alone runs lint and the full test matrix. Hardware is never needed:
integration tests drive a simulated shell board.
"""

import nox

nox.options.sessions = ["lint", "tests"]
nox.options.reuse_existing_virtualenvs = True

PYTHON_DEFAULT = "3.11"
SOURCES = ["sensor_shell", "tests", "main.py", "noxfile.py"]
ENGINE_TESTS = [
    "tests/unit/test_protocol.py",
    "tests/unit/test_transport.py",
    "tests/unit/test_query_coordinator.py",
]


def _install(session):
    session.install("-e", ".[dev]")


@nox.session(python=["3.8", "3.9", "3.10", "3.11", "3.12"])
def tests(session):
    """Whole suite on every supported interpreter."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_DEFAULT)
def unit(session):
    _install(session)
    session.run("pytest", "tests/unit", "-m", "not integration", *session.posargs)


@nox.session(python=PYTHON_DEFAULT)
def integration(session):
    """Simulated-board sessions, the logging pipeline and the CLI."""
    _install(session)
    session.run("pytest", "-m", "integration", *session.posargs)


@nox.session(python=PYTHON_DEFAULT)
def engine(session):
    """Codec, transport and coordinator only; the fast inner loop."""
    _install(session)
    session.run("pytest", *ENGINE_TESTS, "-x", "--tb=short", *session.posargs)


@nox.session(python=PYTHON_DEFAULT)
def coverage(session):
    _install(session)
    session.run(
        "pytest",
        "--cov=sensor_shell",
        "--cov-report=term-missing",
        "--cov-report=xml",
        *session.posargs
    )


@nox.session(python=PYTHON_DEFAULT)
def lint(session):
    """flake8 over sources and tests, mypy over the package."""
    _install(session)
    session.run("flake8", *SOURCES[:3], "--max-line-length=110")
    session.run("mypy", "sensor_shell", "--ignore-missing-imports")


@nox.session(python=PYTHON_DEFAULT, name="format")
def format_code(session):
    session.install("black")
    session.run("black", *session.posargs, *SOURCES)


@nox.session(python=PYTHON_DEFAULT)
def build(session):
    session.install("build", "twine")
    session.run("python", "-m", "build")
    session.run("twine", "check", "dist/*")


@nox.session(python=False)
def clean(session):
    """Remove build output and tool caches."""
    import shutil
    from pathlib import Path

    for pattern in ("build", "dist", "*.egg-info", "__pycache__", ".pytest_cache",
                    ".mypy_cache", ".coverage", "coverage.xml", "htmlcov"):
        for path in Path(".").rglob(pattern):
            if path.is_dir():
                shutil.rmtree(path, ignore_errors=True)
            else:
                path.unlink(missing_ok=True)
            session.log(f"Removed {path}")
