"""Nox sessions for testing against multiple numpy and backend versions."""

import nox

nox.options.default_venv_backend = "uv"

NUMPY_VERSIONS = ["1.26.4", "2.1.0"]
PYARROW_VERSIONS = ["14.0.0", "18.0.0"]
POLARS_VERSIONS = ["1.0.0", "1.20.0"]
PANDAS_VERSIONS = ["2.0.0", "2.2.0"]

CORE_TESTS = ["tests/unit", "tests/e2e"]

ARROW_TESTS = ["tests/integration/test_arrow_boundary.py"]

POLARS_TESTS = ["tests/integration/test_polars_boundary.py"]

PANDAS_TESTS = ["tests/integration/test_pandas_boundary.py"]


@nox.session(python=["3.10"])
@nox.parametrize("numpy", NUMPY_VERSIONS)
def test_numpy(session: nox.Session, numpy: str) -> None:
    """Test the core against specific numpy versions."""
    session.install("-e", ".", "pytest", f"numpy=={numpy}")
    session.run("pytest", *CORE_TESTS, "-q")


@nox.session(python=["3.10"])
@nox.parametrize("pyarrow", PYARROW_VERSIONS)
def test_arrow(session: nox.Session, pyarrow: str) -> None:
    """Test the Arrow boundary against specific pyarrow versions."""
    deps = ["-e", ".", "pytest", f"pyarrow=={pyarrow}"]
    # pyarrow < 16 was compiled against numpy 1.x ABI
    if pyarrow < "16":
        deps.append("numpy<2")
    session.install(*deps)
    session.run("pytest", *ARROW_TESTS, "-q")


@nox.session(python=["3.10"])
@nox.parametrize("polars", POLARS_VERSIONS)
def test_polars(session: nox.Session, polars: str) -> None:
    """Test the Polars boundary against specific Polars versions."""
    session.install("-e", ".[arrow]", "pytest", f"polars=={polars}")
    session.run("pytest", *POLARS_TESTS, "-q")


@nox.session(python=["3.10"])
@nox.parametrize("pandas", PANDAS_VERSIONS)
def test_pandas(session: nox.Session, pandas: str) -> None:
    """Test the pandas boundary against specific pandas versions."""
    deps = ["-e", ".[arrow]", "pytest", f"pandas=={pandas}"]
    # pandas < 2.2 was compiled against numpy 1.x ABI
    if pandas < "2.2":
        deps.append("numpy<2")
    session.install(*deps)
    session.run("pytest", *PANDAS_TESTS, "-q")
