"""Version lookup for orchd, shared by ``--version``, ``--doctor`` and trace resources."""

from functools import lru_cache
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from pathlib import Path

DISTRIBUTION = "orchd"
UNKNOWN_VERSION = "dev"

_pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"


def _source_checkout_version(pyproject_path: Path) -> str:
    """Return the version a source checkout's pyproject.toml declares for orchd."""
    if not pyproject_path.is_file():
        return UNKNOWN_VERSION

    import tomllib

    try:
        project = tomllib.loads(pyproject_path.read_text(encoding="utf-8")).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        return UNKNOWN_VERSION
    # A pyproject.toml belonging to some other project is not ours to report
    if project.get("name") != DISTRIBUTION:
        return UNKNOWN_VERSION
    return str(project.get("version") or UNKNOWN_VERSION)


@lru_cache(maxsize=1)
def get_version() -> str:
    """Return the installed orchd version, or the checkout's declared version when not installed."""
    try:
        return package_version(DISTRIBUTION)
    except PackageNotFoundError:
        return _source_checkout_version(_pyproject_path)
