"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path


class ConfigError(Exception):
    """Error in depgraph configuration."""


@dataclass(slots=True, frozen=True)
class DepgraphConfig:
    """Configuration loaded from the ``[tool.depgraph]`` table of pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    graph: Path | None = None
    region: str | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _get_str(section: dict[str, object], key: str) -> str | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, str):
        msg = f"Invalid [tool.depgraph].{key}: expected string"
        raise ConfigError(msg)
    return value


def load_config(pyproject_path: Path) -> DepgraphConfig:
    """Load and validate [tool.depgraph] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed DepgraphConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    tool_section = data.get("tool", {})
    depgraph_section = tool_section.get("depgraph", {})

    if not depgraph_section:
        return DepgraphConfig(project_root=project_root)

    if not isinstance(depgraph_section, dict):
        msg = "Invalid [tool.depgraph] configuration. Expected a table."
        raise ConfigError(msg)

    graph_path: Path | None = None
    graph_value = _get_str(depgraph_section, "graph")
    if graph_value is not None:
        graph_path = Path(graph_value)
        if not graph_path.is_absolute():
            graph_path = project_root / graph_path

    return DepgraphConfig(
        graph=graph_path,
        region=_get_str(depgraph_section, "region"),
        project_root=project_root,
    )


def get_config() -> DepgraphConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        DepgraphConfig (may be empty if no pyproject.toml or no [tool.depgraph] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return DepgraphConfig()
    return load_config(pyproject_path)
