"""Loading of schemas and data files for CLI commands."""

import importlib
import importlib.util
from pathlib import Path
import sys
from typing import Any

import yaml


class LoadError(Exception):
    """Raised when a schema reference or data file cannot be loaded."""


def load_schema(reference: str) -> Any:
    """Resolve ``module:Model`` or ``path/to/file.py:Model`` to a schema class.

    Args:
        reference: Import path or file path, a colon, and the attribute name

    Returns:
        The referenced attribute

    Raises:
        LoadError: If the module or attribute cannot be found
    """
    module_ref, separator, attribute = reference.rpartition(":")
    if not separator or not module_ref or not attribute:
        raise LoadError(
            f"Invalid schema reference '{reference}', expected module:Model "
            "or path/to/file.py:Model"
        )

    if module_ref.endswith(".py") or "/" in module_ref or "\\" in module_ref:
        module = _load_file_module(Path(module_ref))
    else:
        try:
            module = importlib.import_module(module_ref)
        except ImportError as e:
            raise LoadError(f"Cannot import module '{module_ref}': {e}") from e

    try:
        return getattr(module, attribute)
    except AttributeError as e:
        raise LoadError(f"Module '{module_ref}' has no attribute '{attribute}'") from e


def _load_file_module(path: Path) -> Any:
    if not path.exists():
        raise LoadError(f"Schema file not found: {path}")

    module_name = f"_formgen_schema_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise LoadError(f"Cannot load schema file: {path}")

    module = importlib.util.module_from_spec(spec)
    # Registered so that Pydantic can resolve annotations of the module
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        del sys.modules[module_name]
        raise LoadError(f"Error executing schema file {path}: {e}") from e
    return module


def load_mapping(path: str | Path) -> dict[str, Any]:
    """Read a YAML or JSON file that must contain a mapping.

    Raises:
        LoadError: If the file is missing, unparsable or not a mapping
    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise LoadError(f"Cannot read file {file_path}: {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise LoadError(f"Invalid YAML/JSON in {file_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise LoadError(f"Expected a mapping at the top level of {file_path}")
    return data
