################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""YAML serialization and file persistence for GNC parameters."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any
from typing import cast

import yaml

from oasis_gnc.config.gnc_params import GncParams
from oasis_gnc.config.gnc_params import GncParamsError


class GncPersistenceError(Exception):
    """Raised when loading or saving GNC parameter files fails."""


def is_yaml_path(path: str | os.PathLike[str]) -> bool:
    """Return True if the path has a YAML extension."""
    suffix: str = Path(os.fspath(path)).suffix.lower()
    return suffix in {".yaml", ".yml"}


def dumps_params_yaml(params: GncParams) -> str:
    """Serialize parameters to deterministic YAML."""
    data: dict[str, Any] = params.as_nested_dict()
    safe_dump: Any = cast(Any, yaml.safe_dump)
    return str(
        safe_dump(
            data,
            sort_keys=False,
            indent=2,
            default_flow_style=False,
        )
    )


def loads_params_yaml(text: str) -> GncParams:
    """Parse parameters from YAML text."""
    try:
        loaded: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise GncPersistenceError("Invalid YAML") from exc
    if not isinstance(loaded, dict):
        raise GncPersistenceError("YAML root must be a mapping")
    try:
        return GncParams.from_dict(loaded)
    except GncParamsError as exc:
        raise GncPersistenceError(f"Invalid GNC parameters: {exc}") from exc


def _require_yaml_path(path: str | os.PathLike[str]) -> Path:
    if not is_yaml_path(path):
        raise GncPersistenceError("Path must end with .yaml or .yml")
    return Path(os.fspath(path))


def _checked_yaml_text(params: GncParams) -> str:
    """Return the YAML document for params after checking that it reloads."""
    try:
        params.validate()
    except GncParamsError as exc:
        raise GncPersistenceError(f"Invalid GNC parameters: {exc}") from exc

    text: str = dumps_params_yaml(params)
    if not loads_params_yaml(text).equals(params):
        raise GncPersistenceError("GNC parameters do not survive a YAML round trip")
    return text


def _replace_with_text(path: Path, text: str) -> None:
    """Write text beside path, then rename it over path.

    The temporary file is removed if the rename does not happen.
    """
    fd: int
    tmp_name: str
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    tmp_path: Path = Path(tmp_name)
    replaced: bool = False
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
        replaced = True
    finally:
        if not replaced:
            tmp_path.unlink(missing_ok=True)


def save_params_yaml(
    path: str | os.PathLike[str],
    params: GncParams,
    *,
    atomic_write: bool = True,
) -> None:
    """Save parameters to disk as YAML.

    The document is validated and reloaded in memory before anything is
    written. With atomic_write, readers see either the old file or the new
    one, never a partial write.
    """
    path_obj: Path = _require_yaml_path(path)
    text: str = _checked_yaml_text(params)
    try:
        path_obj.parent.mkdir(parents=True, exist_ok=True)
        if atomic_write:
            _replace_with_text(path_obj, text)
        else:
            path_obj.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise GncPersistenceError(
            f"Failed to save GNC parameters to {path_obj}"
        ) from exc


def load_params_yaml(path: str | os.PathLike[str]) -> GncParams:
    """Load parameters from a YAML file."""
    path_obj: Path = _require_yaml_path(path)
    try:
        text: str = path_obj.read_text(encoding="utf-8")
    except OSError as exc:
        raise GncPersistenceError(
            f"Failed to load GNC parameters from {path_obj}"
        ) from exc
    return loads_params_yaml(text)
