from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml


def package_root() -> Path:
    # shellforge/lib/manifests.py -> shellforge
    return Path(__file__).resolve().parents[1]


def assets_dir() -> Path:
    return package_root() / "assets"


def load_yaml(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {path}")
    return data


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML file shipped inside the package (manifests/...)."""
    return load_yaml(package_root() / rel_path.lstrip("/"))


def load_default_profile() -> Dict[str, Any]:
    return load_yaml_rel("manifests/profile.yaml")
