from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .lib.manifests import load_default_profile, load_yaml
from .lib.retry import RetryPolicy


@dataclass(frozen=True)
class PluginSpec:
    name: str
    repo: str


@dataclass(frozen=True)
class AssetSpec:
    source: str
    target: str
    backup: bool = False
    executable: bool = False
    template: bool = False
    required: bool = False


@dataclass(frozen=True)
class Profile:
    raw: Dict[str, Any]

    @property
    def shell(self) -> str:
        return str(self.raw.get("shell") or "zsh")

    @property
    def dependencies(self) -> List[str]:
        return [str(p) for p in (self.raw.get("dependencies") or [])]

    @property
    def required_tools(self) -> List[str]:
        return [str(t) for t in (self.raw.get("required_tools") or [])]

    @property
    def connectivity_endpoints(self) -> List[str]:
        return [str(u) for u in ((self.raw.get("preflight") or {}).get("connectivity_endpoints") or [])]

    @property
    def min_disk_kb(self) -> int:
        return int(((self.raw.get("preflight") or {}).get("min_disk_kb")) or 524288)

    @property
    def retry_policy(self) -> RetryPolicy:
        r = self.raw.get("retry") or {}
        return RetryPolicy(
            max_attempts=int(r.get("max_attempts") or 3),
            delay_s=float(r.get("delay_s") if r.get("delay_s") is not None else 5),
        )

    @property
    def fonts(self) -> Dict[str, Any]:
        return dict(self.raw.get("fonts") or {})

    @property
    def font_files(self) -> List[str]:
        return [str(f) for f in (self.fonts.get("files") or [])]

    @property
    def framework(self) -> Dict[str, Any]:
        return dict(self.raw.get("framework") or {})

    @property
    def framework_name(self) -> str:
        return str(self.framework.get("name") or "oh-my-zsh")

    @property
    def theme(self) -> Dict[str, Any]:
        return dict(self.raw.get("theme") or {})

    @property
    def theme_name(self) -> str:
        return str(self.theme.get("name") or "powerlevel10k")

    @property
    def plugins(self) -> List[PluginSpec]:
        return [PluginSpec(name=str(p["name"]), repo=str(p["repo"])) for p in (self.raw.get("plugins") or [])]

    @property
    def builtin_plugins(self) -> List[str]:
        return [str(p) for p in (self.raw.get("builtin_plugins") or [])]

    @property
    def version_manager(self) -> Optional[Dict[str, Any]]:
        vm = self.raw.get("version_manager") or {}
        if not vm or not bool(vm.get("enabled", True)):
            return None
        return dict(vm)

    @property
    def assets(self) -> List[AssetSpec]:
        out: List[AssetSpec] = []
        for a in self.raw.get("assets") or []:
            out.append(
                AssetSpec(
                    source=str(a["source"]),
                    target=str(a["target"]),
                    backup=bool(a.get("backup", False)),
                    executable=bool(a.get("executable", False)),
                    template=bool(a.get("template", False)),
                    required=bool(a.get("required", False)),
                )
            )
        return out


def load_profile(path: Optional[str] = None) -> Profile:
    """Load a profile manifest; the packaged default when path is None."""

    if path is None:
        return Profile(raw=load_default_profile())

    p = Path(path).expanduser()
    if not p.exists():
        raise FileNotFoundError(path)
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("profile must be YAML")
    return Profile(raw=load_yaml(p))
