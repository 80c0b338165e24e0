from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SUPPORTED_OS = frozenset(
    {"ubuntu", "debian", "pop", "fedora", "centos", "rhel", "arch", "manjaro", "macos"}
)

# OS id -> package manager family
_PKG_FAMILY = {
    "ubuntu": "apt",
    "debian": "apt",
    "pop": "apt",
    "fedora": "dnf",
    "centos": "yum",
    "rhel": "yum",
    "arch": "pacman",
    "manjaro": "pacman",
    "macos": "brew",
}


@dataclass(frozen=True)
class OsInfo:
    id: str
    version: str = "unknown"
    is_wsl: bool = False

    @property
    def supported(self) -> bool:
        return self.id in SUPPORTED_OS

    @property
    def package_family(self) -> Optional[str]:
        return _PKG_FAMILY.get(self.id)


def _read_text(path: Path) -> Optional[str]:
    try:
        txt = path.read_text(encoding="utf-8", errors="ignore").strip()
        return txt or None
    except OSError:
        return None


def parse_key_values(text: str) -> Dict[str, str]:
    """Parse os-release / lsb-release style KEY=value lines."""

    out: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        out[key.strip()] = value.strip().strip('"').strip("'")
    return out


def detect_os(*, root: Path = Path("/"), system: Optional[str] = None) -> OsInfo:
    """Best-effort OS detection.

    Unknown identifiers are returned as-is; callers decide how strict to be.
    """

    system = (system or platform.system()).lower()

    if system == "darwin":
        return OsInfo(id="macos", version=platform.mac_ver()[0] or "unknown")

    is_wsl = "microsoft" in (_read_text(root / "proc/version") or "").lower()

    if system == "linux":
        os_release = _read_text(root / "etc/os-release")
        if os_release:
            kv = parse_key_values(os_release)
            return OsInfo(
                id=kv.get("ID", "linux").lower(),
                version=kv.get("VERSION_ID", "unknown"),
                is_wsl=is_wsl,
            )
        lsb = _read_text(root / "etc/lsb-release")
        if lsb:
            kv = parse_key_values(lsb)
            return OsInfo(
                id=kv.get("DISTRIB_ID", "linux").lower(),
                version=kv.get("DISTRIB_RELEASE", "unknown"),
                is_wsl=is_wsl,
            )

    return OsInfo(id=system or "unknown", is_wsl=is_wsl)
