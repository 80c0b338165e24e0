from __future__ import annotations

import getpass
import logging
import platform
import shutil
import socket
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..lib.command import run_cmd
from ..lib.osinfo import parse_key_values
from .cache import IP_KEY, CacheStore

logger = logging.getLogger(__name__)

IP_CACHE_TTL = timedelta(minutes=5)
NOT_CONNECTED = "Not connected"
UNKNOWN = "Unknown"


@dataclass(frozen=True)
class SystemFacts:
    os_name: str = UNKNOWN
    kernel: str = UNKNOWN
    uptime_s: int = 0
    mem_used_mb: int = 0
    mem_total_mb: int = 0
    disk_used: int = 0
    disk_total: int = 0
    user: str = UNKNOWN
    host: str = UNKNOWN
    ip: str = NOT_CONNECTED

    @property
    def mem_percent(self) -> int:
        return percent(self.mem_used_mb, self.mem_total_mb)

    @property
    def disk_percent(self) -> int:
        return percent(self.disk_used, self.disk_total)


def percent(used: float, total: float) -> int:
    if total <= 0:
        return 0
    return int(round(used * 100.0 / total))


def format_uptime(seconds: int) -> str:
    """'Xd Yh Zm' with zero-valued days and hours dropped; minutes always shown."""

    days, rem = divmod(max(0, int(seconds)), 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    parts.append(f"{minutes}m")
    return " ".join(parts)


def human_size(n: float) -> str:
    """df -h style size: 512M, 1.5G, 20G."""

    for unit in ("B", "K", "M", "G", "T"):
        if n < 1024 or unit == "T":
            if unit == "B":
                return f"{int(n)}B"
            return f"{n:.1f}{unit}" if n < 10 else f"{n:.0f}{unit}"
        n /= 1024.0
    return f"{n:.0f}P"


def _read(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return None


def os_pretty_name(root: Path = Path("/")) -> str:
    text = _read(root / "etc/os-release")
    if text:
        name = parse_key_values(text).get("PRETTY_NAME")
        if name:
            return name
    if platform.system() == "Darwin":
        return f"macOS {platform.mac_ver()[0]}".strip()
    return UNKNOWN


def read_uptime(root: Path = Path("/")) -> int:
    text = _read(root / "proc/uptime")
    if not text:
        return 0
    try:
        return int(float(text.split()[0]))
    except (ValueError, IndexError):
        return 0


def read_meminfo(root: Path = Path("/")) -> Tuple[int, int]:
    """(used_mb, total_mb); used is total minus available."""

    text = _read(root / "proc/meminfo")
    if not text:
        return 0, 0
    values: Dict[str, int] = {}
    for line in text.splitlines():
        key, _, rest = line.partition(":")
        fields = rest.split()
        if fields and fields[0].isdigit():
            values[key.strip()] = int(fields[0])
    total_kb = values.get("MemTotal", 0)
    available_kb = values.get("MemAvailable", values.get("MemFree", 0))
    return (total_kb - available_kb) // 1024, total_kb // 1024


def _route_ip() -> Optional[str]:
    # connect() on UDP sends nothing; it only selects the outgoing interface
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(("10.255.255.255", 1))
        ip = s.getsockname()[0]
    except OSError:
        return None
    finally:
        s.close()
    if not ip or ip.startswith("127.") or ip == "0.0.0.0":
        return None
    return ip


def _hostname_ip() -> Optional[str]:
    r = run_cmd(["hostname", "-I"], check=False)
    fields = r.stdout.split() if r.ok else []
    return fields[0] if fields else None


def primary_ip(cache: CacheStore, *, now: Optional[datetime] = None) -> str:
    """Primary IPv4 address, re-queried at most every five minutes."""

    now = now or datetime.now()
    entry = cache.get(IP_KEY)
    if entry is not None and entry.value and now - entry.written_at < IP_CACHE_TTL:
        return entry.value

    ip = _route_ip() or _hostname_ip() or NOT_CONNECTED
    cache.set(IP_KEY, ip)
    return ip


def gather_facts(cache: CacheStore, *, root: Path = Path("/"), now: Optional[datetime] = None) -> SystemFacts:
    mem_used, mem_total = read_meminfo(root)
    try:
        disk = shutil.disk_usage(str(root))
        disk_used, disk_total = disk.used, disk.total
    except OSError:
        disk_used, disk_total = 0, 0
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = UNKNOWN

    return SystemFacts(
        os_name=os_pretty_name(root),
        kernel=platform.release() or UNKNOWN,
        uptime_s=read_uptime(root),
        mem_used_mb=mem_used,
        mem_total_mb=mem_total,
        disk_used=disk_used,
        disk_total=disk_total,
        user=user,
        host=socket.gethostname() or UNKNOWN,
        ip=primary_ip(cache, now=now),
    )
