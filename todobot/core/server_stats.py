"""
Todo Reminder Bot — Server statistics.

A snapshot of the host the bot runs on, shown by /serverstats. Collecting
it blocks for the CPU sample, so the bot runs it in a worker thread.
"""

from __future__ import annotations

import logging
import os
import platform
import time
from dataclasses import dataclass

import psutil

from todobot.core.errors import DependencyError

logger = logging.getLogger(__name__)

BOT_VERSION = "1.0.0"

_BYTE_UNITS = "KMGTPE"


@dataclass
class ServerStats:
    os_name: str
    platform: str
    architecture: str
    hostname: str
    uptime_seconds: int
    cpu_percent: float
    cpu_cores: int
    memory_used: int
    memory_total: int
    memory_percent: float
    disk_used: int
    disk_total: int
    disk_percent: float
    python_version: str
    pid: int
    version: str = BOT_VERSION


def collect_server_stats(cpu_interval: float = 1.0, disk_path: str = "/") -> ServerStats:
    """Sample the host. Raises DependencyError if psutil cannot read it."""
    try:
        memory = psutil.virtual_memory()
        disk = psutil.disk_usage(disk_path)
        uptime = max(0, int(time.time() - psutil.boot_time()))
        cpu_percent = psutil.cpu_percent(interval=cpu_interval)
        cpu_cores = psutil.cpu_count() or 0
    except (psutil.Error, OSError) as exc:
        logger.error("Reading host statistics failed: %s", exc)
        raise DependencyError(f"Host statistics unavailable: {exc}") from exc

    return ServerStats(
        os_name=platform.system() or "Unknown",
        platform=platform.platform() or "Unknown",
        architecture=platform.machine() or "Unknown",
        hostname=platform.node() or "Unknown",
        uptime_seconds=uptime,
        cpu_percent=cpu_percent,
        cpu_cores=cpu_cores,
        memory_used=memory.used,
        memory_total=memory.total,
        memory_percent=memory.percent,
        disk_used=disk.used,
        disk_total=disk.total,
        disk_percent=disk.percent,
        python_version=platform.python_version(),
        pid=os.getpid(),
    )


def format_bytes(size: int) -> str:
    """1536 -> '1.5 KB'. Binary multiples, one decimal."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in _BYTE_UNITS:
        value /= 1024
        if value < 1024 or unit == _BYTE_UNITS[-1]:
            break
    return f"{value:.1f} {unit}B"


def format_uptime(seconds: int) -> str:
    """90061 -> '1d 1h 1m'; leading zero units are left out."""
    days, rest = divmod(int(seconds), 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
