"""Tests for todobot.core.server_stats — host snapshot and formatting."""

import os
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from todobot.core.errors import DependencyError
from todobot.core.server_stats import (
    BOT_VERSION,
    collect_server_stats,
    format_bytes,
    format_uptime,
)


class TestFormatBytes:
    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, "0 B"),
            (1023, "1023 B"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (1024 ** 2, "1.0 MB"),
            (8 * 1024 ** 3, "8.0 GB"),
            (3 * 1024 ** 4, "3.0 TB"),
        ],
    )
    def test_sizes(self, size, expected):
        assert format_bytes(size) == expected

    def test_caps_at_exabytes(self):
        assert format_bytes(2048 * 1024 ** 6) == "2048.0 EB"


class TestFormatUptime:
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (0, "0m"),
            (59, "0m"),
            (125, "2m"),
            (3660, "1h 1m"),
            (90061, "1d 1h 1m"),
            (86400, "1d 0h 0m"),
        ],
    )
    def test_uptime(self, seconds, expected):
        assert format_uptime(seconds) == expected


class TestCollect:
    def test_snapshot(self):
        memory = SimpleNamespace(used=2 * 1024 ** 3, total=8 * 1024 ** 3, percent=25.0)
        disk = SimpleNamespace(used=50 * 1024 ** 3, total=100 * 1024 ** 3, percent=50.0)
        with patch("todobot.core.server_stats.psutil.virtual_memory", return_value=memory), \
             patch("todobot.core.server_stats.psutil.disk_usage", return_value=disk) as disk_usage, \
             patch("todobot.core.server_stats.psutil.boot_time", return_value=1000.0), \
             patch("todobot.core.server_stats.psutil.cpu_percent", return_value=12.5) as cpu_percent, \
             patch("todobot.core.server_stats.psutil.cpu_count", return_value=4), \
             patch("todobot.core.server_stats.time.time", return_value=91061.0):
            stats = collect_server_stats(cpu_interval=0.0)

        disk_usage.assert_called_once_with("/")
        cpu_percent.assert_called_once_with(interval=0.0)
        assert stats.uptime_seconds == 90061
        assert stats.cpu_percent == 12.5
        assert stats.cpu_cores == 4
        assert stats.memory_used == 2 * 1024 ** 3
        assert stats.memory_percent == 25.0
        assert stats.disk_total == 100 * 1024 ** 3
        assert stats.disk_percent == 50.0
        assert stats.pid == os.getpid()
        assert stats.version == BOT_VERSION == "1.0.0"
        assert stats.python_version

    def test_unknown_core_count_is_zero(self):
        memory = SimpleNamespace(used=1, total=2, percent=50.0)
        with patch("todobot.core.server_stats.psutil.virtual_memory", return_value=memory), \
             patch("todobot.core.server_stats.psutil.disk_usage", return_value=memory), \
             patch("todobot.core.server_stats.psutil.cpu_percent", return_value=0.0), \
             patch("todobot.core.server_stats.psutil.cpu_count", return_value=None):
            stats = collect_server_stats(cpu_interval=0.0)
        assert stats.cpu_cores == 0

    def test_unreadable_disk_is_a_dependency_error(self):
        with patch(
            "todobot.core.server_stats.psutil.disk_usage",
            side_effect=FileNotFoundError("/nope"),
        ):
            with pytest.raises(DependencyError):
                collect_server_stats(cpu_interval=0.0, disk_path="/nope")
