# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for healthy server selection."""

import pytest
from fakes import FakeBackend, FakeDirectory

from mcpd_proxy.errors import McpdConnectionError
from mcpd_proxy.health import get_healthy_servers


class TestHealthyServers:
    """Test filtering of candidate servers by health status."""

    @pytest.mark.asyncio
    async def test_only_ok_servers_are_returned(self) -> None:
        directory = FakeDirectory(
            {"A": FakeBackend(), "B": FakeBackend(), "C": FakeBackend()},
            {"A": "ok", "B": "timeout", "C": "ok"},
        )

        assert await get_healthy_servers(directory) == ["A", "C"]

    @pytest.mark.asyncio
    async def test_unreachable_and_unknown_are_excluded(self) -> None:
        directory = FakeDirectory(
            {"s1": FakeBackend(), "s2": FakeBackend(), "s3": FakeBackend()},
            {"s1": "unreachable", "s2": "ok", "s3": "unknown"},
        )

        assert await get_healthy_servers(directory) == ["s2"]

    @pytest.mark.asyncio
    async def test_server_missing_from_health_is_excluded(self) -> None:
        directory = FakeDirectory(
            {"s1": FakeBackend(), "s2": FakeBackend()}, {"s1": "ok"}
        )

        assert await get_healthy_servers(directory) == ["s1"]

    @pytest.mark.asyncio
    async def test_no_healthy_servers(self) -> None:
        directory = FakeDirectory(
            {"s1": FakeBackend(), "s2": FakeBackend()},
            {"s1": "timeout", "s2": "unreachable"},
        )

        assert await get_healthy_servers(directory) == []

    @pytest.mark.asyncio
    async def test_explicit_names_skip_discovery(self) -> None:
        directory = FakeDirectory(
            {"time": FakeBackend(), "fetch": FakeBackend()},
            {"time": "ok", "fetch": "ok"},
        )

        result = await get_healthy_servers(directory, ["fetch", "time"])

        assert result == ["fetch", "time"]
        assert directory.list_servers_calls == 0
        assert directory.health_calls == 1

    @pytest.mark.asyncio
    async def test_explicit_names_are_still_health_checked(self) -> None:
        directory = FakeDirectory(
            {"time": FakeBackend(), "fetch": FakeBackend()},
            {"time": "ok", "fetch": "timeout"},
        )

        assert await get_healthy_servers(directory, ["time", "fetch"]) == ["time"]

    @pytest.mark.asyncio
    async def test_directory_failure_propagates(self) -> None:
        directory = FakeDirectory({}, {}, error=McpdConnectionError("down"))

        with pytest.raises(McpdConnectionError):
            await get_healthy_servers(directory)
