# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for topology retrieval.

Tests the deadline-bounded TopologyRetriever (with an in-process source) and
AdminServerTopologySource (against a local aiohttp server).
"""

import asyncio
import contextlib
from unittest.mock import AsyncMock

import pytest
from aiohttp import test_utils, web

from domainscaler.scaler.exceptions import (
    TopologyTimeoutError,
    TopologyUnavailableError,
)
from domainscaler.scaler.topology import (
    SEARCH_PATH,
    AdminServerTopologySource,
    ClusterTopology,
    DomainTopology,
    TopologyRetriever,
    TopologySource,
    parse_domain_topology,
)

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.scaler,
]

SEARCH_RESPONSE = {
    "name": "domain1",
    "servers": {
        "items": [
            {"name": "admin-server", "cluster": None},
            {"name": "ms1", "cluster": ["clusters", "cluster1"]},
            {"name": "ms2", "cluster": ["clusters", "cluster1"]},
            {"name": "ms3", "cluster": ["clusters", "cluster2"]},
        ]
    },
    "clusters": {
        "items": [{"name": "cluster1"}, {"name": "cluster2"}, {"name": "empty"}]
    },
}


class SlowSource(TopologySource):
    """Source that never answers within a test's deadline."""

    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = asyncio.Event()

    async def read_topology(self, domain_uid, namespace=None):
        self.started.set()
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            self.cancelled.set()
            raise
        return DomainTopology(domain_uid)


@contextlib.asynccontextmanager
async def admin_server(handler):
    app = web.Application()
    app.router.add_post(SEARCH_PATH, handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield f"http://{server.host}:{server.port}"
    finally:
        await server.close()


def test_parse_domain_topology_groups_servers_by_cluster():
    topology = parse_domain_topology("uid1", SEARCH_RESPONSE)

    assert topology.domain_uid == "uid1"
    assert topology.get_cluster("cluster1").members == ("ms1", "ms2")
    assert topology.get_cluster("cluster2").members == ("ms3",)
    assert topology.get_cluster("empty").size == 0
    assert topology.get_cluster("admin-server") is None


def test_parse_domain_topology_handles_missing_sections():
    topology = parse_domain_topology("uid1", {"servers": None})

    assert topology.clusters == {}


def test_cluster_topology_members_are_ordered_and_unique():
    cluster = ClusterTopology.of("c1", ["ms2", "ms1", "ms2"])

    assert cluster.members == ("ms2", "ms1")
    assert cluster.size == 2


@pytest.mark.asyncio
async def test_fetch_returns_topology():
    expected = parse_domain_topology("uid1", SEARCH_RESPONSE)
    source = AsyncMock(spec=TopologySource)
    source.read_topology.return_value = expected
    retriever = TopologyRetriever(source)

    topology = await retriever.fetch("uid1", timeout=1.0, namespace="ns1")

    assert topology is expected
    source.read_topology.assert_called_once_with("uid1", "ns1")


@pytest.mark.asyncio
async def test_fetch_times_out_and_cancels_retrieval():
    source = SlowSource()
    retriever = TopologyRetriever(source)

    with pytest.raises(TopologyTimeoutError) as exc_info:
        await retriever.fetch("uid1", timeout=0.01)

    assert exc_info.value.domain_uid == "uid1"
    assert exc_info.value.timeout == 0.01
    assert source.cancelled.is_set()


@pytest.mark.asyncio
async def test_leaving_scope_cancels_pending_retrieval():
    """Test the handle is released when its scope ends without awaiting a result."""
    source = SlowSource()
    retriever = TopologyRetriever(source)

    async with retriever.submit("uid1") as pending:
        await source.started.wait()
        task = pending.task

    assert task.cancelled()
    assert source.cancelled.is_set()


@pytest.mark.asyncio
async def test_scope_cancels_retrieval_when_body_raises():
    source = SlowSource()
    retriever = TopologyRetriever(source)

    with pytest.raises(RuntimeError):
        async with retriever.submit("uid1") as pending:
            await source.started.wait()
            raise RuntimeError("request aborted")

    assert pending.task.cancelled()


@pytest.mark.asyncio
async def test_source_failure_propagates_from_fetch():
    source = AsyncMock(spec=TopologySource)
    source.read_topology.side_effect = TopologyUnavailableError("admin server down")
    retriever = TopologyRetriever(source)

    with pytest.raises(TopologyUnavailableError):
        await retriever.fetch("uid1", timeout=1.0)


@pytest.mark.asyncio
async def test_each_submit_starts_an_independent_retrieval():
    source = AsyncMock(spec=TopologySource)
    source.read_topology.return_value = DomainTopology("uid1")
    retriever = TopologyRetriever(source)

    first = retriever.submit("uid1")
    second = retriever.submit("uid1")
    async with first, second:
        assert first.task is not second.task
        await first.result(1.0)
        await second.result(1.0)

    assert source.read_topology.call_count == 2


def test_search_url_substitutes_domain_and_namespace():
    source = AdminServerTopologySource("http://{domain_uid}-admin.{namespace}:7001/")

    assert (
        source.search_url("uid1", "ns1")
        == "http://uid1-admin.ns1:7001/management/weblogic/latest/domainConfig/search"
    )
    assert source.search_url("uid1").startswith("http://uid1-admin.default:7001")


@pytest.mark.asyncio
async def test_admin_server_source_reads_topology():
    seen = {}

    async def handler(request):
        seen["headers"] = request.headers.copy()
        seen["body"] = await request.json()
        return web.json_response(SEARCH_RESPONSE)

    async with admin_server(handler) as url:
        source = AdminServerTopologySource(url, username="weblogic", password="secret")
        topology = await source.read_topology("uid1", "ns1")

    assert topology.get_cluster("cluster1").members == ("ms1", "ms2")
    assert seen["headers"]["X-Requested-By"] == "domainscaler"
    assert seen["headers"]["Authorization"].startswith("Basic ")
    assert "servers" in seen["body"]["children"]


@pytest.mark.asyncio
async def test_admin_server_error_status_is_unavailable():
    async def handler(request):
        return web.Response(status=503, text="starting")

    async with admin_server(handler) as url:
        source = AdminServerTopologySource(url)
        with pytest.raises(TopologyUnavailableError, match="503"):
            await source.read_topology("uid1")
