# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Live topology retrieval.

The topology is what the running domain reports about itself (which servers
belong to which cluster), as opposed to what the Domain resource declares.
Retrieval is a per-request asyncio task bounded by a deadline:

    async with retriever.submit("uid1", namespace="ns1") as pending:
        topology = await pending.result(timeout=5.0)

Leaving the ``async with`` block cancels the task if it is still running, on
every exit path.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

import aiohttp

from domainscaler.scaler.exceptions import (
    TopologyTimeoutError,
    TopologyUnavailableError,
)

logger = logging.getLogger(__name__)

SEARCH_PATH = "/management/weblogic/latest/domainConfig/search"
SEARCH_QUERY = {
    "fields": ["name"],
    "links": [],
    "children": {
        "servers": {"fields": ["name", "cluster"], "links": []},
        "clusters": {"fields": ["name"], "links": []},
    },
}
REQUESTED_BY = "domainscaler"


@dataclass(frozen=True)
class ClusterTopology:
    name: str
    members: Tuple[str, ...] = ()

    @classmethod
    def of(cls, name: str, members: Iterable[str]) -> "ClusterTopology":
        # ordered, duplicates dropped
        return cls(name=name, members=tuple(dict.fromkeys(members)))

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class DomainTopology:
    domain_uid: str
    clusters: Dict[str, ClusterTopology] = field(default_factory=dict)

    def get_cluster(self, cluster_name: str) -> Optional[ClusterTopology]:
        return self.clusters.get(cluster_name)


def parse_domain_topology(domain_uid: str, payload: dict) -> DomainTopology:
    """Build a DomainTopology from a management API search response.

    Servers reference their cluster as ``["clusters", "<name>"]``. Clusters
    that are configured but have no servers yet are kept with no members.
    """
    members: Dict[str, list] = {}
    for item in (payload.get("clusters") or {}).get("items", []):
        if item.get("name"):
            members.setdefault(item["name"], [])

    for item in (payload.get("servers") or {}).get("items", []):
        server_name = item.get("name")
        cluster_ref = item.get("cluster")
        if not server_name or not cluster_ref:
            continue
        members.setdefault(cluster_ref[-1], []).append(server_name)

    return DomainTopology(
        domain_uid=domain_uid,
        clusters={
            name: ClusterTopology.of(name, servers) for name, servers in members.items()
        },
    )


class TopologySource(ABC):
    """Produces the live topology of one domain."""

    @abstractmethod
    async def read_topology(
        self, domain_uid: str, namespace: Optional[str] = None
    ) -> DomainTopology:
        pass


class AdminServerTopologySource(TopologySource):
    """Reads the topology from the domain's admin server REST management API."""

    def __init__(
        self,
        url_template: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        """
        Args:
            url_template: Admin server base URL; may contain ``{domain_uid}``
                and ``{namespace}`` placeholders
            username: Optional basic-auth user for the management API
            password: Password for ``username``
        """
        self.url_template = url_template
        self.auth = aiohttp.BasicAuth(username, password or "") if username else None

    def search_url(self, domain_uid: str, namespace: Optional[str] = None) -> str:
        base = self.url_template.format(
            domain_uid=domain_uid, namespace=namespace or "default"
        )
        return base.rstrip("/") + SEARCH_PATH

    async def read_topology(
        self, domain_uid: str, namespace: Optional[str] = None
    ) -> DomainTopology:
        url = self.search_url(domain_uid, namespace)
        headers = {"X-Requested-By": REQUESTED_BY, "Accept": "application/json"}
        try:
            async with aiohttp.ClientSession(auth=self.auth) as session:
                async with session.post(url, json=SEARCH_QUERY, headers=headers) as resp:
                    if resp.status != 200:
                        detail = await resp.text()
                        raise TopologyUnavailableError(
                            f"Admin server for domain '{domain_uid}' answered "
                            f"{resp.status}: {detail}"
                        )
                    payload = await resp.json()
        except aiohttp.ClientError as e:
            raise TopologyUnavailableError(
                f"Cannot reach admin server for domain '{domain_uid}': {e}"
            ) from e

        return parse_domain_topology(domain_uid, payload)


class PendingTopology:
    """Handle on one in-flight topology retrieval."""

    def __init__(self, domain_uid: str, task: "asyncio.Task[DomainTopology]"):
        self.domain_uid = domain_uid
        self._task = task

    @property
    def task(self) -> "asyncio.Task[DomainTopology]":
        return self._task

    def done(self) -> bool:
        return self._task.done()

    async def result(self, timeout: Optional[float]) -> DomainTopology:
        """Wait for the topology for at most ``timeout`` seconds.

        Raises:
            TopologyTimeoutError: deadline elapsed; the retrieval is cancelled
        """
        try:
            return await asyncio.wait_for(self._task, timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning(
                f"Topology retrieval for domain {self.domain_uid} timed out after {timeout}s"
            )
            raise TopologyTimeoutError(self.domain_uid, timeout) from e

    async def aclose(self) -> None:
        """Cancel the retrieval if still running and wait until it has stopped."""
        if self._task.done():
            if not self._task.cancelled():
                # mark a failure nobody awaited as retrieved
                self._task.exception()
            return
        self._task.cancel()
        await asyncio.wait({self._task})

    async def __aenter__(self) -> "PendingTopology":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class TopologyRetriever:
    """Starts independent, deadline-bounded topology retrievals.

    Nothing is cached between calls; every ``submit`` starts a new task.
    """

    def __init__(self, source: TopologySource):
        self.source = source

    def submit(self, domain_uid: str, namespace: Optional[str] = None) -> PendingTopology:
        """Start retrieving the topology. Must be called from a running event loop."""
        task = asyncio.ensure_future(self.source.read_topology(domain_uid, namespace))
        return PendingTopology(domain_uid, task)

    async def fetch(
        self,
        domain_uid: str,
        timeout: Optional[float],
        namespace: Optional[str] = None,
    ) -> DomainTopology:
        async with self.submit(domain_uid, namespace) as pending:
            return await pending.result(timeout)
