# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
ScaleCoordinator - changes the replica count of one cluster in a Domain.

A scale request runs these steps, failing fast at the first error:
1. Validate the arguments (no external calls on failure)
2. Authenticate and authorize the caller
3. Locate the Domain by UID across the watched namespaces
4. Check the cluster and requested count against the live topology
5. Replace the Domain once, only if the effective replica count changes

Conflicts on the final write are surfaced to the caller as retriable errors;
the coordinator never retries internally.
"""

import logging
import time
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from domainscaler.runtime.logging import configure_domainscaler_logging
from domainscaler.scaler.defaults import (
    DOMAIN_GROUP,
    DOMAIN_PLURAL,
    SCALE_VERB,
    ScalerDefaults,
)
from domainscaler.scaler.domain import Domain
from domainscaler.scaler.exceptions import (
    ClusterNotFoundError,
    DomainNotFoundError,
    ForbiddenError,
    InvalidArgumentError,
    ScaleError,
)
from domainscaler.scaler.metrics import ScalerPrometheusMetrics
from domainscaler.scaler.resource_store import ResourceStore
from domainscaler.scaler.security import AuthGate, ResourceRef
from domainscaler.scaler.topology import DomainTopology, TopologyRetriever

configure_domainscaler_logging()
logger = logging.getLogger(__name__)


class ScaleResult(BaseModel):
    """Outcome of a successful scale request"""

    model_config = ConfigDict(populate_by_name=True)

    domain_uid: str = Field(alias="domainUID")
    cluster: str
    replicas: int
    changed: bool


class ScaleCoordinator:
    def __init__(
        self,
        auth_gate: AuthGate,
        store: ResourceStore,
        topology_retriever: TopologyRetriever,
        namespaces: Iterable[str],
        topology_timeout: float = ScalerDefaults.topology_timeout,
        metrics: Optional[ScalerPrometheusMetrics] = None,
    ):
        """
        Args:
            auth_gate: Authenticates and authorizes callers
            store: Reads and replaces Domain resources
            topology_retriever: Fetches the live topology of a domain
            namespaces: Namespaces searched for the Domain, in order
            topology_timeout: Deadline for one topology retrieval, in seconds
            metrics: Optional Prometheus metrics to record outcomes in
        """
        self.auth_gate = auth_gate
        self.store = store
        self.topology_retriever = topology_retriever
        self.namespaces: List[str] = list(namespaces)
        self.topology_timeout = topology_timeout
        self.metrics = metrics

    async def scale_cluster(
        self,
        domain_uid: str,
        cluster_name: str,
        requested_replicas: int,
        *,
        token: Optional[str],
    ) -> ScaleResult:
        """Set the replica count of ``cluster_name`` in the given domain.

        Args:
            domain_uid: UID of the target Domain
            cluster_name: Cluster within the Domain
            requested_replicas: Desired number of running members, >= 0
            token: Caller's bearer credential

        Returns:
            ScaleResult with the effective replica count after the request

        Raises:
            ScaleError: one of its subclasses, see domainscaler.scaler.exceptions
        """
        try:
            result = await self._scale_cluster(
                domain_uid, cluster_name, requested_replicas, token
            )
        except ScaleError as e:
            self._record(e.reason)
            raise
        except Exception:
            self._record("error")
            raise
        self._record("scaled" if result.changed else "unchanged")
        return result

    async def _scale_cluster(
        self,
        domain_uid: str,
        cluster_name: str,
        requested_replicas: int,
        token: Optional[str],
    ) -> ScaleResult:
        validate_scale_arguments(domain_uid, cluster_name, requested_replicas)

        identity = await self.auth_gate.authenticate(token)
        decision = await self.auth_gate.authorize(
            identity, SCALE_VERB, ResourceRef(group=DOMAIN_GROUP, resource=DOMAIN_PLURAL)
        )
        if not decision.allowed:
            logger.info(
                f"Denied scale of {domain_uid}/{cluster_name} for {identity.subject}: "
                f"{decision.reason or 'no reason given'}"
            )
            raise ForbiddenError(
                f"'{identity.subject}' may not scale clusters of domain '{domain_uid}'"
            )

        namespace, domain = await self._find_domain(domain_uid)
        topology = await self._fetch_topology(domain, namespace)

        cluster = topology.get_cluster(cluster_name)
        if cluster is None:
            raise ClusterNotFoundError(domain_uid, cluster_name)
        if requested_replicas > cluster.size:
            raise InvalidArgumentError(
                f"Requested scaling count of {requested_replicas} is greater than "
                f"the {cluster.size} servers configured for cluster '{cluster_name}'"
            )

        effective_replicas = domain.get_replica_count(cluster_name)
        if effective_replicas == requested_replicas:
            logger.info(
                f"Cluster {cluster_name} of domain {domain_uid} already at "
                f"{requested_replicas} replicas, nothing to do"
            )
            return ScaleResult(
                domain_uid=domain_uid,
                cluster=cluster_name,
                replicas=effective_replicas,
                changed=False,
            )

        updated = domain.with_replica_count(cluster_name, requested_replicas)
        await self.store.replace_domain(namespace, domain.name, updated)

        logger.info(
            f"Scaled cluster {cluster_name} of domain {domain_uid} "
            f"from {effective_replicas} to {requested_replicas} replicas"
        )
        return ScaleResult(
            domain_uid=domain_uid,
            cluster=cluster_name,
            replicas=requested_replicas,
            changed=True,
        )

    async def _find_domain(self, domain_uid: str) -> Tuple[str, Domain]:
        """Return the first matching Domain and the namespace it was listed in.

        Domains handed out by the store are not modified.
        """
        for namespace in self.namespaces:
            for domain in await self.store.list_domains(namespace):
                if domain.uid == domain_uid:
                    return domain.namespace or namespace, domain
        raise DomainNotFoundError(domain_uid)

    async def _fetch_topology(self, domain: Domain, namespace: str) -> DomainTopology:
        start = time.monotonic()
        try:
            return await self.topology_retriever.fetch(
                domain.uid, self.topology_timeout, namespace=namespace
            )
        finally:
            if self.metrics is not None:
                self.metrics.topology_fetch_seconds.observe(time.monotonic() - start)

    def _record(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.record_outcome(outcome)


def validate_scale_arguments(
    domain_uid: str, cluster_name: str, requested_replicas: int
) -> None:
    if not domain_uid:
        raise InvalidArgumentError("Domain UID must not be empty")
    if not cluster_name:
        raise InvalidArgumentError("Cluster name must not be empty")
    # bool is an int subclass but never a replica count
    if isinstance(requested_replicas, bool) or not isinstance(requested_replicas, int):
        raise InvalidArgumentError(
            f"Replica count must be an integer, got {requested_replicas!r}"
        )
    if requested_replicas < 0:
        raise InvalidArgumentError(
            f"Replica count must not be negative, got {requested_replicas}"
        )
