# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Pydantic model of the Domain custom resource.

Only the fields the scaler reads or writes are declared. Everything else in
the resource is kept as extra data so a read-modify-write round trip does not
drop fields owned by other controllers.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from domainscaler.scaler.defaults import DEFAULT_REPLICA_LIMIT


class _ResourceModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ObjectMeta(_ResourceModel):
    name: Optional[str] = None
    namespace: Optional[str] = None
    resource_version: Optional[str] = Field(default=None, alias="resourceVersion")


class ClusterSpec(_ResourceModel):
    cluster_name: str = Field(alias="clusterName")
    replicas: Optional[int] = None


class DomainSpec(_ResourceModel):
    domain_uid: Optional[str] = Field(default=None, alias="domainUID")
    replicas: Optional[int] = None
    clusters: List[ClusterSpec] = Field(default_factory=list)


class Domain(_ResourceModel):
    api_version: Optional[str] = Field(default=None, alias="apiVersion")
    kind: Optional[str] = None
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: DomainSpec = Field(default_factory=DomainSpec)

    @classmethod
    def from_resource(cls, resource: dict) -> "Domain":
        return cls.model_validate(resource)

    def to_resource(self) -> dict:
        """Serialize back to the camelCase form the API server expects."""
        return self.model_dump(by_alias=True, exclude_unset=True)

    @property
    def uid(self) -> Optional[str]:
        # domainUID defaults to the resource name when unset
        return self.spec.domain_uid or self.metadata.name

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name

    @property
    def namespace(self) -> Optional[str]:
        return self.metadata.namespace

    @property
    def resource_version(self) -> Optional[str]:
        return self.metadata.resource_version

    def get_cluster(self, cluster_name: str) -> Optional[ClusterSpec]:
        for cluster in self.spec.clusters:
            if cluster.cluster_name == cluster_name:
                return cluster
        return None

    def get_replica_override(self, cluster_name: str) -> Optional[int]:
        """Per-cluster replica count, or None when the cluster does not set one."""
        cluster = self.get_cluster(cluster_name)
        return cluster.replicas if cluster is not None else None

    def get_default_replica_count(self) -> int:
        if self.spec.replicas is not None:
            return self.spec.replicas
        return DEFAULT_REPLICA_LIMIT

    def get_replica_count(self, cluster_name: str) -> int:
        """Effective replica count: the cluster override, else the domain default."""
        override = self.get_replica_override(cluster_name)
        if override is not None:
            return override
        return self.get_default_replica_count()

    def with_replica_count(self, cluster_name: str, replicas: int) -> "Domain":
        """Return a deep copy with the cluster override set (or created).

        The resource version is carried over unchanged so the store can reject
        the write if the resource changed since it was read.
        """
        updated = self.model_copy(deep=True)
        spec = updated.spec
        cluster = updated.get_cluster(cluster_name)
        if cluster is None:
            spec.clusters = [
                *spec.clusters,
                ClusterSpec(cluster_name=cluster_name, replicas=replicas),
            ]
        else:
            cluster.replicas = replicas
        # assignment marks the fields as set so to_resource() includes them
        updated.spec = spec
        return updated
