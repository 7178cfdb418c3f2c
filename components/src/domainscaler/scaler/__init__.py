# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Scale-cluster core.

A ScaleCoordinator receives a request to change the number of running members
of one cluster within a Domain resource. It authenticates and authorizes the
caller, checks the request against the live topology reported by the domain,
and rewrites the Domain only when the effective replica count changes.

Collaborators are injected at construction:
- AuthGate: who is calling and may they scale
- ResourceStore: list / replace Domain resources
- TopologyRetriever: deadline-bounded retrieval of the live topology
"""

__all__ = [
    "AccessDecision",
    "AdminServerTopologySource",
    "AuthGate",
    "ClusterTopology",
    "Domain",
    "DomainTopology",
    "Identity",
    "KubernetesAuthGate",
    "KubernetesDomainStore",
    "ResourceRef",
    "ResourceStore",
    "ScaleCoordinator",
    "ScaleResult",
    "TopologyRetriever",
    "TopologySource",
]

from domainscaler.scaler.coordinator import ScaleCoordinator, ScaleResult
from domainscaler.scaler.domain import Domain
from domainscaler.scaler.resource_store import KubernetesDomainStore, ResourceStore
from domainscaler.scaler.security import (
    AccessDecision,
    AuthGate,
    Identity,
    KubernetesAuthGate,
    ResourceRef,
)
from domainscaler.scaler.topology import (
    AdminServerTopologySource,
    ClusterTopology,
    DomainTopology,
    TopologyRetriever,
    TopologySource,
)
