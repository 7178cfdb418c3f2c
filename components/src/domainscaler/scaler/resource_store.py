# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Access to Domain resources."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from domainscaler.scaler.defaults import DOMAIN_GROUP, DOMAIN_PLURAL, DOMAIN_VERSION
from domainscaler.scaler.domain import Domain
from domainscaler.scaler.exceptions import ConflictError, DomainNotFoundError

logger = logging.getLogger(__name__)


class ResourceStore(ABC):
    """Lists and replaces Domain resources.

    ``replace_domain`` uses optimistic concurrency: the body carries the
    resource version captured at read time, and the write is rejected with
    :class:`ConflictError` if the stored resource has changed since.
    """

    @abstractmethod
    async def list_domains(self, namespace: str) -> List[Domain]:
        pass

    @abstractmethod
    async def replace_domain(self, namespace: str, name: str, domain: Domain) -> Domain:
        pass


class KubernetesDomainStore(ResourceStore):
    """ResourceStore backed by the Kubernetes custom objects API."""

    def __init__(
        self,
        custom_objects_api: Optional[client.CustomObjectsApi] = None,
        group: str = DOMAIN_GROUP,
        version: str = DOMAIN_VERSION,
        plural: str = DOMAIN_PLURAL,
    ):
        self.custom_objects_api = custom_objects_api or client.CustomObjectsApi()
        self.group = group
        self.version = version
        self.plural = plural

    async def list_domains(self, namespace: str) -> List[Domain]:
        response = await asyncio.to_thread(
            self.custom_objects_api.list_namespaced_custom_object,
            group=self.group,
            version=self.version,
            namespace=namespace,
            plural=self.plural,
        )
        items = response.get("items", []) if response else []
        logger.debug(f"Listed {len(items)} domains in namespace {namespace}")
        return [Domain.from_resource(item) for item in items]

    async def replace_domain(self, namespace: str, name: str, domain: Domain) -> Domain:
        try:
            response = await asyncio.to_thread(
                self.custom_objects_api.replace_namespaced_custom_object,
                group=self.group,
                version=self.version,
                namespace=namespace,
                plural=self.plural,
                name=name,
                body=domain.to_resource(),
            )
        except ApiException as e:
            if e.status == 409:
                raise ConflictError(
                    f"Domain {namespace}/{name} changed since resource version "
                    f"{domain.resource_version}; re-read and retry"
                ) from e
            if e.status == 404:
                raise DomainNotFoundError(domain.uid or name) from e
            raise

        return Domain.from_resource(response)
