# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Caller authentication and authorization for scale requests."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from kubernetes import client

from domainscaler.scaler.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    subject: str
    uid: Optional[str] = None
    groups: Tuple[str, ...] = ()
    authenticated: bool = True


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class ResourceRef:
    """What an authorization check is about.

    A ``namespace`` of None means a cluster-wide check.
    """

    group: str
    resource: str
    namespace: Optional[str] = None
    name: Optional[str] = None
    subresource: Optional[str] = None


class AuthGate(ABC):
    """Verifies who is calling and whether they may perform an action."""

    @abstractmethod
    async def authenticate(self, token: Optional[str]) -> Identity:
        """Resolve a bearer token to an Identity.

        Raises:
            UnauthenticatedError: token missing, invalid or rejected
        """

    @abstractmethod
    async def authorize(
        self, identity: Identity, verb: str, resource: ResourceRef
    ) -> AccessDecision:
        pass


class KubernetesAuthGate(AuthGate):
    """AuthGate backed by the Kubernetes TokenReview and SubjectAccessReview APIs.

    The kubernetes client is blocking, so each review runs in a worker thread.
    """

    def __init__(
        self,
        authentication_api: Optional[client.AuthenticationV1Api] = None,
        authorization_api: Optional[client.AuthorizationV1Api] = None,
    ):
        self.authentication_api = authentication_api or client.AuthenticationV1Api()
        self.authorization_api = authorization_api or client.AuthorizationV1Api()

    async def authenticate(self, token: Optional[str]) -> Identity:
        if not token or not token.strip():
            raise UnauthenticatedError("Missing bearer token")

        review = client.V1TokenReview(spec=client.V1TokenReviewSpec(token=token))
        response = await asyncio.to_thread(
            self.authentication_api.create_token_review, review
        )

        status = response.status
        if status is None or not status.authenticated:
            error = status.error if status is not None else None
            logger.info(f"Token review rejected caller: {error or 'not authenticated'}")
            raise UnauthenticatedError(error or "Caller is not authenticated")

        user = status.user
        identity = Identity(
            subject=(user.username if user else None) or "",
            uid=user.uid if user else None,
            groups=tuple(user.groups or ()) if user else (),
        )
        logger.debug(f"Authenticated caller {identity.subject}")
        return identity

    async def authorize(
        self, identity: Identity, verb: str, resource: ResourceRef
    ) -> AccessDecision:
        review = client.V1SubjectAccessReview(
            spec=client.V1SubjectAccessReviewSpec(
                user=identity.subject,
                uid=identity.uid,
                groups=list(identity.groups),
                resource_attributes=client.V1ResourceAttributes(
                    group=resource.group,
                    resource=resource.resource,
                    namespace=resource.namespace,
                    name=resource.name,
                    subresource=resource.subresource,
                    verb=verb,
                ),
            )
        )
        response = await asyncio.to_thread(
            self.authorization_api.create_subject_access_review, review
        )

        status = response.status
        decision = AccessDecision(
            allowed=bool(status and status.allowed),
            reason=status.reason if status else None,
        )
        logger.debug(
            f"Access review for {identity.subject} {verb} "
            f"{resource.group}/{resource.resource}: allowed={decision.allowed}"
        )
        return decision
