# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Custom exceptions for the scale-cluster operation.

Every failure of :meth:`ScaleCoordinator.scale_cluster` is a :class:`ScaleError`.
Subclasses carry a stable ``reason``, the HTTP status the REST layer answers
with, and whether retrying the same request may succeed.
"""


class ScaleError(Exception):
    """Base class for all scale-cluster failures."""

    reason = "ScaleError"
    http_status = 500
    retriable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgumentError(ScaleError):
    reason = "InvalidArgument"
    http_status = 400


class UnauthenticatedError(ScaleError):
    reason = "Unauthenticated"
    http_status = 401

    def __init__(self, message: str = "Caller is not authenticated"):
        super().__init__(message)


class ForbiddenError(ScaleError):
    reason = "Forbidden"
    http_status = 403


class NotFoundError(ScaleError):
    reason = "NotFound"
    http_status = 404


class DomainNotFoundError(NotFoundError):
    def __init__(self, domain_uid: str):
        self.domain_uid = domain_uid
        super().__init__(f"Domain with UID '{domain_uid}' not found")


class ClusterNotFoundError(NotFoundError):
    def __init__(self, domain_uid: str, cluster_name: str):
        self.domain_uid = domain_uid
        self.cluster_name = cluster_name
        super().__init__(
            f"Cluster '{cluster_name}' not found in topology of domain '{domain_uid}'"
        )


class TopologyTimeoutError(ScaleError):
    reason = "Timeout"
    http_status = 504
    retriable = True

    def __init__(self, domain_uid: str, timeout: float):
        self.domain_uid = domain_uid
        self.timeout = timeout
        super().__init__(
            f"Topology of domain '{domain_uid}' not available within {timeout}s"
        )


class TopologyUnavailableError(ScaleError):
    """The topology source answered, but not with a usable topology."""

    reason = "TopologyUnavailable"
    http_status = 502
    retriable = True


class ConflictError(ScaleError):
    reason = "Conflict"
    http_status = 409
    retriable = True
