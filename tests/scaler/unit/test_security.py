# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for KubernetesAuthGate."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from domainscaler.scaler.exceptions import UnauthenticatedError
from domainscaler.scaler.security import Identity, KubernetesAuthGate, ResourceRef

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.scaler,
]


def token_review_response(authenticated, username=None, groups=None, error=None):
    user = SimpleNamespace(username=username, uid="u-1", groups=groups)
    return SimpleNamespace(
        status=SimpleNamespace(authenticated=authenticated, user=user, error=error)
    )


def access_review_response(allowed, reason=None):
    return SimpleNamespace(status=SimpleNamespace(allowed=allowed, reason=reason))


@pytest.fixture
def authentication_api():
    api = MagicMock()
    api.create_token_review.return_value = token_review_response(
        True, username="alice", groups=["ops", "system:authenticated"]
    )
    return api


@pytest.fixture
def authorization_api():
    api = MagicMock()
    api.create_subject_access_review.return_value = access_review_response(True)
    return api


@pytest.fixture
def gate(authentication_api, authorization_api):
    return KubernetesAuthGate(
        authentication_api=authentication_api, authorization_api=authorization_api
    )


@pytest.mark.asyncio
async def test_authenticate_returns_identity(gate, authentication_api):
    identity = await gate.authenticate("token-abc")

    assert identity == Identity(
        subject="alice", uid="u-1", groups=("ops", "system:authenticated")
    )
    review = authentication_api.create_token_review.call_args[0][0]
    assert review.spec.token == "token-abc"


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, "", "   "])
async def test_authenticate_without_token_skips_review(gate, authentication_api, token):
    with pytest.raises(UnauthenticatedError, match="Missing bearer token"):
        await gate.authenticate(token)

    authentication_api.create_token_review.assert_not_called()


@pytest.mark.asyncio
async def test_authenticate_rejected_token(gate, authentication_api):
    authentication_api.create_token_review.return_value = token_review_response(
        False, error="token expired"
    )

    with pytest.raises(UnauthenticatedError, match="token expired"):
        await gate.authenticate("token-abc")


@pytest.mark.asyncio
async def test_authenticate_review_without_status(gate, authentication_api):
    authentication_api.create_token_review.return_value = SimpleNamespace(status=None)

    with pytest.raises(UnauthenticatedError):
        await gate.authenticate("token-abc")


@pytest.mark.asyncio
async def test_authorize_sends_resource_attributes(gate, authorization_api):
    identity = Identity(subject="alice", uid="u-1", groups=("ops",))

    decision = await gate.authorize(
        identity, "update", ResourceRef(group="weblogic.oracle", resource="domains")
    )

    assert decision.allowed is True
    review = authorization_api.create_subject_access_review.call_args[0][0]
    assert review.spec.user == "alice"
    assert review.spec.groups == ["ops"]
    attributes = review.spec.resource_attributes
    assert attributes.verb == "update"
    assert attributes.group == "weblogic.oracle"
    assert attributes.resource == "domains"
    assert attributes.namespace is None


@pytest.mark.asyncio
async def test_authorize_denied(gate, authorization_api):
    authorization_api.create_subject_access_review.return_value = (
        access_review_response(False, reason="no RBAC rule")
    )

    decision = await gate.authorize(
        Identity(subject="bob"),
        "update",
        ResourceRef(group="weblogic.oracle", resource="domains"),
    )

    assert decision.allowed is False
    assert decision.reason == "no RBAC rule"
