# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""HTTP surface of the scaler."""

import logging
from typing import Optional

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictInt

from domainscaler.scaler.coordinator import ScaleCoordinator
from domainscaler.scaler.exceptions import ScaleError

logger = logging.getLogger(__name__)

SCALE_PATH = "/operator/latest/domains/{domain_uid}/clusters/{cluster}/scale"


class ScaleClusterRequest(BaseModel):
    """Body of a scale request"""

    model_config = ConfigDict(populate_by_name=True)

    # no coercion from bool, str or float
    managed_server_count: StrictInt = Field(alias="managedServerCount")


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def create_app(coordinator: ScaleCoordinator) -> FastAPI:
    app = FastAPI(title="domainscaler")
    app.state.coordinator = coordinator

    @app.exception_handler(ScaleError)
    async def scale_error_handler(request: Request, exc: ScaleError):
        return JSONResponse(
            status_code=exc.http_status,
            content={
                "detail": exc.message,
                "reason": exc.reason,
                "retriable": exc.retriable,
            },
        )

    @app.get("/healthz")
    async def health_check():
        return {
            "status": "healthy",
            "component": "domainscaler",
            "namespaces": coordinator.namespaces,
        }

    @app.post(SCALE_PATH)
    async def scale_cluster(
        domain_uid: str,
        cluster: str,
        body: ScaleClusterRequest,
        authorization: Optional[str] = Header(default=None),
        x_requested_by: Optional[str] = Header(default=None),
    ):
        # required on every POST
        if not x_requested_by:
            raise HTTPException(
                status_code=400, detail="The 'X-Requested-By' header is required"
            )

        try:
            result = await coordinator.scale_cluster(
                domain_uid,
                cluster,
                body.managed_server_count,
                token=bearer_token(authorization),
            )
        except ScaleError:
            raise
        except Exception:
            logger.exception(f"Unexpected error scaling {domain_uid}/{cluster}")
            raise

        return result.model_dump(by_alias=True)

    return app
