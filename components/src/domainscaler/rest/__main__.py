# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
domainscaler - REST service entry point.

Usage:
    python -m domainscaler.rest --namespaces app-ns-1 app-ns-2
"""

import argparse
import asyncio
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from kubernetes import config
from prometheus_client import start_http_server

from domainscaler.rest.app import create_app
from domainscaler.rest.argparse_config import (
    create_scaler_parser,
    validate_scaler_args,
)
from domainscaler.runtime.logging import configure_domainscaler_logging
from domainscaler.scaler.coordinator import ScaleCoordinator
from domainscaler.scaler.defaults import ScalerDefaults
from domainscaler.scaler.metrics import ScalerPrometheusMetrics
from domainscaler.scaler.resource_store import KubernetesDomainStore
from domainscaler.scaler.security import KubernetesAuthGate
from domainscaler.scaler.topology import AdminServerTopologySource, TopologyRetriever

configure_domainscaler_logging()
logger = logging.getLogger(__name__)


def load_kubernetes_config(kubeconfig: Optional[str] = None) -> None:
    """Load an explicit kubeconfig, else in-cluster config, else ~/.kube/config."""
    if kubeconfig:
        config.load_kube_config(config_file=kubeconfig)
        return
    try:
        config.load_incluster_config()
        logger.info("Using in-cluster Kubernetes configuration")
    except config.ConfigException:
        config.load_kube_config()
        logger.info("Using local kubeconfig")


def build_app(args: argparse.Namespace) -> FastAPI:
    """Wire the Kubernetes-backed collaborators into a REST application."""
    metrics = None
    if args.metrics_port >= 0:
        metrics = ScalerPrometheusMetrics(prefix=ScalerDefaults.metrics_prefix)
        start_http_server(args.metrics_port)
        logger.info(f"Prometheus metrics served on port {args.metrics_port}")

    source = AdminServerTopologySource(
        args.admin_url_template,
        username=args.admin_username,
        password=args.admin_password,
    )
    coordinator = ScaleCoordinator(
        auth_gate=KubernetesAuthGate(),
        store=KubernetesDomainStore(),
        topology_retriever=TopologyRetriever(source),
        namespaces=args.namespaces,
        topology_timeout=args.topology_timeout,
        metrics=metrics,
    )
    return create_app(coordinator)


async def main(args: argparse.Namespace):
    validate_scaler_args(args)

    logger.info("=" * 60)
    logger.info("Starting domainscaler")
    logger.info(f"Namespaces: {args.namespaces}")
    logger.info(f"Topology timeout: {args.topology_timeout}s")
    logger.info("=" * 60)

    load_kubernetes_config(args.kubeconfig)
    app = build_app(args)

    server = uvicorn.Server(
        uvicorn.Config(app, host=args.host, port=args.port, log_level="info")
    )
    await server.serve()


if __name__ == "__main__":
    parser = create_scaler_parser()
    args = parser.parse_args()
    asyncio.run(main(args))
