# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Argument parsing for the domainscaler REST service."""

import argparse

from domainscaler.common.configuration.utils import add_argument
from domainscaler.scaler.defaults import ScalerDefaults


def create_scaler_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the scaler service.

    Every option can also be set through the environment variable named in
    its help text.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="domainscaler - Scale clusters of managed domains",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Watch two namespaces
  python -m domainscaler.rest --namespaces app-ns-1 app-ns-2

  # Shorter topology deadline, metrics on :9090
  DSCALE_TOPOLOGY_TIMEOUT=5 python -m domainscaler.rest --metrics-port 9090
        """,
    )

    add_argument(
        parser,
        flag_name="--namespaces",
        env_var="DSCALE_NAMESPACES",
        default=list(ScalerDefaults.namespaces),
        help="Namespaces searched for Domain resources",
        nargs="+",
    )
    add_argument(
        parser,
        flag_name="--topology-timeout",
        env_var="DSCALE_TOPOLOGY_TIMEOUT",
        default=ScalerDefaults.topology_timeout,
        help="Deadline in seconds for retrieving the live topology of a domain",
        arg_type=float,
    )
    add_argument(
        parser,
        flag_name="--admin-url-template",
        env_var="DSCALE_ADMIN_URL_TEMPLATE",
        default=ScalerDefaults.admin_url_template,
        help="Admin server base URL; {domain_uid} and {namespace} are substituted",
    )
    add_argument(
        parser,
        flag_name="--admin-username",
        env_var="DSCALE_ADMIN_USERNAME",
        default=ScalerDefaults.admin_username,
        help="User for the admin server management API",
    )
    add_argument(
        parser,
        flag_name="--admin-password",
        env_var="DSCALE_ADMIN_PASSWORD",
        default=ScalerDefaults.admin_password,
        help="Password for the admin server management API",
    )
    add_argument(
        parser,
        flag_name="--kubeconfig",
        env_var="DSCALE_KUBECONFIG",
        default=None,
        help="Kubeconfig file (default: in-cluster config, then ~/.kube/config)",
    )
    add_argument(
        parser,
        flag_name="--host",
        env_var="DSCALE_HOST",
        default=ScalerDefaults.host,
        help="Address the REST service binds to",
    )
    add_argument(
        parser,
        flag_name="--port",
        env_var="DSCALE_PORT",
        default=ScalerDefaults.port,
        help="Port the REST service listens on",
        arg_type=int,
    )
    add_argument(
        parser,
        flag_name="--metrics-port",
        env_var="DSCALE_METRICS_PORT",
        default=ScalerDefaults.metrics_port,
        help="Port for Prometheus metrics (-1 to disable)",
        arg_type=int,
    )

    return parser


def validate_scaler_args(args: argparse.Namespace) -> None:
    if not args.namespaces:
        raise ValueError("At least one namespace is required (--namespaces)")
    if args.topology_timeout <= 0:
        raise ValueError(
            f"--topology-timeout must be positive, got {args.topology_timeout}"
        )
