# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram


class ScalerPrometheusMetrics:
    """Container for all scaler Prometheus metrics."""

    def __init__(
        self, prefix: str = "domainscaler", registry: Optional[CollectorRegistry] = None
    ):
        registry = registry if registry is not None else REGISTRY

        # Outcome is "scaled", "unchanged", "error" or the failure reason
        self.scale_requests = Counter(
            f"{prefix}:scale_requests",
            "Scale cluster requests by outcome",
            ["outcome"],
            registry=registry,
        )
        self.topology_fetch_seconds = Histogram(
            f"{prefix}:topology_fetch_seconds",
            "Time spent retrieving live domain topology (s)",
            registry=registry,
        )

    def record_outcome(self, outcome: str) -> None:
        self.scale_requests.labels(outcome=outcome).inc()
