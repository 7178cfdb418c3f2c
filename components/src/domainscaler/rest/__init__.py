# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
REST service exposing the scale-cluster operation.

Usage:
    python -m domainscaler.rest --namespaces app-ns-1 app-ns-2
"""

__all__ = [
    "create_app",
]

from domainscaler.rest.app import create_app
