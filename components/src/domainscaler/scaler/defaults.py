# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

# Replica count used when neither the cluster nor the domain sets one
DEFAULT_REPLICA_LIMIT = 0

# Domain custom resource coordinates
DOMAIN_GROUP = "weblogic.oracle"
DOMAIN_VERSION = "v2"
DOMAIN_PLURAL = "domains"

SCALE_VERB = "update"


class ScalerDefaults:
    namespaces = ["default"]
    topology_timeout = 30.0
    admin_url_template = (
        "http://{domain_uid}-admin-server.{namespace}.svc.cluster.local:7001"
    )
    admin_username = None
    admin_password = None
    host = "0.0.0.0"
    port = 8081
    metrics_port = -1
    metrics_prefix = "domainscaler"
