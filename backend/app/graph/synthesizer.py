import re
import uuid
from typing import Any, Dict, List, Optional

import structlog

from app import config
from app.graph.graph_schema import (
    Edge,
    Graph,
    GraphMetadata,
    Node,
    NodeData,
    NodeType,
    Position,
    utc_now_iso,
)
from app.graph.layout import apply_layered_layout
from app.graph.node_style import (
    META_ENDPOINTS,
    META_EXPECTED_LOAD,
    META_TABLES,
    META_TECHNOLOGY,
    node_type_color,
)

logger = structlog.get_logger(__name__)

# Synthesis intentionally limits visual complexity
MAX_API_SERVICES = 4
SEARCH_ENGINE_MIN_TABLES = 3
HIGH_LOAD = "high"


def _get(obj: Any, key: str) -> Any:
    """Read a key from a mapping or an attribute from a model; None otherwise."""
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.strip().lower()).strip("-")
    return slug or "group"


class _GraphBuilder:
    """Accumulates nodes, edges and layer membership with collision-free ids."""

    def __init__(self):
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self.layers: List[List[str]] = [[] for _ in range(6)]
        self._ids: set[str] = set()

    def _unique_id(self, base_id: str) -> str:
        if base_id not in self._ids:
            return base_id
        counter = 1
        while f"{base_id}-{counter}" in self._ids:
            counter += 1
        return f"{base_id}-{counter}"

    def add_node(
        self,
        layer: int,
        base_id: str,
        node_type: NodeType,
        name: str,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        node_id = self._unique_id(base_id)
        self._ids.add(node_id)
        self.nodes.append(
            Node(
                id=node_id,
                type=node_type,
                position=Position(),
                data=NodeData(
                    name=name,
                    description=description,
                    color=node_type_color(node_type),
                    metadata=metadata or {},
                ),
            )
        )
        self.layers[layer].append(node_id)
        return node_id

    def connect(
        self,
        source: Optional[str],
        target: Optional[str],
        label: str,
        protocol: str,
        security: Optional[str] = None,
    ) -> None:
        if not source or not target:
            return
        data = {"protocol": protocol}
        if security:
            data["security"] = security
        self.edges.append(
            Edge(
                id=self._unique_id(f"{source}-to-{target}"),
                source=source,
                target=target,
                label=label,
                data=data,
            )
        )
        self._ids.add(self.edges[-1].id)


def synthesize_architecture(
    schema_input: Any,
    endpoint_input: Any,
    project_name: str = "Project",
) -> Graph:
    """
    Build a starter architecture graph from a normalized database schema
    and a grouped API endpoint list.

    Inputs are read defensively: a missing or malformed schema or endpoint
    list degrades to a smaller graph, it never raises.

    Layers (left to right):
        0 client     CDN, frontend
        1 edge       API gateway, authentication (if an "auth" group exists)
        2 service    one API service per endpoint group (max 4), cache (high load)
        3 data       primary database, search engine (>= 3 tables)
        4 platform   monitoring, logging, notifications
        5 ops        CI/CD, secrets manager, backup storage
    """
    project_name = (project_name or "").strip() or "Project"

    tables = _as_list(_get(schema_input, "schemas"))
    analysis = _get(schema_input, "analysis") or {}
    scaling = _get(analysis, "scalingInsights") or {}
    expected_load = _get(scaling, "expectedLoad")
    recommendations = _as_list(_get(analysis, "databaseRecommendations"))

    endpoint_groups = [
        g for g in _as_list(_get(endpoint_input, "endpoints"))
        if isinstance(_get(g, "group"), str) and _get(g, "group").strip()
    ]

    group_names: List[str] = []
    for group in endpoint_groups:
        name = _get(group, "group").strip()
        if name not in group_names:
            group_names.append(name)

    has_auth = any("auth" in name.lower() for name in group_names)
    high_load = isinstance(expected_load, str) and expected_load.strip().lower() == HIGH_LOAD
    has_search = len(tables) >= SEARCH_ENGINE_MIN_TABLES

    db_name = _get(recommendations[0], "name") if recommendations else None
    if not isinstance(db_name, str) or not db_name.strip():
        db_name = config.DEFAULT_DATABASE_NAME

    builder = _GraphBuilder()

    # -------------------------
    # LAYER 0: client tier
    # -------------------------
    cdn_id = builder.add_node(
        0, "cdn-1", NodeType.CDN, "CDN", "Global content delivery",
        {META_TECHNOLOGY: "CloudFlare/CloudFront"},
    )
    frontend_id = builder.add_node(
        0, "frontend-1", NodeType.FRONTEND, f"{project_name} Frontend",
        "Web application", {META_TECHNOLOGY: "React/Next.js"},
    )
    builder.connect(cdn_id, frontend_id, "Static Assets", "HTTPS")

    # -------------------------
    # LAYER 1: edge tier
    # -------------------------
    gateway_id = builder.add_node(
        1, "api-gateway-1", NodeType.API_GATEWAY, "API Gateway",
        "Routes and throttles API traffic", {META_TECHNOLOGY: "Kong/AWS API Gateway"},
    )
    builder.connect(frontend_id, gateway_id, "API Requests", "HTTPS")

    auth_id = None
    if has_auth:
        auth_id = builder.add_node(
            1, "authentication-1", NodeType.AUTHENTICATION, "Authentication Service",
            "JWT-based authentication", {META_TECHNOLOGY: "JWT/OAuth"},
        )

    # -------------------------
    # LAYER 2: service tier
    # -------------------------
    service_ids: List[str] = []
    for group_name in group_names[:MAX_API_SERVICES]:
        endpoint_count = sum(
            len(_as_list(_get(g, "endpoints")))
            for g in endpoint_groups
            if _get(g, "group").strip() == group_name
        )
        service_ids.append(
            builder.add_node(
                2, f"api-{slugify(group_name)}", NodeType.API_SERVICE, f"{group_name} API",
                f"Handles {group_name.lower()} operations",
                {META_TECHNOLOGY: "Node.js/Express", META_ENDPOINTS: endpoint_count},
            )
        )

    cache_id = None
    if high_load:
        cache_id = builder.add_node(
            2, "cache-1", NodeType.CACHE, "Redis Cache", "Application-level caching",
            {META_TECHNOLOGY: "Redis"},
        )

    # -------------------------
    # LAYER 3: data tier
    # -------------------------
    database_id = builder.add_node(
        3, "database-1", NodeType.DATABASE, f"{db_name} Database",
        f"{len(tables)} tables",
        {
            META_TECHNOLOGY: db_name,
            META_TABLES: len(tables),
            META_EXPECTED_LOAD: expected_load if isinstance(expected_load, str) else "Medium",
        },
    )

    search_id = None
    if has_search:
        search_id = builder.add_node(
            3, "search-engine-1", NodeType.SEARCH_ENGINE, "Search Engine",
            "Full-text search and indexing", {META_TECHNOLOGY: "Elasticsearch/OpenSearch"},
        )

    # -------------------------
    # LAYER 4: platform tier
    # -------------------------
    monitoring_id = builder.add_node(
        4, "monitoring-1", NodeType.MONITORING, "Monitoring & APM",
        "Metrics, alerting and tracing", {META_TECHNOLOGY: "Prometheus/Datadog"},
    )
    logging_id = builder.add_node(
        4, "logging-1", NodeType.LOGGING, "Centralized Logging",
        "Log aggregation and search", {META_TECHNOLOGY: "ELK Stack"},
    )
    builder.add_node(
        4, "notification-service-1", NodeType.NOTIFICATION_SERVICE, "Notification Hub",
        "Email, SMS and push delivery", {META_TECHNOLOGY: "AWS SNS"},
    )

    # -------------------------
    # LAYER 5: ops tier
    # -------------------------
    builder.add_node(
        5, "ci-cd-1", NodeType.CI_CD, "CI/CD Pipeline",
        "Build, test and deployment automation", {META_TECHNOLOGY: "GitHub Actions"},
    )
    secrets_id = builder.add_node(
        5, "secrets-manager-1", NodeType.SECRETS_MANAGER, "Secrets Manager",
        "Credentials and configuration", {META_TECHNOLOGY: "HashiCorp Vault"},
    )
    backup_id = builder.add_node(
        5, "backup-storage-1", NodeType.BACKUP_STORAGE, "Backup Storage",
        "Automated backups and recovery", {META_TECHNOLOGY: "AWS S3"},
    )

    # =========================================================
    # SERVICE WIRING
    # =========================================================
    for service_id in service_ids:
        builder.connect(gateway_id, service_id, "Route", "HTTPS")
        builder.connect(auth_id, service_id, "Verify", "HTTPS", security="JWT")
        builder.connect(service_id, database_id, "Query", "SQL")
        builder.connect(service_id, cache_id, "Cache", "TCP")
        builder.connect(service_id, monitoring_id, "Metrics", "HTTPS")
        builder.connect(service_id, logging_id, "Logs", "HTTPS")
        builder.connect(service_id, secrets_id, "Secrets", "HTTPS")

    builder.connect(database_id, search_id, "Sync", "HTTPS")
    builder.connect(database_id, backup_id, "Backup", "Encrypted")

    now = utc_now_iso()
    graph = Graph(
        id=f"arch-{uuid.uuid4().hex}",
        name=f"{project_name} System Architecture",
        description=(
            f"Generated architecture for {project_name} based on database schema "
            f"and API endpoints"
        ),
        nodes=builder.nodes,
        edges=builder.edges,
        metadata=GraphMetadata(
            created_at=now,
            updated_at=now,
            version=config.GRAPH_VERSION,
            tags=["generated", "web-app"],
        ),
    )
    apply_layered_layout(graph, builder.layers)

    logger.info(
        "architecture_synthesized",
        graph_id=graph.id,
        nodes=len(graph.nodes),
        edges=len(graph.edges),
        api_services=len(service_ids),
        dropped_groups=max(len(group_names) - MAX_API_SERVICES, 0),
    )
    return graph
