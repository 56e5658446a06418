from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class NodeType(str, Enum):
    """Closed set of infrastructure archetypes a node may represent"""
    DATABASE = "database"
    API_SERVICE = "api-service"
    AUTHENTICATION = "authentication"
    FRONTEND = "frontend"
    MOBILE = "mobile"
    EXTERNAL_SERVICE = "external-service"
    LOAD_BALANCER = "load-balancer"
    CACHE = "cache"
    QUEUE = "queue"
    API_GATEWAY = "api-gateway"
    SERVICE_MESH = "service-mesh"
    CDN = "cdn"
    MONITORING = "monitoring"
    LOGGING = "logging"
    SEARCH_ENGINE = "search-engine"
    DATA_WAREHOUSE = "data-warehouse"
    STREAMING = "streaming"
    CONTAINER_REGISTRY = "container-registry"
    SECRETS_MANAGER = "secrets-manager"
    BACKUP_STORAGE = "backup-storage"
    ANALYTICS = "analytics"
    ML_SERVICE = "ml-service"
    NOTIFICATION_SERVICE = "notification-service"
    SCHEDULER = "scheduler"
    WORKFLOW_ENGINE = "workflow-engine"
    IDENTITY_PROVIDER = "identity-provider"
    VPN = "vpn"
    FIREWALL = "firewall"
    DNS = "dns"
    CERTIFICATE_MANAGER = "certificate-manager"
    ARTIFACT_REPOSITORY = "artifact-repository"
    CI_CD = "ci-cd"
    TESTING_SERVICE = "testing-service"
    # Visual backdrop only: never counted, dragged or selected
    GROUP = "group"

    @classmethod
    def parse(cls, value: Any) -> Optional["NodeType"]:
        """Resolve a raw type string, or None when it is not an archetype."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class NodeData:
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    ai_explanation: Optional[Any] = None    # free text or a JSON object


@dataclass
class Node:
    id: str
    type: NodeType
    position: Position
    data: NodeData

    @property
    def is_group(self) -> bool:
        return self.type == NodeType.GROUP


@dataclass
class Edge:
    id: str
    source: str
    target: str
    label: str = ""
    type: str = "smoothstep"
    data: Dict[str, Any] = field(default_factory=dict)

    def pair(self) -> frozenset:
        """Unordered endpoint pair; at most one edge may exist per pair."""
        return frozenset((self.source, self.target))


@dataclass
class GraphMetadata:
    created_at: str
    updated_at: str
    version: str = "1.0.0"
    tags: List[str] = field(default_factory=list)
    project_id: Optional[str] = None


@dataclass
class Graph:
    id: str
    name: str
    metadata: GraphMetadata
    description: Optional[str] = None
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[Node]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return next((e for e in self.edges if e.id == edge_id), None)

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def component_nodes(self) -> List[Node]:
        """Nodes that count as components (group backdrops excluded)."""
        return [n for n in self.nodes if not n.is_group]
