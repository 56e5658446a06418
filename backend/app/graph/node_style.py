from app.graph.graph_schema import NodeType

# Well-known keys of the open node metadata mapping
META_TECHNOLOGY = "technology"
META_TABLES = "tables"
META_ENDPOINTS = "endpoints"
META_EXPECTED_LOAD = "expectedLoad"
META_EXTERNAL = "external"

DEFAULT_COLOR = "#6B7280"
DEFAULT_ICON = "Box"

NODE_STYLE = {
    NodeType.DATABASE: {"color": "#EF4444", "icon": "Database", "technology": "PostgreSQL"},
    NodeType.API_SERVICE: {"color": "#8B5CF6", "icon": "Server", "technology": "Node.js"},
    NodeType.AUTHENTICATION: {"color": "#F59E0B", "icon": "Shield"},
    NodeType.FRONTEND: {"color": "#3B82F6", "icon": "Monitor", "technology": "React"},
    NodeType.MOBILE: {"color": "#06B6D4", "icon": "Monitor"},
    NodeType.EXTERNAL_SERVICE: {"color": "#6B7280", "icon": "Cloud"},
    NodeType.LOAD_BALANCER: {"color": "#10B981", "icon": "Network"},
    NodeType.CACHE: {"color": "#DC2626", "icon": "Zap"},
    NodeType.QUEUE: {"color": "#F97316", "icon": "MessageSquare"},
    NodeType.API_GATEWAY: {"color": "#059669", "icon": "Network"},
    NodeType.SERVICE_MESH: {"color": "#7C3AED", "icon": "GitBranch"},
    NodeType.CDN: {"color": "#0891B2", "icon": "Globe"},
    NodeType.MONITORING: {"color": "#EA580C", "icon": "Activity"},
    NodeType.LOGGING: {"color": "#CA8A04", "icon": "FileText"},
    NodeType.SEARCH_ENGINE: {"color": "#B45309", "icon": "Search"},
    NodeType.DATA_WAREHOUSE: {"color": "#7C2D12", "icon": "Archive"},
    NodeType.STREAMING: {"color": "#BE185D", "icon": "Radio"},
    NodeType.CONTAINER_REGISTRY: {"color": "#1F2937", "icon": "Package"},
    NodeType.SECRETS_MANAGER: {"color": "#374151", "icon": "Key"},
    NodeType.BACKUP_STORAGE: {"color": "#4B5563", "icon": "HardDrive"},
    NodeType.ANALYTICS: {"color": "#7C3AED", "icon": "BarChart3"},
    NodeType.ML_SERVICE: {"color": "#EC4899", "icon": "Zap"},
    NodeType.NOTIFICATION_SERVICE: {"color": "#8B5CF6", "icon": "Bell"},
    NodeType.SCHEDULER: {"color": "#0D9488", "icon": "Clock"},
    NodeType.WORKFLOW_ENGINE: {"color": "#0F766E", "icon": "GitMerge"},
    NodeType.IDENTITY_PROVIDER: {"color": "#B91C1C", "icon": "Users"},
    NodeType.VPN: {"color": "#9A3412", "icon": "Lock"},
    NodeType.FIREWALL: {"color": "#DC2626", "icon": "Shield"},
    NodeType.DNS: {"color": "#2563EB", "icon": "Globe"},
    NodeType.CERTIFICATE_MANAGER: {"color": "#16A34A", "icon": "Key"},
    NodeType.ARTIFACT_REPOSITORY: {"color": "#6B7280", "icon": "Package"},
    NodeType.CI_CD: {"color": "#059669", "icon": "GitPullRequest"},
    NodeType.TESTING_SERVICE: {"color": "#7C2D12", "icon": "Activity"},
    NodeType.GROUP: {"color": "#F9FAFB", "icon": DEFAULT_ICON},
}


def node_type_color(node_type: NodeType) -> str:
    return NODE_STYLE.get(node_type, {}).get("color", DEFAULT_COLOR)


def node_type_icon(node_type: NodeType) -> str:
    return NODE_STYLE.get(node_type, {}).get("icon", DEFAULT_ICON)


def default_metadata(node_type: NodeType) -> dict:
    """Metadata a freshly added node starts with (a technology guess)."""
    return {META_TECHNOLOGY: NODE_STYLE.get(node_type, {}).get("technology", "")}
