# backend/app/graph/templates.py
"""
Starter architecture templates

Small hand-made architectures a user can drop onto a canvas instead of
synthesizing one from schema + endpoints. Components reference each other
by their index in the template.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from app.graph.graph_schema import NodeType


@dataclass
class TemplateComponent:
    node_type: NodeType
    name: str
    layer: int
    description: Optional[str] = None


@dataclass
class ArchitectureTemplate:
    id: str
    name: str
    description: str
    icon: str
    category: str  # web-app | mobile-app | microservices | monolith | serverless
    components: List[TemplateComponent] = field(default_factory=list)
    connections: List[Tuple[int, int, str]] = field(default_factory=list)


SIMPLE_WEB_APP = ArchitectureTemplate(
    id="simple-web-app",
    name="Simple Web App",
    description="Frontend + API + Database",
    icon="Globe",
    category="web-app",
    components=[
        TemplateComponent(NodeType.FRONTEND, "Frontend App", 0, "React/Next.js"),
        TemplateComponent(NodeType.API_SERVICE, "API Server", 1, "Node.js/Express"),
        TemplateComponent(NodeType.DATABASE, "Database", 2, "PostgreSQL"),
    ],
    connections=[(0, 1, "API Requests"), (1, 2, "Query")],
)

MICROSERVICES = ArchitectureTemplate(
    id="microservices",
    name="Microservices",
    description="Distributed service architecture",
    icon="Network",
    category="microservices",
    components=[
        TemplateComponent(NodeType.FRONTEND, "Frontend", 0),
        TemplateComponent(NodeType.LOAD_BALANCER, "Load Balancer", 1),
        TemplateComponent(NodeType.API_SERVICE, "User Service", 2),
        TemplateComponent(NodeType.API_SERVICE, "Order Service", 2),
        TemplateComponent(NodeType.DATABASE, "Database", 3),
    ],
    connections=[
        (0, 1, "API Requests"),
        (1, 2, "Route"),
        (1, 3, "Route"),
        (2, 4, "Query"),
        (3, 4, "Query"),
    ],
)

ARCHITECTURE_TEMPLATES = {t.id: t for t in (SIMPLE_WEB_APP, MICROSERVICES)}


def get_template(template_id: str) -> Optional[ArchitectureTemplate]:
    return ARCHITECTURE_TEMPLATES.get(template_id)
