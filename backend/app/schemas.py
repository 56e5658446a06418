from pydantic import BaseModel
from typing import Optional, Dict, Any, List


class GenerateRequest(BaseModel):
    schema_input: Optional[Dict[str, Any]] = None  # {schemas: [...], analysis: {...}}
    endpoint_input: Optional[Dict[str, Any]] = None  # {endpoints: [{group, endpoints}]}
    project_name: str = "Project"
    project_id: Optional[str] = None
    readonly: bool = False


class ViewportModel(BaseModel):
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


class PointModel(BaseModel):
    x: float
    y: float


class AddNodeRequest(BaseModel):
    """Add a component at a screen point (defaults to the canvas centre)"""
    type: str
    name: Optional[str] = None
    description: Optional[str] = None
    screen_point: Optional[PointModel] = None
    viewport: Optional[ViewportModel] = None


class EditNodeRequest(BaseModel):
    name: str
    description: Optional[str] = None


class NodeChangesRequest(BaseModel):
    """Canvas change batch: position (with dragging flag) and remove changes"""
    changes: List[Dict[str, Any]] = []


class ConnectRequest(BaseModel):
    source: str
    target: str
    label: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class RelabelEdgeRequest(BaseModel):
    label: str


class AssociateProjectRequest(BaseModel):
    project_id: str


class CleanupRequest(BaseModel):
    valid_project_ids: List[str] = []
