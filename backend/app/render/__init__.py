from app.render.flow_adapter import FlowCanvas, to_flow_edge, to_flow_node

__all__ = ["FlowCanvas", "to_flow_edge", "to_flow_node"]
