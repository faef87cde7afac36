from .request_gateway import RequestGateway
from .vision_session import SessionStatus, VisionSession

__all__ = ["RequestGateway", "SessionStatus", "VisionSession"]
