"""Call-site capture: Frame model and boundary-aware stack walking."""

from .frame import Frame, boundary, capture_frame, is_boundary

__all__ = ["Frame", "boundary", "capture_frame", "is_boundary"]
