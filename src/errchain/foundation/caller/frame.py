"""Call-site capture for chain nodes.

Library entry points mark themselves with `@boundary`. `capture_frame` walks
outward from its caller past every boundary frame and records the first frame
that belongs to user code. No path matching is involved, so vendored or
renamed installs behave the same.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Annotated, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from errchain.foundation.config import get_settings

if TYPE_CHECKING:
    from types import CodeType, FrameType

F = TypeVar("F", bound=Callable[..., object])

# Code objects of library functions sitting between user code and capture_frame
_BOUNDARY: set[CodeType] = set()


# ═══════════════════════════════════════════════════════════════════════════════
# Frame
# ═══════════════════════════════════════════════════════════════════════════════


class Frame(BaseModel):
    """Captured call-site location. `ok=False` means the location is unknown."""

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")

    function: str = ""
    file: str = ""
    line: Annotated[int, Field(ge=0)] = 0
    ok: bool = False

    @classmethod
    def unknown(cls) -> Frame:
        """Frame for a failed capture."""
        return _UNKNOWN

    @classmethod
    def of(cls, frame: FrameType) -> Frame:
        """Build from a live interpreter frame (bypasses validation)."""
        code = frame.f_code
        module = frame.f_globals.get("__name__", "")
        qualname = getattr(code, "co_qualname", code.co_name)
        return cls.model_construct(
            function=f"{module}.{qualname}" if module else qualname,
            file=code.co_filename,
            line=frame.f_lineno or 0,
            ok=True,
        )

    def location(self, *, full_paths: bool = False) -> str:
        """Render as `file:line (function)`, or `n/a` when capture failed."""
        if not self.ok:
            return "n/a"
        file = self.file if full_paths else os.path.basename(self.file)
        return f"{file}:{self.line} ({self.function})"

    def __str__(self) -> str:
        return self.location()


_UNKNOWN = Frame.model_construct(function="", file="", line=0, ok=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Capture
# ═══════════════════════════════════════════════════════════════════════════════


def boundary(func: F) -> F:
    """Mark func as library code: capture_frame never reports it as a call site.

    Registers the code object only, so no wrapper frame is added to the stack.
    """
    code = getattr(func, "__code__", None)
    if code is None:
        raise TypeError(f"boundary() requires a plain function, got {type(func).__name__}")
    _BOUNDARY.add(code)
    return func


def is_boundary(frame: FrameType) -> bool:
    """Check whether frame belongs to a registered boundary function."""
    return frame.f_code in _BOUNDARY


def capture_frame(skip_self: bool = True) -> Frame:
    """Capture the calling user frame.

    With skip_self, boundary frames between the caller and user code are
    skipped. Without it, the immediate caller is returned as-is.
    """
    if not get_settings().capture_frames:
        return _UNKNOWN
    getframe = getattr(sys, "_getframe", None)
    if getframe is None:
        return _UNKNOWN
    try:
        frame: FrameType | None = getframe(1)
    except ValueError:
        return _UNKNOWN
    if skip_self:
        while frame is not None and frame.f_code in _BOUNDARY:
            frame = frame.f_back
    return _UNKNOWN if frame is None else Frame.of(frame)
