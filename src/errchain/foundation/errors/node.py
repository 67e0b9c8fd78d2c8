"""Chain node: one immutable causal step."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from errchain.foundation.caller import Frame
from errchain.foundation.codes import Code, StdCode

# Pre-allocated empty trail (single allocation)
_EMPTY_TRAIL: tuple[Frame, ...] = ()


class Node(BaseModel):
    """One step in an error chain: a message or absorbed exception, a code and the capturing frame.

    `trail` holds frames the node was tracked through, newest first. Tracked or
    recoded copies keep a reference to the node they came from in `origin`, so
    they stay the same error for identity checks.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", arbitrary_types_allowed=True, revalidate_instances="never",
    )

    message: str = ""
    error: BaseException | None = Field(default=None, repr=False)
    code: Code = StdCode.UNKNOWN
    frame: Frame = Field(default_factory=Frame.unknown)
    trail: tuple[Frame, ...] = Field(default=_EMPTY_TRAIL, repr=False)
    origin: Node | None = Field(default=None, repr=False, exclude=True)

    @classmethod
    def create(cls, message: str = "", error: BaseException | None = None,
               code: Code = StdCode.UNKNOWN, frame: Frame | None = None) -> Node:
        """Build a node without validation (hot path)."""
        return cls.model_construct(
            message=message, error=error, code=code, frame=frame or Frame.unknown(), trail=_EMPTY_TRAIL, origin=None,
        )

    @property
    def text(self) -> str:
        """Display text: the message, else the absorbed error's text."""
        if self.message:
            return self.message
        return "" if self.error is None else str(self.error)

    @property
    def underlying(self) -> BaseException | Node:
        """The absorbed exception, or the node itself for message nodes."""
        return self if self.error is None else self.error

    @property
    def identity(self) -> Node:
        """The node this one was derived from by tracking or recoding, else itself."""
        return self.origin or self

    def same_as(self, other: object) -> bool:
        """Whether other is this node or shares its identity."""
        return isinstance(other, Node) and other.identity is self.identity

    def matches(self, test: object) -> bool:
        """Identity test against this node (or the node it was derived from) or its absorbed exception."""
        return self.same_as(test) or (self.error is not None and test is self.error)

    def with_code(self, code: Code) -> Node:
        """Copy with code replaced."""
        return self.model_copy(update={"code": code, "origin": self.identity})

    def tracked(self, frame: Frame) -> Node:
        """Copy re-located at frame; the previous frame moves to the front of the trail."""
        return self.model_copy(update={"frame": frame, "trail": (self.frame, *self.trail), "origin": self.identity})

    def __str__(self) -> str:
        return self.text
