"""Pan/zoom state of the canvas and the animated "center on node" camera."""

from __future__ import annotations

from typing import NamedTuple

from loguru import logger

from ..config.defaults import DEFAULT_DURATION, DEFAULT_SCALE_EXTENT
from .animation import Animator
from .models import Point
from .render import RenderTarget

VIEWPORT_KEY = "viewport"


class ViewportTransform(NamedTuple):
    """Affine map from layout coordinates to screen coordinates."""

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def apply(self, point: Point) -> Point:
        return Point(self.x + point.x * self.k, self.y + point.y * self.k)

    def invert(self, point: Point) -> Point:
        return Point((point.x - self.x) / self.k, (point.y - self.y) / self.k)

    def __str__(self) -> str:
        return f"translate({self.x:g},{self.y:g}) scale({self.k:g})"


IDENTITY = ViewportTransform()


class ViewportController:
    """Owns the viewport transform shared by every rendered element."""

    def __init__(
        self,
        width: float,
        height: float,
        target: RenderTarget,
        animator: Animator,
        scale_extent: tuple[float, float] = DEFAULT_SCALE_EXTENT,
        duration: float = DEFAULT_DURATION,
        focus_scale: float | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            width: Viewport width in screen pixels
            height: Viewport height in screen pixels
            target: Render target receiving transform updates
            animator: Shared animation clock
            scale_extent: Inclusive (min, max) zoom scale
            duration: Duration of centering transitions in seconds
            focus_scale: Scale to snap to when centering (None keeps current)
        """
        low, high = scale_extent
        if low <= 0 or low > high:
            raise ValueError(f"Invalid scale extent {scale_extent!r}")
        self.width = width
        self.height = height
        self.target = target
        self.animator = animator
        self.scale_extent = (low, high)
        self.duration = duration
        self.focus_scale = focus_scale

    @property
    def transform(self) -> ViewportTransform:
        """Transform currently on screen (mid-transition values included)."""
        return self.animator.value(VIEWPORT_KEY, IDENTITY)

    @property
    def center(self) -> Point:
        return Point(self.width / 2, self.height / 2)

    def clamp_scale(self, k: float) -> float:
        low, high = self.scale_extent
        return min(high, max(low, k))

    def _jump(self, transform: ViewportTransform) -> ViewportTransform:
        self.animator.set(VIEWPORT_KEY, transform)
        self.target.set_viewport_transform(transform)
        return transform

    def pan_by(self, dx: float, dy: float) -> ViewportTransform:
        """Translate immediately by a screen-space delta."""
        current = self.transform
        return self._jump(ViewportTransform(current.x + dx, current.y + dy, current.k))

    def zoom_by(self, factor: float, anchor: Point | None = None) -> ViewportTransform:
        """Scale immediately, keeping the screen ``anchor`` point fixed.

        The anchor defaults to the viewport centre; the resulting scale is
        clamped to ``scale_extent``.
        """
        if factor <= 0:
            raise ValueError("Zoom factor must be positive")
        current = self.transform
        anchor = anchor or self.center
        k = self.clamp_scale(current.k * factor)
        logical = current.invert(anchor)
        return self._jump(
            ViewportTransform(anchor.x - logical.x * k, anchor.y - logical.y * k, k)
        )

    def centered_on(self, point: Point, scale: float | None = None) -> ViewportTransform:
        """Transform that puts ``point`` in the middle of the viewport."""
        if scale is None:
            scale = self.focus_scale if self.focus_scale is not None else self.transform.k
        k = self.clamp_scale(scale)
        return ViewportTransform(self.width / 2 - point.x * k, self.height / 2 - point.y * k, k)

    def center_on(self, point: Point, scale: float | None = None) -> ViewportTransform:
        """Animate the camera so ``point`` lands at the viewport centre.

        Starts from the transform currently on screen, so a centering that
        interrupts another continues smoothly.
        """
        goal = self.centered_on(point, scale)
        self.animator.start(VIEWPORT_KEY, self.transform, goal, self.duration)
        self.target.set_viewport_transform(goal, self.duration)
        logger.debug(f"Centering on ({point.x:g}, {point.y:g}) -> {goal}")
        return goal
