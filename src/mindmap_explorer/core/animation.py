"""Shared animation clock for node, edge and viewport transitions.

In-flight transitions are kept in a single mapping from element key to
``Track(start, end, start_time, duration)``. Starting a transition for a
key replaces its entry, which is all it takes to cancel the previous one;
the replacement starts from whatever value was on screen at that instant.

The host calls ``tick()`` once per frame. Finished tracks settle into a
resting value and fire their completion callback (used to unmount exiting
elements).
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

from loguru import logger

Easing = Callable[[float], float]


def ease_linear(t: float) -> float:
    return t


def ease_cubic_in_out(t: float) -> float:
    """Symmetric cubic easing (the d3 transition default)."""
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


def interpolate(start: Any, end: Any, t: float) -> Any:
    """Blend two values of the same shape.

    Numbers are mixed linearly; tuples (including NamedTuples such as
    ``Point``) are blended field by field and rebuilt with their own type.
    """
    if isinstance(start, tuple):
        fields = [interpolate(a, b, t) for a, b in zip(start, end, strict=True)]
        if hasattr(start, "_make"):
            return type(start)._make(fields)
        return tuple(fields)
    return start + (end - start) * t


@dataclass
class Track:
    """One in-flight transition."""

    start: Any
    end: Any
    start_time: float
    duration: float
    on_complete: Callable[[], None] | None = None

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.start_time) / self.duration))


class Animator:
    """Tracks transitions keyed by element identity."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        easing: Easing = ease_cubic_in_out,
    ) -> None:
        self.clock = clock
        self.easing = easing
        self._tracks: dict[Hashable, Track] = {}
        self._resting: dict[Hashable, Any] = {}

    def __len__(self) -> int:
        return len(self._tracks)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._tracks

    def _value_of(self, track: Track, now: float) -> Any:
        return interpolate(track.start, track.end, self.easing(track.progress(now)))

    def value(self, key: Hashable, default: Any = None) -> Any:
        """Value currently on screen for ``key``."""
        track = self._tracks.get(key)
        if track is not None:
            return self._value_of(track, self.clock())
        return self._resting.get(key, default)

    def target(self, key: Hashable, default: Any = None) -> Any:
        """Value ``key`` is heading to (its resting value when idle)."""
        track = self._tracks.get(key)
        if track is not None:
            return track.end
        return self._resting.get(key, default)

    def start(
        self,
        key: Hashable,
        start: Any,
        end: Any,
        duration: float,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        """Begin a transition, replacing any transition in flight for ``key``.

        A replaced transition never fires its completion callback.
        """
        if key in self._tracks:
            logger.debug(f"Superseding in-flight transition for {key!r}")
        self._resting.pop(key, None)
        self._tracks[key] = Track(start, end, self.clock(), duration, on_complete)
        if duration <= 0:
            self._finish(key)

    def set(self, key: Hashable, value: Any) -> None:
        """Jump straight to ``value``, cancelling any transition."""
        self._tracks.pop(key, None)
        self._resting[key] = value

    def discard(self, key: Hashable) -> None:
        """Forget ``key`` entirely without completing its transition."""
        self._tracks.pop(key, None)
        self._resting.pop(key, None)

    def _finish(self, key: Hashable) -> None:
        track = self._tracks.pop(key)
        self._resting[key] = track.end
        if track.on_complete is not None:
            track.on_complete()

    def tick(self, now: float | None = None) -> dict[Hashable, Any]:
        """Advance to ``now``; returns the values of unfinished transitions."""
        now = self.clock() if now is None else now
        frame: dict[Hashable, Any] = {}
        finished = []
        for key, track in self._tracks.items():
            if track.progress(now) >= 1.0:
                finished.append(key)
            else:
                frame[key] = self._value_of(track, now)
        for key in finished:
            # a completion callback may already have replaced or dropped it
            if key in self._tracks and self._tracks[key].progress(now) >= 1.0:
                self._finish(key)
        return frame

    def clear(self) -> None:
        self._tracks.clear()
        self._resting.clear()
