"""Concrete render targets."""

from .svg import SvgRenderTarget, diagonal_path

__all__ = ["SvgRenderTarget", "diagonal_path"]
