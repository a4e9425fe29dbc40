"""Report presentation."""

from .renderer import COMMENT_MARKER, ReportRenderer, percent

__all__ = ["COMMENT_MARKER", "ReportRenderer", "percent"]
