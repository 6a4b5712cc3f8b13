"""Plain-text rendering of explorations."""

from rivela.reporting.summary import build_text_summary, summary_filename

__all__ = ["build_text_summary", "summary_filename"]
