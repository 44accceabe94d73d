"""Template scanning and substitution."""

from .engine import DirectiveEvaluator, TemplateEngine
from .scanner import DirectiveScanner, MarkerSet

__all__ = ["DirectiveEvaluator", "DirectiveScanner", "MarkerSet", "TemplateEngine"]
