"""Directive micro-syntax: comment scanning and argument evaluation."""

from .evaluator import evaluate_arguments, render_directive
from .scanner import scan_directives

__all__ = ["evaluate_arguments", "render_directive", "scan_directives"]
