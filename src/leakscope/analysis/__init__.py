"""Result merging and vulnerability analysis."""

from leakscope.analysis.merger import merge_results, resolve_primary_provider
from leakscope.analysis.vulnerabilities import RULES, analyze

__all__ = ["merge_results", "resolve_primary_provider", "analyze", "RULES"]
