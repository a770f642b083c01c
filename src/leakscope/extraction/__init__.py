"""Credential extraction: patterns, text extractor, object inspector, tokens."""

from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.extraction.extractor import extract
from leakscope.extraction.inspector import ObjectInspector, ShapeSignature
from leakscope.extraction.patterns import PATTERN_LIBRARY_VERSION
from leakscope.extraction.tokens import classify_claims, decode_token, try_decode

__all__ = [
    "PATTERN_LIBRARY_VERSION",
    "ScanAccumulator",
    "ObjectInspector",
    "ShapeSignature",
    "extract",
    "decode_token",
    "classify_claims",
    "try_decode",
]
