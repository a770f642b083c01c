"""Surface scanners.

Importing this package registers every page-surface scanner with
``ScannerRegistry``.
"""

from leakscope.scanners.base import BaseSourceScanner
from leakscope.scanners.registry import ScannerRegistry
from leakscope.scanners.markup import MarkupScanner
from leakscope.scanners.scripts import ScriptScanner
from leakscope.scanners.storage import StorageScanner
from leakscope.scanners.globals import GlobalsScanner
from leakscope.scanners.performance import PerformanceScanner
from leakscope.scanners.bundles import BundleScanner
from leakscope.scanners.network import NetworkTrafficAnalyzer
from leakscope.scanners.snapshot import fetch_snapshot, snapshot_from_html

__all__ = [
    "BaseSourceScanner",
    "ScannerRegistry",
    "MarkupScanner",
    "ScriptScanner",
    "StorageScanner",
    "GlobalsScanner",
    "PerformanceScanner",
    "BundleScanner",
    "NetworkTrafficAnalyzer",
    "fetch_snapshot",
    "snapshot_from_html",
]
