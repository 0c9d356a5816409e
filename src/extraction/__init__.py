"""API metadata extraction from compiled and source archives."""

from .extractor import ApiExtractor, class_name_from_path, package_name_from_path
from .models import JavaClass, JavaField, JavaMethod, JavaParameter
from .source_scanner import SourceScan, scan_source

__all__ = [
    "ApiExtractor",
    "JavaClass",
    "JavaField",
    "JavaMethod",
    "JavaParameter",
    "SourceScan",
    "class_name_from_path",
    "package_name_from_path",
    "scan_source",
]
