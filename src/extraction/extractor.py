"""Turns acquired archives into API metadata."""
from __future__ import annotations

import io
import logging
import posixpath
import zipfile
import zlib
from typing import TYPE_CHECKING, List, Optional

from common.errors import ArchiveReadError
from common.logging_utils import extra_context, Timer

from .javadoc import extract_class_description, javadoc_page_path
from .models import JavaClass
from .source_scanner import SourceScan, scan_source

if TYPE_CHECKING:
    from acquisition.models import ArtifactBundle
    from cache.store import CacheStore

logger = logging.getLogger(__name__)

_NO_TYPE_ENTRIES = ("module-info", "package-info")

# Corrupt entries surface as any of these while decompressing or decoding.
_ENTRY_ERRORS = (OSError, EOFError, zipfile.BadZipFile, zlib.error, RuntimeError, ValueError)


def class_name_from_path(entry_name: str) -> str:
    """Simple class name of an archive entry (file name without suffix)."""
    return posixpath.splitext(posixpath.basename(entry_name))[0]


def package_name_from_path(entry_name: str) -> str:
    """Package of an archive entry: its directories joined with dots."""
    directory = posixpath.dirname(entry_name)
    return directory.replace("/", ".") if directory else ""


def _open_zip(content: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(content))


def _read_text(archive: zipfile.ZipFile, entry_name: str) -> Optional[str]:
    try:
        return archive.read(entry_name).decode("utf-8", errors="replace")
    except KeyError:
        return None


class ApiExtractor:
    """Lists the top-level types of an archive, enriched from sources and javadoc."""

    def __init__(self, cache: Optional["CacheStore"] = None):
        self.cache = cache

    def extract(self, bundle: "ArtifactBundle") -> List[JavaClass]:
        """Extract class metadata from a bundle's primary archive.

        Args:
            bundle: Acquired archive with optional sidecars.

        Returns:
            One JavaClass per eligible entry, in archive order.

        Raises:
            ArchiveReadError: The primary archive is not a readable zip.
        """
        try:
            archive = _open_zip(bundle.primary)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ArchiveReadError(f"unreadable archive: {exc}", bundle.coordinate) from exc

        suffix = ".java" if bundle.is_sources else ".class"
        sources = None if bundle.is_sources else self._open_sidecar(bundle, bundle.sources, "sources")
        javadoc = self._open_sidecar(bundle, bundle.javadoc, "javadoc")

        classes: List[JavaClass] = []
        try:
            with Timer() as t, archive:
                for info in archive.infolist():
                    entry_name = info.filename
                    if info.is_dir() or not entry_name.endswith(suffix) or "$" in entry_name:
                        continue
                    if class_name_from_path(entry_name) in _NO_TYPE_ENTRIES:
                        continue
                    try:
                        classes.append(self._extract_entry(bundle, archive, entry_name, sources, javadoc))
                    except _ENTRY_ERRORS as exc:
                        logger.warning("Failed to process %s in %s: %s", entry_name, bundle.coordinate.key, exc)
        finally:
            for sidecar in (sources, javadoc):
                if sidecar is not None:
                    sidecar.close()

        logger.info(
            "Extracted %d classes from %s",
            len(classes),
            bundle.coordinate.key,
            extra=extra_context(
                event="extract",
                component="extractor",
                target=bundle.coordinate.key,
                mode=bundle.mode.value,
                count=len(classes),
                duration_ms=t.duration_ms(),
            ),
        )
        return classes

    def _open_sidecar(self, bundle: "ArtifactBundle", content: Optional[bytes], label: str):
        if content is None:
            return None
        try:
            return _open_zip(content)
        except (zipfile.BadZipFile, OSError) as exc:
            logger.debug("Ignoring unreadable %s archive for %s: %s", label, bundle.coordinate.key, exc)
            return None

    def _extract_entry(
        self,
        bundle: "ArtifactBundle",
        archive: zipfile.ZipFile,
        entry_name: str,
        sources: Optional[zipfile.ZipFile],
        javadoc: Optional[zipfile.ZipFile],
    ) -> JavaClass:
        class_name = class_name_from_path(entry_name)
        java_class = JavaClass(name=class_name, package_name=package_name_from_path(entry_name))

        if bundle.is_sources:
            text = _read_text(archive, entry_name)
        else:
            text = self._sidecar_source(bundle, sources, entry_name[: -len(".class")] + ".java")
        if text:
            _apply_scan(java_class, scan_source(text, class_name))

        if javadoc is not None:
            description = self._class_documentation(java_class, javadoc)
            if description:
                java_class.javadoc = description
        return java_class

    def _sidecar_source(
        self,
        bundle: "ArtifactBundle",
        sources: Optional[zipfile.ZipFile],
        java_entry: str,
    ) -> Optional[str]:
        if sources is None:
            return None
        key = f"{bundle.coordinate.key}:sources:{java_entry}"
        if self.cache is not None:
            cached = self.cache.get_cached_sidecar_text(key)
            if cached is not None:
                return cached
        text = _read_text(sources, java_entry)
        if text is not None and self.cache is not None:
            self.cache.cache_sidecar_text(key, text)
        return text

    def _class_documentation(self, java_class: JavaClass, javadoc: zipfile.ZipFile) -> Optional[str]:
        qualified_name = java_class.qualified_name
        if self.cache is not None:
            cached = self.cache.get_cached_documentation(qualified_name)
            if cached is not None:
                return cached
        html = _read_text(javadoc, javadoc_page_path(java_class.package_name, java_class.name))
        if html is None:
            return None
        description = extract_class_description(html)
        if description and self.cache is not None:
            self.cache.cache_documentation(qualified_name, description)
        return description


def _apply_scan(java_class: JavaClass, scan: SourceScan) -> None:
    if not scan.found:
        return
    java_class.modifiers = list(scan.modifiers)
    java_class.is_interface = scan.is_interface
    java_class.is_abstract = scan.is_abstract
    java_class.super_class = scan.super_class
    java_class.interfaces = list(scan.interfaces)
    java_class.javadoc = scan.javadoc
    java_class.methods = scan.methods
    java_class.fields = scan.fields
