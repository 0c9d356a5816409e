"""Persistent memoization for manifests, resolved trees and archive metadata.

Five independent key->value stores are held in memory and mirrored to a
cache directory. Writes schedule a debounced flush so a burst of writes
produces one disk write; shutdown signals force a final flush.
"""

from __future__ import annotations

import atexit
import hashlib
import json
import logging
import os
import re
import shutil
import signal
import sys
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from maven.models import Dependency, Project
from extraction.models import JavaClass

logger = logging.getLogger(__name__)

MANIFESTS = "manifests"
RESOLVED_SETS = "resolved-sets"
ARCHIVES = "archives"
SIDECAR_TEXT = "sidecar-text"
DOCUMENTATION = "documentation"

_FLAT_STORES = (MANIFESTS, RESOLVED_SETS, SIDECAR_TEXT, DOCUMENTATION)
_ARCHIVE_INDEX = "archive-index.json"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _archive_key(coordinate: Any) -> str:
    """Key for archive metadata; accepts a Coordinate or anything wrapping one."""
    return getattr(coordinate, "coordinate", coordinate).key


def archive_file_name(key: str) -> str:
    """File holding one archive entry: a readable prefix plus a digest of the full key."""
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:16]
    return f"{_UNSAFE_CHARS.sub('_', key)}-{digest}.json"


def _path_key(path: str) -> str:
    return os.path.abspath(path)


class CacheStore:
    """Keyed persistent storage with debounced flushing.

    Every ``get_cached_*`` accessor is a pure lookup. Every ``cache_*`` accessor
    updates memory, marks the store dirty and resets the flush timer.
    """

    def __init__(
        self,
        cache_dir: Optional[str] = None,
        flush_delay: Optional[float] = None,
    ):
        """Initialize the cache and eagerly load any durable snapshot.

        Args:
            cache_dir: Snapshot directory; defaults to Constants.CACHE_DIR.
            flush_delay: Quiet period in seconds before a flush; defaults to
                Constants.CACHE_FLUSH_DELAY_SEC.
        """
        self.cache_dir = cache_dir or Constants.CACHE_DIR
        self.flush_delay = Constants.CACHE_FLUSH_DELAY_SEC if flush_delay is None else flush_delay
        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._dirty: set = set()
        self._dirty_archives: set = set()
        self._hooks_installed = False
        self._previous_handlers: Dict[int, Any] = {}

        self._manifests: Dict[str, Project] = {}
        self._resolved_sets: Dict[str, Tuple[Dependency, ...]] = {}
        self._archives: Dict[str, List[JavaClass]] = {}
        self._sidecar_text: Dict[str, str] = {}
        self._documentation: Dict[str, str] = {}

        self.enabled = True
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
        except OSError as exc:
            logger.warning("Failed to initialize cache at %s: %s; caching disabled", self.cache_dir, exc)
            self.enabled = False
            return
        self._load()
        logger.debug("Cache initialized at %s", self.cache_dir)

    # ------------------------------------------------------------------
    # Manifests (by absolute manifest path)
    # ------------------------------------------------------------------
    def get_cached_manifest(self, path: str) -> Optional[Project]:
        return self._manifests.get(_path_key(path))

    def cache_manifest(self, path: str, project: Project) -> None:
        self._put(MANIFESTS, lambda: self._manifests.__setitem__(_path_key(path), project))

    # ------------------------------------------------------------------
    # Resolved sets (by absolute root manifest path)
    # ------------------------------------------------------------------
    def get_cached_resolved_set(self, path: str) -> Optional[Tuple[Dependency, ...]]:
        return self._resolved_sets.get(_path_key(path))

    def cache_resolved_set(self, path: str, dependencies: Iterable[Dependency]) -> None:
        frozen = tuple(dependencies)
        self._put(RESOLVED_SETS, lambda: self._resolved_sets.__setitem__(_path_key(path), frozen))

    # ------------------------------------------------------------------
    # Archive metadata (by g:a:v)
    # ------------------------------------------------------------------
    def get_cached_archive(self, coordinate: Any) -> Optional[List[JavaClass]]:
        return self._archives.get(_archive_key(coordinate))

    def cache_archive(self, coordinate: Any, classes: List[JavaClass]) -> None:
        key = _archive_key(coordinate)

        def _apply():
            self._archives[key] = list(classes)
            self._dirty_archives.add(key)

        self._put(ARCHIVES, _apply)

    # ------------------------------------------------------------------
    # Sidecar text (by composite key) and documentation (by qualified class name)
    # ------------------------------------------------------------------
    def get_cached_sidecar_text(self, key: str) -> Optional[str]:
        return self._sidecar_text.get(key)

    def cache_sidecar_text(self, key: str, text: str) -> None:
        self._put(SIDECAR_TEXT, lambda: self._sidecar_text.__setitem__(key, text))

    def get_cached_documentation(self, qualified_name: str) -> Optional[str]:
        return self._documentation.get(qualified_name)

    def cache_documentation(self, qualified_name: str, text: str) -> None:
        self._put(DOCUMENTATION, lambda: self._documentation.__setitem__(qualified_name, text))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def stats(self) -> Dict[str, Any]:
        """Entry counts per store."""
        return {
            MANIFESTS: len(self._manifests),
            RESOLVED_SETS: len(self._resolved_sets),
            ARCHIVES: len(self._archives),
            SIDECAR_TEXT: len(self._sidecar_text),
            DOCUMENTATION: len(self._documentation),
            "enabled": self.enabled,
            "dirty": sorted(self._dirty),
        }

    def clear(self) -> None:
        """Wipe every store and the durable snapshot directory, recreating it empty."""
        with self._lock:
            self._cancel_timer()
            self._manifests.clear()
            self._resolved_sets.clear()
            self._archives.clear()
            self._sidecar_text.clear()
            self._documentation.clear()
            self._dirty.clear()
            self._dirty_archives.clear()
            try:
                shutil.rmtree(self.cache_dir, ignore_errors=True)
                os.makedirs(self.cache_dir, exist_ok=True)
            except OSError as exc:
                logger.warning("Failed to clear cache directory %s: %s", self.cache_dir, exc)
                return
        logger.info("Cache cleared")

    def flush(self) -> None:
        """Write dirty stores to disk now."""
        with self._lock:
            self._cancel_timer()
            if not self.enabled or not self._dirty:
                return
            try:
                os.makedirs(self.cache_dir, exist_ok=True)
                for name in _FLAT_STORES:
                    if name in self._dirty:
                        self._write_json(os.path.join(self.cache_dir, f"{name}.json"), self._serialize(name))
                if ARCHIVES in self._dirty:
                    self._flush_archives()
            except (OSError, TypeError, ValueError) as exc:
                logger.warning("Failed to persist cache: %s", exc)
                return
            written = sorted(self._dirty)
            self._dirty.clear()
            self._dirty_archives.clear()
        if is_debug_enabled(logger):
            logger.debug(
                "Cache persisted to disk",
                extra=extra_context(event="persist", component="cache", stores=",".join(written)),
            )

    def close(self) -> None:
        """Cancel the pending timer and flush."""
        self.flush()

    def install_shutdown_hooks(self) -> None:
        """Force a flush on SIGINT/SIGTERM and at interpreter exit.

        Previously installed signal handlers are chained.
        """
        if self._hooks_installed:
            return
        self._hooks_installed = True
        atexit.register(self.flush)
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                self._previous_handlers[sig] = signal.getsignal(sig)
                signal.signal(sig, self._handle_signal)
            except (ValueError, OSError) as exc:
                # Not on the main thread, or unsupported on this platform.
                logger.debug("Cannot install handler for signal %s: %s", sig, exc)

    def _handle_signal(self, signum, frame) -> None:
        logger.info("Shutdown signal received, flushing cache...")
        self.flush()
        previous = self._previous_handlers.get(signum)
        if callable(previous):
            previous(signum, frame)
        elif signum == signal.SIGINT and previous != signal.SIG_IGN:
            raise KeyboardInterrupt
        elif previous != signal.SIG_IGN:
            sys.exit(128 + signum)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _put(self, store: str, apply: Callable[[], None]) -> None:
        if not self.enabled:
            return
        with self._lock:
            apply()
            self._dirty.add(store)
            self._schedule_flush()

    def _schedule_flush(self) -> None:
        self._cancel_timer()
        if self.flush_delay <= 0:
            self.flush()
            return
        self._timer = threading.Timer(self.flush_delay, self.flush)
        self._timer.daemon = True
        self._timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _serialize(self, name: str) -> Dict[str, Any]:
        if name == MANIFESTS:
            return {k: v.to_dict() for k, v in self._manifests.items()}
        if name == RESOLVED_SETS:
            return {k: [d.to_dict() for d in v] for k, v in self._resolved_sets.items()}
        if name == SIDECAR_TEXT:
            return dict(self._sidecar_text)
        return dict(self._documentation)

    def _flush_archives(self) -> None:
        archive_dir = os.path.join(self.cache_dir, ARCHIVES)
        os.makedirs(archive_dir, exist_ok=True)
        index = []
        for key, classes in self._archives.items():
            file_name = archive_file_name(key)
            if key in self._dirty_archives or not os.path.isfile(os.path.join(archive_dir, file_name)):
                self._write_json(os.path.join(archive_dir, file_name), [c.to_dict() for c in classes])
            index.append({"key": key, "file": file_name})
        self._write_json(os.path.join(self.cache_dir, _ARCHIVE_INDEX), index)

    @staticmethod
    def _write_json(path: str, data: Any) -> None:
        tmp_path = path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp_path, path)

    @staticmethod
    def _read_json(path: str) -> Any:
        """Read a snapshot file; missing or corrupt files yield None."""
        if not os.path.isfile(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring corrupt cache file %s: %s", path, exc)
            return None

    def _load(self) -> None:
        loaders = {
            MANIFESTS: (self._manifests, Project.from_dict),
            RESOLVED_SETS: (self._resolved_sets, lambda v: tuple(Dependency.from_dict(d) for d in v)),
            SIDECAR_TEXT: (self._sidecar_text, str),
            DOCUMENTATION: (self._documentation, str),
        }
        for name, (target, convert) in loaders.items():
            data = self._read_json(os.path.join(self.cache_dir, f"{name}.json"))
            if not isinstance(data, dict):
                continue
            try:
                for key, value in data.items():
                    target[key] = convert(value)
            except (KeyError, TypeError, AttributeError) as exc:
                logger.warning("Ignoring malformed %s cache: %s", name, exc)
                target.clear()

        index = self._read_json(os.path.join(self.cache_dir, _ARCHIVE_INDEX))
        if isinstance(index, list):
            archive_dir = os.path.join(self.cache_dir, ARCHIVES)
            for entry in index:
                if not isinstance(entry, dict) or "key" not in entry or "file" not in entry:
                    continue
                data = self._read_json(os.path.join(archive_dir, os.path.basename(entry["file"])))
                if not isinstance(data, list):
                    continue
                try:
                    self._archives[entry["key"]] = [JavaClass.from_dict(c) for c in data]
                except (KeyError, TypeError, AttributeError):
                    logger.warning("Skipping malformed archive cache entry %s", entry["key"])

        logger.debug(
            "Loaded cache: %d manifests, %d resolved sets, %d archives",
            len(self._manifests),
            len(self._resolved_sets),
            len(self._archives),
        )
