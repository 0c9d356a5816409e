"""Artifact acquisition cascade.

Per coordinate: CheckLocalMain -> CheckLocalSources -> Decide ->
{Download -> Resolved, Skipped, Blocked}; local hits resolve immediately.
After the primary archive is settled, sources and javadoc sidecars are
fetched on a best-effort basis without prompting.
"""
from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, List, Optional

from constants import Constants
from common.errors import (
    DownloadDeclined,
    EnrichmentFailure,
    MavenApiError,
    NotFoundLocally,
    OfflineBlocked,
    RemoteFetchError,
    UserSkipped,
)
from common.logging_utils import extra_context, is_debug_enabled
from maven.models import Coordinate
from repository import layout

from .decisions import DecisionProvider, NonInteractiveDecisionProvider
from .models import (
    AcquisitionChoice,
    AcquisitionState,
    ArchiveMode,
    ArtifactBundle,
    DownloadKind,
)

if TYPE_CHECKING:
    from repository.local import LocalRepository
    from repository.remote import RemoteRepository

logger = logging.getLogger(__name__)

_CLASSIFIERS = {DownloadKind.MAIN: None, DownloadKind.SOURCES: layout.SOURCES}


class OfflineSwitch:
    """Process-wide offline toggle; share one instance between acquirers."""

    def __init__(self, offline: bool = False):
        self._event = threading.Event()
        if offline:
            self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def set(self, offline: bool) -> None:
        if offline:
            self._event.set()
        else:
            self._event.clear()


class ArtifactAcquirer:
    """Yields a usable archive for one coordinate at a time."""

    def __init__(
        self,
        local_repository: "LocalRepository",
        remote_repository: "RemoteRepository",
        decisions: Optional[DecisionProvider] = None,
        offline: Optional[OfflineSwitch] = None,
        fetch_sidecars: Optional[bool] = None,
    ):
        """Initialize the acquirer.

        Args:
            local_repository: Local repository probe/reader/writer.
            remote_repository: Remote fetcher.
            decisions: Operator decision capability; defaults to never downloading.
            offline: Shared offline switch; a private one is created when omitted.
            fetch_sidecars: Whether sidecars may be fetched remotely; defaults to
                Constants.FETCH_SIDECARS.
        """
        self.local_repository = local_repository
        self.remote_repository = remote_repository
        self.decisions = decisions or NonInteractiveDecisionProvider()
        self.offline = offline or OfflineSwitch()
        self.fetch_sidecars = Constants.FETCH_SIDECARS if fetch_sidecars is None else fetch_sidecars
        # Only one question to the operator may be outstanding at a time.
        self._decision_lock = threading.Lock()

    @property
    def is_offline(self) -> bool:
        return self.offline.is_set()

    def set_offline(self, offline: bool) -> None:
        self.offline.set(offline)

    def acquire(self, coordinate: Coordinate) -> ArtifactBundle:
        """Run the cascade for one coordinate.

        Returns:
            ArtifactBundle in primary or sources mode, with sidecars attached
            when available.

        Raises:
            OfflineBlocked: Offline and nothing local (state BLOCKED).
            UserSkipped: Operator skipped the dependency (state SKIPPED).
            DownloadDeclined: Operator declined a download confirmation.
            RemoteFetchError: A chosen download failed.
        """
        states: List[AcquisitionState] = [AcquisitionState.CHECK_LOCAL_MAIN]
        bundle = self._from_local(coordinate, None, ArchiveMode.PRIMARY, states)
        if bundle is None:
            states.append(AcquisitionState.CHECK_LOCAL_SOURCES)
            bundle = self._from_local(coordinate, layout.SOURCES, ArchiveMode.SOURCES, states)
        if bundle is None:
            states.append(AcquisitionState.DECIDE)
            bundle = self._decide(coordinate, states)

        self._attach_sidecars(bundle)
        return bundle

    def _from_local(
        self,
        coordinate: Coordinate,
        classifier: Optional[str],
        mode: ArchiveMode,
        states: List[AcquisitionState],
    ) -> Optional[ArtifactBundle]:
        if not self.local_repository.exists(coordinate, classifier):
            return None
        try:
            content = self.local_repository.read_bytes(coordinate, classifier)
        except NotFoundLocally:
            return None
        states.append(AcquisitionState.RESOLVED)
        logger.info(
            "Using local %s JAR: %s",
            "sources" if mode is ArchiveMode.SOURCES else "main",
            self.local_repository.path_for(coordinate, classifier),
        )
        return ArtifactBundle(coordinate=coordinate, primary=content, mode=mode, states=states)

    def _decide(self, coordinate: Coordinate, states: List[AcquisitionState]) -> ArtifactBundle:
        if self.is_offline:
            states.append(AcquisitionState.BLOCKED)
            raise OfflineBlocked(
                "not available locally and offline mode is enabled", coordinate, AcquisitionState.BLOCKED
            )

        with self._decision_lock:
            # The flag may have been flipped while waiting for the lock.
            if self.is_offline:
                states.append(AcquisitionState.BLOCKED)
                raise OfflineBlocked(
                    "not available locally and offline mode is enabled", coordinate, AcquisitionState.BLOCKED
                )
            choice = self.decisions.choose_strategy(coordinate)
            if is_debug_enabled(logger):
                logger.debug(
                    "Acquisition decision",
                    extra=extra_context(
                        event="decision", component="acquirer", target=coordinate.key, outcome=choice.value
                    ),
                )

            if choice is AcquisitionChoice.SKIP:
                states.append(AcquisitionState.SKIPPED)
                raise UserSkipped("skipped by operator", coordinate, AcquisitionState.SKIPPED)
            if choice is AcquisitionChoice.OFFLINE:
                self.set_offline(True)
                states.append(AcquisitionState.BLOCKED)
                raise OfflineBlocked(
                    "entered offline mode; not available locally", coordinate, AcquisitionState.BLOCKED
                )

            states.append(AcquisitionState.DOWNLOAD)
            if choice is AcquisitionChoice.BOTH:
                sources = self._download_with_confirmation(coordinate, DownloadKind.SOURCES)
                self._download_with_confirmation(coordinate, DownloadKind.MAIN)
                primary, mode = sources, ArchiveMode.SOURCES
            elif choice is AcquisitionChoice.MAIN:
                primary = self._download_with_confirmation(coordinate, DownloadKind.MAIN)
                mode = ArchiveMode.PRIMARY
            else:
                primary = self._download_with_confirmation(coordinate, DownloadKind.SOURCES)
                mode = ArchiveMode.SOURCES

        states.append(AcquisitionState.RESOLVED)
        return ArtifactBundle(coordinate=coordinate, primary=primary, mode=mode, states=states)

    def _download_with_confirmation(self, coordinate: Coordinate, kind: DownloadKind) -> bytes:
        if not self.decisions.confirm_download(coordinate, kind):
            raise DownloadDeclined(f"download of {kind.value} JAR cancelled by operator", coordinate)

        classifier = _CLASSIFIERS[kind]
        self.decisions.report_progress(coordinate, kind, "starting")
        try:
            content = self.remote_repository.fetch_artifact(coordinate, classifier)
        except RemoteFetchError:
            self.decisions.report_progress(coordinate, kind, "failed")
            raise
        self._persist(coordinate, content, classifier)
        self.decisions.report_progress(coordinate, kind, "completed")
        return content

    def _persist(self, coordinate: Coordinate, content: bytes, classifier: Optional[str]) -> None:
        try:
            self.local_repository.write_bytes(coordinate, content, classifier)
        except OSError as exc:
            logger.warning(
                "Failed to save %s to local repository: %s",
                layout.artifact_file_name(coordinate, classifier),
                exc,
            )

    def _attach_sidecars(self, bundle: ArtifactBundle) -> None:
        """Best-effort sources/javadoc lookup; failures never affect the bundle's primary."""
        if not bundle.is_sources:
            bundle.sources = self._sidecar(bundle.coordinate, layout.SOURCES)
        bundle.javadoc = self._sidecar(bundle.coordinate, layout.JAVADOC)

    def _sidecar(self, coordinate: Coordinate, classifier: str) -> Optional[bytes]:
        try:
            return self._fetch_sidecar(coordinate, classifier)
        except EnrichmentFailure as exc:
            logger.debug("Sidecar unavailable: %s", exc)
            return None

    def _fetch_sidecar(self, coordinate: Coordinate, classifier: str) -> bytes:
        try:
            return self.local_repository.read_bytes(coordinate, classifier)
        except NotFoundLocally:
            pass
        if self.is_offline or not self.fetch_sidecars:
            raise EnrichmentFailure(f"{classifier} JAR not available locally", coordinate)
        try:
            content = self.remote_repository.fetch_artifact(coordinate, classifier)
        except MavenApiError as exc:
            raise EnrichmentFailure(f"{classifier} JAR not fetched: {exc.reason}", coordinate) from exc
        self._persist(coordinate, content, classifier)
        return content
