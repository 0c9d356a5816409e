"""Remote Maven repository client."""
from __future__ import annotations

import logging
from typing import Any, Optional

from constants import Constants
from common import http_client
from common.logging_utils import extra_context, safe_url

from . import layout

logger = logging.getLogger(__name__)


class RemoteRepository:
    """Fetches POMs and archives from a repository laid out like Maven Central."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        """Initialize the remote repository client.

        Args:
            base_url: Repository base URL; defaults to Constants.REMOTE_REPOSITORY_URL.
            timeout: Request timeout in seconds; defaults to Constants.REQUEST_TIMEOUT.
        """
        self.base_url = (base_url or Constants.REMOTE_REPOSITORY_URL).rstrip("/")
        self.timeout = timeout

    def url_for(self, coordinate: Any, classifier: Optional[str] = None, extension: str = layout.JAR) -> str:
        return layout.remote_artifact_url(self.base_url, coordinate, classifier, extension)

    def fetch_artifact(self, coordinate: Any, classifier: Optional[str] = None, extension: str = layout.JAR) -> bytes:
        """Download an artifact.

        Raises:
            NotFoundRemotely: The repository has no such file.
            RemoteFetchError: Any other failure.
        """
        url = self.url_for(coordinate, classifier, extension)
        logger.info(
            "Fetching %s",
            safe_url(url),
            extra=extra_context(event="download", component="remote_repository", classifier=classifier),
        )
        return http_client.get_bytes(url, context=extension, coordinate=coordinate, timeout=self.timeout)

    def fetch_manifest(self, coordinate: Any) -> bytes:
        """Download the raw ``.pom`` of a coordinate; decoding is left to the XML parser."""
        return self.fetch_artifact(coordinate, extension=layout.POM)
