"""Tests for the artifact acquisition cascade."""

import io
from unittest.mock import call, MagicMock

import pytest

from acquisition.acquirer import ArtifactAcquirer, OfflineSwitch
from acquisition.decisions import ConsoleDecisionProvider, ScriptedDecisionProvider
from acquisition.models import AcquisitionChoice, AcquisitionState, ArchiveMode
from common.errors import (
    DownloadDeclined,
    NotFoundRemotely,
    OfflineBlocked,
    RemoteFetchError,
    UserSkipped,
)
from maven.models import Coordinate
from repository import layout

S = AcquisitionState


def _remote(available):
    """Remote mock serving ``{classifier: bytes}``; anything else is a 404."""
    remote = MagicMock()

    def fetch(coordinate, classifier=None, extension="jar"):
        if classifier in available:
            return available[classifier]
        raise NotFoundRemotely("not found", coordinate=coordinate, status_code=404)

    remote.fetch_artifact.side_effect = fetch
    return remote


class TestLocalShortCircuit:
    """Local archives resolve without prompts or network."""

    def test_main_jar_local(self, local_repo, put_local, widget):
        put_local(widget, b"main")
        decisions = ScriptedDecisionProvider()
        remote = _remote({})
        acquirer = ArtifactAcquirer(local_repo, remote, decisions, fetch_sidecars=False)

        bundle = acquirer.acquire(widget)

        assert bundle.mode is ArchiveMode.PRIMARY
        assert bundle.primary == b"main"
        assert bundle.states == [S.CHECK_LOCAL_MAIN, S.RESOLVED]
        assert decisions.calls == []
        remote.fetch_artifact.assert_not_called()

    def test_sources_jar_local(self, local_repo, put_local, widget):
        put_local(widget, b"src", layout.SOURCES)
        decisions = ScriptedDecisionProvider()
        acquirer = ArtifactAcquirer(local_repo, _remote({}), decisions, fetch_sidecars=False)

        bundle = acquirer.acquire(widget)

        assert bundle.mode is ArchiveMode.SOURCES
        assert bundle.source_text_archive == b"src"
        assert bundle.states == [S.CHECK_LOCAL_MAIN, S.CHECK_LOCAL_SOURCES, S.RESOLVED]
        assert decisions.calls == []


class TestOffline:
    """Offline mode blocks without prompting or touching the network."""

    def test_fast_fail(self, local_repo, widget):
        decisions = ScriptedDecisionProvider(choices=[AcquisitionChoice.SOURCES])
        remote = _remote({layout.SOURCES: b"src"})
        acquirer = ArtifactAcquirer(local_repo, remote, decisions, offline=OfflineSwitch(True))

        with pytest.raises(OfflineBlocked) as excinfo:
            acquirer.acquire(widget)

        assert excinfo.value.state is S.BLOCKED
        assert excinfo.value.coordinate == widget
        assert decisions.calls == []
        remote.fetch_artifact.assert_not_called()

    def test_offline_still_uses_local(self, local_repo, put_local, widget):
        put_local(widget, b"main")
        acquirer = ArtifactAcquirer(local_repo, _remote({}), offline=OfflineSwitch(True))
        assert acquirer.acquire(widget).primary == b"main"

    def test_offline_choice_blocks_later_coordinates(self, local_repo, widget):
        other = Coordinate("org.acme", "gadget", "2.0")
        decisions = ScriptedDecisionProvider(choices=[AcquisitionChoice.OFFLINE, AcquisitionChoice.SKIP])
        acquirer = ArtifactAcquirer(local_repo, _remote({}), decisions)

        with pytest.raises(OfflineBlocked):
            acquirer.acquire(widget)
        assert acquirer.is_offline
        with pytest.raises(OfflineBlocked):
            acquirer.acquire(other)
        assert len(decisions.calls) == 1

        acquirer.set_offline(False)
        with pytest.raises(UserSkipped):
            acquirer.acquire(other)
        assert len(decisions.calls) == 2

    def test_switch_shared_between_acquirers(self, local_repo, widget):
        switch = OfflineSwitch()
        first = ArtifactAcquirer(local_repo, _remote({}), ScriptedDecisionProvider([AcquisitionChoice.OFFLINE]),
                                 offline=switch)
        second_decisions = ScriptedDecisionProvider()
        second = ArtifactAcquirer(local_repo, _remote({}), second_decisions, offline=switch)

        with pytest.raises(OfflineBlocked):
            first.acquire(widget)
        with pytest.raises(OfflineBlocked):
            second.acquire(widget)
        assert second_decisions.calls == []


class TestDownloads:
    """Decide and download paths."""

    def test_download_sources_scenario(self, local_repo, widget):
        decisions = ScriptedDecisionProvider(choices=[AcquisitionChoice.SOURCES], confirmations=[True])
        remote = _remote({layout.SOURCES: b"sources-jar"})
        acquirer = ArtifactAcquirer(local_repo, remote, decisions)

        bundle = acquirer.acquire(widget)

        assert bundle.mode is ArchiveMode.SOURCES
        assert bundle.primary == b"sources-jar"
        assert bundle.states == [S.CHECK_LOCAL_MAIN, S.CHECK_LOCAL_SOURCES, S.DECIDE, S.DOWNLOAD, S.RESOLVED]
        assert decisions.calls == [
            ("choose_strategy", "org.acme:widget:1.0", "sources"),
            ("confirm_download", "org.acme:widget:1.0", "sources"),
        ]
        persisted = local_repo.path_for(widget, layout.SOURCES)
        assert persisted.endswith("org/acme/widget/1.0/widget-1.0-sources.jar")
        assert local_repo.read_bytes(widget, layout.SOURCES) == b"sources-jar"
        sources_fetches = [c for c in remote.fetch_artifact.call_args_list if c.args[1:2] == (layout.SOURCES,)]
        assert sources_fetches == [call(widget, layout.SOURCES)]

    def test_download_main(self, local_repo, widget):
        decisions = ScriptedDecisionProvider(choices=[AcquisitionChoice.MAIN])
        acquirer = ArtifactAcquirer(local_repo, _remote({None: b"main-jar"}), decisions)

        bundle = acquirer.acquire(widget)

        assert bundle.mode is ArchiveMode.PRIMARY
        assert local_repo.read_bytes(widget) == b"main-jar"

    def test_download_both(self, local_repo, widget):
        decisions = ScriptedDecisionProvider(choices=[AcquisitionChoice.BOTH])
        remote = _remote({None: b"main-jar", layout.SOURCES: b"sources-jar"})
        acquirer = ArtifactAcquirer(local_repo, remote, decisions)

        bundle = acquirer.acquire(widget)

        assert bundle.mode is ArchiveMode.SOURCES
        assert bundle.primary == b"sources-jar"
        assert [c for c in decisions.calls if c[0] == "confirm_download"] == [
            ("confirm_download", "org.acme:widget:1.0", "sources"),
            ("confirm_download", "org.acme:widget:1.0", "main"),
        ]
        assert local_repo.exists(widget) and local_repo.exists(widget, layout.SOURCES)

    def test_skip(self, local_repo, widget):
        acquirer = ArtifactAcquirer(local_repo, _remote({}), ScriptedDecisionProvider([AcquisitionChoice.SKIP]))
        with pytest.raises(UserSkipped) as excinfo:
            acquirer.acquire(widget)
        assert excinfo.value.state is S.SKIPPED

    def test_declined_confirmation(self, local_repo, widget):
        remote = _remote({layout.SOURCES: b"src"})
        decisions = ScriptedDecisionProvider([AcquisitionChoice.SOURCES], confirmations=[False])
        acquirer = ArtifactAcquirer(local_repo, remote, decisions)

        with pytest.raises(DownloadDeclined):
            acquirer.acquire(widget)
        remote.fetch_artifact.assert_not_called()
        assert not local_repo.exists(widget, layout.SOURCES)

    def test_download_failure_reported(self, local_repo, widget):
        out = io.StringIO()
        decisions = ConsoleDecisionProvider(io.StringIO("1\ny\n"), out)
        acquirer = ArtifactAcquirer(local_repo, _remote({}), decisions)

        with pytest.raises(RemoteFetchError):
            acquirer.acquire(widget)
        assert "Starting sources JAR" in out.getvalue()
        assert "Failed sources JAR" in out.getvalue()


class TestSidecars:
    """Best-effort, prompt-free sidecar enrichment."""

    def test_local_sidecars_attached(self, local_repo, put_local, widget):
        put_local(widget, b"main")
        put_local(widget, b"src", layout.SOURCES)
        put_local(widget, b"doc", layout.JAVADOC)
        acquirer = ArtifactAcquirer(local_repo, _remote({}), fetch_sidecars=False)

        bundle = acquirer.acquire(widget)

        assert bundle.mode is ArchiveMode.PRIMARY
        assert bundle.sources == b"src"
        assert bundle.javadoc == b"doc"

    def test_remote_sidecars_fetched_and_persisted(self, local_repo, put_local, widget):
        put_local(widget, b"main")
        decisions = ScriptedDecisionProvider()
        remote = _remote({layout.SOURCES: b"src", layout.JAVADOC: b"doc"})
        acquirer = ArtifactAcquirer(local_repo, remote, decisions, fetch_sidecars=True)

        bundle = acquirer.acquire(widget)

        assert (bundle.sources, bundle.javadoc) == (b"src", b"doc")
        assert local_repo.exists(widget, layout.JAVADOC)
        assert decisions.calls == []

    def test_sidecar_failures_swallowed(self, local_repo, put_local, widget):
        put_local(widget, b"main")
        acquirer = ArtifactAcquirer(local_repo, _remote({}), fetch_sidecars=True)

        bundle = acquirer.acquire(widget)

        assert bundle.sources is None and bundle.javadoc is None

    def test_no_remote_sidecars_when_offline(self, local_repo, put_local, widget):
        put_local(widget, b"main")
        remote = _remote({layout.SOURCES: b"src"})
        acquirer = ArtifactAcquirer(local_repo, remote, offline=OfflineSwitch(True), fetch_sidecars=True)

        acquirer.acquire(widget)

        remote.fetch_artifact.assert_not_called()
