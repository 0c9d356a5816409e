"""Tests for the persistent cache store."""

import json
import os
import signal
from unittest.mock import MagicMock, patch

import pytest

from cache.store import archive_file_name, CacheStore
from common.errors import ManifestParseError
from extraction.models import JavaClass, JavaMethod, JavaParameter
from maven.models import Coordinate, Dependency, Project
from maven.resolver import DependencyResolver

from conftest import pom_xml

COORD = Coordinate("org.acme", "widget", "1.0")


def _classes():
    method = JavaMethod(
        name="spin",
        return_type="void",
        parameters=[JavaParameter("speed", "int", "How fast")],
        modifiers=["public"],
    )
    return [JavaClass(name="Widget", package_name="org.acme", methods=[method])]


class TestPersistence:
    """Snapshots are written on flush and loaded eagerly."""

    def test_flush_and_reload(self, tmp_path):
        cache_dir = str(tmp_path / "cache")
        cache = CacheStore(cache_dir, flush_delay=60)
        project = Project(COORD, (Dependency(Coordinate("x", "y", "1"), scope="runtime"),))
        cache.cache_manifest("/work/pom.xml", project)
        cache.cache_resolved_set("/work/pom.xml", project.dependencies)
        cache.cache_archive(COORD, _classes())
        cache.cache_sidecar_text("org.acme:widget:1.0:sources:org/acme/Widget.java", "class Widget {}")
        cache.cache_documentation("org.acme.Widget", "Spins.")
        cache.flush()

        for name in ("manifests.json", "resolved-sets.json", "sidecar-text.json",
                     "documentation.json", "archive-index.json"):
            assert os.path.isfile(os.path.join(cache_dir, name))
        assert os.path.isfile(os.path.join(cache_dir, "archives", archive_file_name("org.acme:widget:1.0")))

        reloaded = CacheStore(cache_dir, flush_delay=60)
        assert reloaded.get_cached_manifest("/work/pom.xml") == project
        assert reloaded.get_cached_resolved_set("/work/pom.xml") == project.dependencies
        assert reloaded.get_cached_archive(COORD) == _classes()
        assert reloaded.get_cached_sidecar_text("org.acme:widget:1.0:sources:org/acme/Widget.java") == "class Widget {}"
        assert reloaded.get_cached_documentation("org.acme.Widget") == "Spins."

    def test_similar_keys_get_distinct_archive_files(self, tmp_path):
        cache_dir = str(tmp_path / "cache")
        first, second = Coordinate("a", "b_c", "1"), Coordinate("a_b", "c", "1")
        assert archive_file_name(first.key) != archive_file_name(second.key)

        cache = CacheStore(cache_dir, flush_delay=60)
        cache.cache_archive(first, [JavaClass(name="First", package_name="a")])
        cache.cache_archive(second, [JavaClass(name="Second", package_name="a_b")])
        cache.flush()

        reloaded = CacheStore(cache_dir, flush_delay=60)
        assert [c.name for c in reloaded.get_cached_archive(first)] == ["First"]
        assert [c.name for c in reloaded.get_cached_archive(second)] == ["Second"]

    def test_archive_key_accepts_dependency(self, tmp_path):
        cache = CacheStore(str(tmp_path / "cache"), flush_delay=60)
        cache.cache_archive(Dependency(COORD), _classes())
        assert cache.get_cached_archive(COORD) == _classes()

    def test_corrupt_snapshot_treated_as_empty(self, tmp_path):
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "manifests.json").write_text("{not json", encoding="utf-8")
        (cache_dir / "documentation.json").write_text(json.dumps({"a.B": "doc"}), encoding="utf-8")

        cache = CacheStore(str(cache_dir), flush_delay=60)

        assert cache.get_cached_manifest("/anything") is None
        assert cache.get_cached_documentation("a.B") == "doc"

    def test_corrupt_archive_entry_skips_only_that_entry(self, tmp_path):
        cache_dir = tmp_path / "cache"
        (cache_dir / "archives").mkdir(parents=True)
        (cache_dir / "archives" / "good.json").write_text(
            json.dumps([c.to_dict() for c in _classes()]), encoding="utf-8"
        )
        (cache_dir / "archives" / "bad.json").write_text("[{\"broken\"", encoding="utf-8")
        (cache_dir / "archive-index.json").write_text(json.dumps([
            {"key": "org.acme:widget:1.0", "file": "good.json"},
            {"key": "org.acme:broken:1.0", "file": "bad.json"},
        ]), encoding="utf-8")

        cache = CacheStore(str(cache_dir), flush_delay=60)

        assert cache.get_cached_archive(COORD) == _classes()
        assert cache.get_cached_archive(Coordinate("org.acme", "broken", "1.0")) is None

    def test_unusable_directory_disables_cache(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        cache = CacheStore(str(blocker / "cache"), flush_delay=0)

        assert cache.enabled is False
        cache.cache_documentation("a.B", "doc")
        assert cache.get_cached_documentation("a.B") is None


class TestClear:
    """Clearing wipes memory and disk."""

    def test_clear_removes_everything(self, tmp_path):
        cache_dir = str(tmp_path / "cache")
        cache = CacheStore(cache_dir, flush_delay=0)
        cache.cache_documentation("a.B", "doc")
        assert os.path.isfile(os.path.join(cache_dir, "documentation.json"))

        cache.clear()

        assert cache.get_cached_documentation("a.B") is None
        assert os.path.isdir(cache_dir)
        assert os.listdir(cache_dir) == []
        assert cache.stats()["documentation"] == 0

    def test_clear_forces_reread(self, tmp_path, local_repo):
        pom = tmp_path / "pom.xml"
        pom.write_text(pom_xml("g", "a", "1"), encoding="utf-8")
        cache = CacheStore(str(tmp_path / "cache"), flush_delay=60)
        resolver = DependencyResolver(local_repo, MagicMock(), cache)
        resolver.resolve_tree(str(pom))

        pom.write_text("garbage", encoding="utf-8")
        assert resolver.resolve_tree(str(pom)) == ()

        cache.clear()
        with pytest.raises(ManifestParseError):
            resolver.resolve_tree(str(pom))


class TestDebounce:
    """Bursts of writes produce one scheduled flush."""

    @patch("cache.store.threading.Timer")
    def test_timer_reset_on_each_write(self, mock_timer_cls, tmp_path):
        timers = [MagicMock(), MagicMock()]
        mock_timer_cls.side_effect = timers
        cache_dir = str(tmp_path / "cache")
        cache = CacheStore(cache_dir, flush_delay=30)

        cache.cache_documentation("a.A", "one")
        cache.cache_documentation("a.B", "two")

        assert mock_timer_cls.call_count == 2
        assert mock_timer_cls.call_args[0][0] == 30
        timers[0].cancel.assert_called_once()
        timers[1].start.assert_called_once()
        assert not os.path.exists(os.path.join(cache_dir, "documentation.json"))

        callback = mock_timer_cls.call_args[0][1]
        callback()
        with open(os.path.join(cache_dir, "documentation.json"), encoding="utf-8") as fh:
            assert json.load(fh) == {"a.A": "one", "a.B": "two"}

    def test_close_flushes_pending_writes(self, tmp_path):
        cache_dir = str(tmp_path / "cache")
        cache = CacheStore(cache_dir, flush_delay=3600)
        cache.cache_sidecar_text("k", "v")
        cache.close()
        assert os.path.isfile(os.path.join(cache_dir, "sidecar-text.json"))


class TestShutdownHooks:
    """Signal and atexit registration."""

    @patch("cache.store.atexit.register")
    @patch("cache.store.signal.signal")
    @patch("cache.store.signal.getsignal", return_value=signal.SIG_DFL)
    def test_hooks_installed_once(self, _getsignal, mock_signal, mock_register, tmp_path):
        cache = CacheStore(str(tmp_path / "cache"), flush_delay=60)
        cache.install_shutdown_hooks()
        cache.install_shutdown_hooks()

        mock_register.assert_called_once_with(cache.flush)
        installed = {call.args[0] for call in mock_signal.call_args_list}
        assert installed == {signal.SIGINT, signal.SIGTERM}

    def test_signal_flushes_and_chains(self, tmp_path):
        cache_dir = str(tmp_path / "cache")
        cache = CacheStore(cache_dir, flush_delay=3600)
        previous = MagicMock()
        cache._previous_handlers[signal.SIGTERM] = previous
        cache.cache_documentation("a.B", "doc")

        cache._handle_signal(signal.SIGTERM, None)

        assert os.path.isfile(os.path.join(cache_dir, "documentation.json"))
        previous.assert_called_once_with(signal.SIGTERM, None)
