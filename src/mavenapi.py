"""mavenapi: resolve Maven dependency trees and extract Java API metadata.

Results are printed to stdout as JSON; logs and interactive prompts go to
stderr.
"""
# pylint: disable=too-many-return-statements
from __future__ import annotations

import json
import logging
import sys

from args import parse_args
from constants import Constants, ExitCodes
from common.errors import MavenApiError, RemoteFetchError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from acquisition import (
    ArtifactAcquirer,
    ConsoleDecisionProvider,
    NonInteractiveDecisionProvider,
    OfflineSwitch,
)
from analysis.artifact_analyzer import ArtifactAnalyzer
from analysis.project_runner import manifest_path_for, run_project_analysis
from cache import CacheStore
from extraction import ApiExtractor
from maven import Coordinate, DependencyResolver
from repository.local import LocalRepository, resolve_local_repository
from repository.remote import RemoteRepository

logger = logging.getLogger(__name__)


class Services:
    """The collaborators one command run needs, wired from CLI options."""

    def __init__(self, args):
        self.cache = CacheStore(cache_dir=args.CACHE_DIR)
        self.local_repository = LocalRepository(resolve_local_repository(args.LOCAL_REPO))
        self.remote_repository = RemoteRepository(args.REMOTE_URL, timeout=args.TIMEOUT)
        self.resolver = DependencyResolver(self.local_repository, self.remote_repository, self.cache)
        decisions = NonInteractiveDecisionProvider() if args.NON_INTERACTIVE else ConsoleDecisionProvider()
        self.acquirer = ArtifactAcquirer(
            self.local_repository,
            self.remote_repository,
            decisions,
            offline=OfflineSwitch(args.OFFLINE),
        )
        self.extractor = ApiExtractor(self.cache)
        self.analyzer = ArtifactAnalyzer(self.acquirer, self.extractor, self.cache)


def _emit(payload) -> None:
    json.dump(payload, sys.stdout, indent=2)
    sys.stdout.write("\n")
    sys.stdout.flush()


def run_command(args, services: Services) -> ExitCodes:
    """Execute one parsed command and print its result."""
    command = args.COMMAND
    if command == "pom":
        project = services.resolver.parse_manifest(manifest_path_for(args.PATH))
        _emit(project.to_dict())
        return ExitCodes.SUCCESS

    if command == "tree":
        dependencies = services.resolver.resolve_tree(manifest_path_for(args.PATH))
        _emit({"dependencies": [d.to_dict() for d in dependencies]})
        return ExitCodes.SUCCESS

    if command == "jar":
        try:
            coordinate = Coordinate.parse(args.COORDINATE)
        except ValueError as exc:
            logger.error("%s", exc)
            return ExitCodes.FILE_ERROR
        classes = services.analyzer.analyze(coordinate)
        _emit({"coordinate": coordinate.to_dict(), "classes": [c.to_dict() for c in classes]})
        return ExitCodes.SUCCESS

    if command == "project":
        analysis = run_project_analysis(args.PATH, services.resolver, services.analyzer)
        _emit(analysis.to_dict())
        return ExitCodes.EXIT_WARNINGS if analysis.failures else ExitCodes.SUCCESS

    if command == "clear-cache":
        services.cache.clear()
        _emit({"cleared": services.cache.cache_dir})
        return ExitCodes.SUCCESS

    logger.error("Unknown command: %s", command)
    return ExitCodes.FILE_ERROR


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND),
        )
    if args.TIMEOUT is not None:
        Constants.REQUEST_TIMEOUT = args.TIMEOUT

    services = Services(args)
    services.cache.install_shutdown_hooks()
    try:
        code = run_command(args, services)
    except RemoteFetchError as exc:
        logger.error("%s", exc)
        code = ExitCodes.CONNECTION_ERROR
    except MavenApiError as exc:
        logger.error("%s", exc)
        code = ExitCodes.FILE_ERROR
    finally:
        services.cache.close()
    return code.value


if __name__ == "__main__":
    sys.exit(main())
