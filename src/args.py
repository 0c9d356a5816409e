"""Argument parsing for mavenapi."""

import argparse
from constants import Constants


def _add_common_arguments(parser):
    """Options shared by every command."""
    parser.add_argument("--local-repo",
                        dest="LOCAL_REPO",
                        help="Local Maven repository root (default: $MAVEN_LOCAL_REPOSITORY, "
                             "settings.xml localRepository, then ~/.m2/repository)",
                        action="store", type=str)
    parser.add_argument("--remote-url",
                        dest="REMOTE_URL",
                        help=f"Remote repository base URL (default: {Constants.REMOTE_REPOSITORY_URL})",
                        action="store", type=str)
    parser.add_argument("--cache-dir",
                        dest="CACHE_DIR",
                        help=f"Cache directory (default: {Constants.CACHE_DIR})",
                        action="store", type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help=f"HTTP timeout in seconds (default: {Constants.REQUEST_TIMEOUT})",
                        action="store", type=int)
    parser.add_argument("--offline",
                        dest="OFFLINE",
                        help="Never download; artifacts missing locally are blocked.",
                        action="store_true")
    parser.add_argument("--non-interactive",
                        dest="NON_INTERACTIVE",
                        help="Do not prompt; artifacts missing locally are skipped.",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="mavenapi",
        description="mavenapi - Maven dependency resolution and Java API extraction",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="COMMAND", metavar="COMMAND")
    subparsers.required = True

    pom = subparsers.add_parser("pom", help="Parse a pom.xml and print its coordinate and dependencies.")
    pom.add_argument("PATH", help="Path to a pom.xml or a project directory")
    _add_common_arguments(pom)

    tree = subparsers.add_parser("tree", help="Resolve the transitive dependency list of a project.")
    tree.add_argument("PATH", help="Path to a pom.xml or a project directory")
    _add_common_arguments(tree)

    jar = subparsers.add_parser("jar", help="Acquire one artifact and print its API metadata.")
    jar.add_argument("COORDINATE", help="Maven coordinate groupId:artifactId:version")
    _add_common_arguments(jar)

    project = subparsers.add_parser("project", help="Analyze every runtime dependency of a project.")
    project.add_argument("PATH", help="Path to a pom.xml or a project directory")
    _add_common_arguments(project)

    clear = subparsers.add_parser("clear-cache", help="Delete all cached data.")
    _add_common_arguments(clear)

    return parser.parse_args(argv)
