"""Main CLI entry point for depreport."""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .exceptions import ReportError
from .formatters import OutputFormatter
from .formatting import FormatConfig
from .http_session import HttpSettings
from .jar_inspector import ZipJarInspector
from .parsers import detect_format, load_input
from .project_resolver import PomProjectResolver, StaticProjectResolver
from .repo_client import MavenRepositoryClient, maven_central
from .report import DependenciesReport, ReportConfiguration

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_level: Optional[str] = None):
    """Configure logging based on verbosity flags."""
    if log_level:
        level = getattr(logging, log_level.upper(), logging.WARNING)
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def _write_output(content: str, output: str) -> None:
    if output == '-':
        sys.stdout.write(content)
        return
    with open(output, 'w', encoding='utf-8') as f:
        f.write(content)
    logger.info(f"Report written to {output}")


def handle_report(args):
    """Handle the 'report' subcommand."""
    setup_logging(args.verbose, args.loglevel)

    logger.info(f"Input: {args.input} (format={detect_format(args.input)})")
    try:
        project = load_input(args.input)
    except (ReportError, OSError) as e:
        logger.error(f"Error reading input file: {e}")
        print(f"Error reading input file: {e}", file=sys.stderr)
        return 1

    configuration = ReportConfiguration(
        dependency_details_enabled=args.details,
        dependency_locations_enabled=args.locations,
        max_workers=args.workers,
        format=FormatConfig.for_locale(args.locale)
    )

    client = None
    if args.offline:
        logger.info("Offline mode - project metadata comes from the input only")
        project_lookup = StaticProjectResolver(project.projects)
    else:
        if not any(repository.id == "central" for repository in project.repositories):
            project.repositories.append(maven_central())
        client = MavenRepositoryClient(settings=HttpSettings(timeout=args.timeout))
        project_lookup = PomProjectResolver(client, project.repositories)

    try:
        report = DependenciesReport(
            project,
            project_lookup,
            inspector=ZipJarInspector(),
            repository_client=client,
            configuration=configuration
        )
        sections = report.build()
    finally:
        if client is not None:
            client.close()

    if args.output_format == 'json':
        content = OutputFormatter.format_as_json(sections)
    else:
        content = OutputFormatter.format_as_text(sections)

    try:
        _write_output(content, args.output)
    except OSError as e:
        print(f"Error writing output file: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog='depreport',
        description='Dependencies report for already resolved Maven projects'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Subcommands')

    report_parser = subparsers.add_parser('report', help='Generate the dependencies report')
    report_parser.add_argument('input',
                               help='Resolved project (.json document or mvn dependency:tree output)')
    report_parser.add_argument('output', nargs='?', default='-',
                               help='Output file (default: stdout)')
    report_parser.add_argument('--format', dest='output_format', default='text',
                               choices=['text', 'json'],
                               help='Output format (text, json). Default: text')
    report_parser.add_argument('--no-details', dest='details', action='store_false',
                               help='Skip the dependency file details section')
    report_parser.add_argument('--locations', action='store_true',
                               help='Include the dependency repository locations section')
    report_parser.add_argument('--offline', action='store_true',
                               help='Use only project metadata from the input, never contact repositories')
    report_parser.add_argument('--workers', type=int, default=1,
                               help='Concurrent archive inspections and repository probes. Default: 1')
    report_parser.add_argument('--locale', default='en',
                               help='Locale for number formatting (e.g. en, de, fr). Default: en')
    report_parser.add_argument('--timeout', type=float, default=30.0,
                               help='HTTP timeout in seconds. Default: 30')
    report_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose logging')
    report_parser.add_argument('--loglevel', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    report_parser.set_defaults(func=handle_report)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
