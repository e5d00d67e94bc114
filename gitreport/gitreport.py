#!/usr/bin/env python3
"""
gitreport - daily and weekly activity reports from git history.

Usage:
    gitreport --type daily --date 2026-01-15 --repo /path/to/repo
    gitreport --type weekly --save
    gitreport --serve --port 8080
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from gitreport.config.loader import get_git_timeout, get_timezone, load_config
from gitreport.errors import InvalidInput, ReportError
from gitreport.git.reader import RepositoryReader
from gitreport.models.entities import REPORT_TYPES, ReportDocument, ReportRequest
from gitreport.output.writer import write_report
from gitreport.report.service import ReportService


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all CLI flags."""
    parser = argparse.ArgumentParser(
        prog='gitreport',
        description='Generate daily or weekly activity reports from git history'
    )

    # Report selection
    parser.add_argument('--type', '-t', dest='report_type', default='daily',
                        choices=REPORT_TYPES,
                        help='Report type (default: daily)')
    parser.add_argument('--date', '-d', metavar='DATE',
                        help='Report date YYYY-MM-DD (default: today)')
    parser.add_argument('--repo', '-r', default='.',
                        help='Path to the git repository (default: current directory)')

    # Author filter
    authors = parser.add_mutually_exclusive_group()
    authors.add_argument('--author', metavar='PATTERN',
                         help='Only include commits by matching authors')
    authors.add_argument('--mine', action='store_true',
                         help='Only include commits by the configured git user')

    # Output options
    parser.add_argument('--output', '-o', metavar='FILE',
                        help='Write the report to FILE instead of stdout')
    parser.add_argument('--save', action='store_true',
                        help='Write {type}-report-{date}.md')
    parser.add_argument('--output-dir', metavar='DIR',
                        help='Directory for --save (default: current directory)')
    parser.add_argument('--template', metavar='FILE',
                        help='Render the report through a Jinja2 template')
    parser.add_argument('--json', action='store_true',
                        help='Print the JSON response envelope')
    parser.add_argument('--optimize', action='store_true',
                        help='Polish the report with the configured AI API')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    # Web service
    parser.add_argument('--serve', action='store_true',
                        help='Start the report HTTP service')
    parser.add_argument('--port', type=int, default=None,
                        help='Port for the HTTP service (default: 8080)')
    parser.add_argument('--host', default=None,
                        help='Host for the HTTP service (default: 0.0.0.0)')

    return parser


def default_report_date(tz_name: str, now: Optional[datetime] = None) -> str:
    """Today's date in the report timezone as YYYY-MM-DD."""
    now = now or datetime.now(ZoneInfo(tz_name))
    return now.astimezone(ZoneInfo(tz_name)).strftime('%Y-%m-%d')


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def main(argv=None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    config = load_config()

    if args.serve:
        _run_serve(config, args)
        return 0

    try:
        tz_name = get_timezone(config)
        author = args.author
        if args.mine:
            reader = RepositoryReader(args.repo, git_binary=config["git_binary"],
                                      timeout=get_git_timeout(config))
            # A bad path must not be reported as a missing user.name
            reader.check_repository()
            author = reader.current_user()
            if not author:
                print("Error: git user.name is not configured; use --author instead", file=sys.stderr)
                return 2

        request = ReportRequest(
            repo_path=args.repo,
            report_type=args.report_type,
            date=args.date or default_report_date(tz_name),
            author=author,
            template=args.template,
        )

        service = ReportService(config)
        document = service.generate(request)
        if args.optimize:
            from gitreport.optimizer import optimize_report
            polished = asyncio.run(optimize_report(document.content, config))
            document = ReportDocument(document.report_type, document.date, polished + '\n')
    except ReportError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2 if isinstance(e, InvalidInput) else 1

    if args.output or args.save:
        target = write_report(
            document,
            directory=args.output_dir,
            path=args.output if args.output else None,
        )
        print(f"Report saved to: {target}")
    elif args.json:
        print(json.dumps({
            "content": document.content,
            "type": document.report_type,
            "date": document.date,
        }, indent=2, ensure_ascii=False))
    else:
        sys.stdout.write(document.content)

    return 0


def _run_serve(config, args):
    """Start the report HTTP service."""
    try:
        import uvicorn
    except ImportError:
        print("Error: The HTTP service requires additional dependencies.")
        print("Install them with: python -m pip install fastapi uvicorn[standard] pydantic")
        sys.exit(1)

    from gitreport.server.app import create_app

    host = args.host or config["server"]["host"]
    port = args.port or config["server"]["port"]
    app = create_app(config=config)

    print(f"\nStarting gitreport service at http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    uvicorn.run(app, host=host, port=port, log_level="debug" if args.verbose else "info")


if __name__ == '__main__':
    sys.exit(main())
