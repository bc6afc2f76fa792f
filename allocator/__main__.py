#!/usr/bin/env python3
"""
Worker Allocator command line
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from .types import InvalidInputError


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='allocator',
        description='Allocate workers to time-stamped tasks'
    )
    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('console', help='Read tasks interactively')

    serve = commands.add_parser('serve', help='Run the HTTP server')
    serve.add_argument('--host', default='0.0.0.0')
    serve.add_argument('--port', type=int, default=8001)
    serve.add_argument('--debug', action='store_true')

    store = commands.add_parser('store', help='Allocate pending tasks in a database')
    store.add_argument('--database-url', default=None,
                       help='SQLAlchemy URL (default: $ALLOCATOR_DATABASE_URL)')
    store.add_argument('--create', action='store_true',
                       help='Create missing tables first')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == 'console':
        from .console import run_console
        return run_console()

    if args.command == 'serve':
        from .server import run_server
        run_server(host=args.host, port=args.port, debug=args.debug)
        return 0

    from .store import allocate_pending, make_engine
    engine = make_engine(args.database_url, create=args.create)
    try:
        with Session(engine) as session:
            results = allocate_pending(session)
    except InvalidInputError as e:
        logger.error(f"Invalid stored task: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for task_id, worker_id in results:
        if worker_id is None:
            print(f"Task {task_id} -> unassigned")
        else:
            print(f"Task {task_id} -> Worker {worker_id}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
