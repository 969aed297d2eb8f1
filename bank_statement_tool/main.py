"""
Bank Statement Tool - Main Entry Point

Command Line Interface for parsing statements and training rules
"""

import argparse
import json
import logging
import os
import sys
from decimal import Decimal
from typing import Dict, List, Optional

from .classifiers.classification_engine import ClassificationEngine
from .config import CLASSIFY_WORKERS, MONGODB_DATABASE, MONGODB_URI
from .exceptions import StatementError, StoreError
from .learning import RuleTrainer, load_reviewed_history
from .logging_setup import configure_logging
from .parsers.pdf_text import read_statement_text
from .processors.statement_processor import StatementProcessor
from .processors.summary import format_summary
from .storage import InMemoryStore, MongoStore

logger = logging.getLogger(__name__)

SUPPORTED_STATEMENT_EXTENSIONS = ('.pdf', '.txt')
SUPPORTED_HISTORY_EXTENSIONS = ('.csv', '.xlsx', '.xls')


def _json_default(value):
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError('Object of type %s is not JSON serializable' % type(value).__name__)


def _open_store(kind: str, mongo_uri: str, database: str):
    if kind == 'mongo':
        return MongoStore(uri=mongo_uri, database=database)
    return InMemoryStore()


def _write_output(payload: Dict, output: Optional[str]):
    text = json.dumps(payload, indent=2, default=_json_default)
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(text)
        logger.info("Wrote %s", output)
    else:
        print(text)


def _check_file(path: str, extensions) -> Optional[str]:
    if not os.path.exists(path):
        return 'File not found: %s' % path
    ext = os.path.splitext(path)[1].lower()
    if ext not in extensions:
        return 'Unsupported file format: %s (supported: %s)' % (ext, ', '.join(extensions))
    return None


def run_parse(args) -> int:
    """Parse and classify one statement file."""
    error = _check_file(args.file, SUPPORTED_STATEMENT_EXTENSIONS)
    if error:
        logger.error(error)
        return 1

    store = _open_store(args.store, args.mongo_uri, args.database)
    if args.history:
        try:
            store.add_transactions(args.user_id, load_reviewed_history(args.history))
        except (ValueError, OSError) as e:
            logger.error("Could not load history %s: %s", args.history, e)
            return 1
        except StoreError as e:
            logger.error("Could not store history: %s", e)
            return 1

    processor = StatementProcessor(ClassificationEngine(store, store), max_workers=args.workers)
    try:
        result = processor.process(read_statement_text(args.file), args.user_id)
    except StatementError as e:
        logger.error("Could not read %s: %s", args.file, e)
        return 1

    if result['success']:
        result['summary'] = format_summary(result['summary'])
        if not args.debug:
            result.pop('debug', None)
    _write_output(result, args.output)
    return 0 if result['success'] else 1


def run_train(args) -> int:
    """Train rules from a reviewed ledger export."""
    error = _check_file(args.file, SUPPORTED_HISTORY_EXTENSIONS)
    if error:
        logger.error(error)
        return 1

    try:
        transactions = load_reviewed_history(args.file)
    except (ValueError, OSError) as e:
        logger.error("Could not load %s: %s", args.file, e)
        return 1

    store = _open_store(args.store, args.mongo_uri, args.database)
    try:
        store.add_transactions(args.user_id, transactions)
        result = RuleTrainer(store).train(transactions, args.user_id)
        result['rules'] = store.get_rules(args.user_id)
    except StoreError as e:
        logger.error("Training failed: %s", e)
        return 1

    _write_output(result, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='bank-statement-tool',
        description='Bank Statement Tool - Parse statements and classify transactions',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bank-statement-tool parse statement.pdf --user-id acme
  bank-statement-tool parse statement.txt --history ledger.csv --debug
  bank-statement-tool train ledger.xlsx --user-id acme --store mongo
        """
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--user-id', '-u', default='default', help='Owner of rules and history')
    common.add_argument('--store', choices=['memory', 'mongo'], default='memory',
                        help='Rule/history store (default: memory)')
    common.add_argument('--mongo-uri', default=MONGODB_URI, help='MongoDB connection URI')
    common.add_argument('--database', default=MONGODB_DATABASE, help='MongoDB database name')
    common.add_argument('--output', '-o', help='Write JSON here instead of stdout')
    common.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    sub = parser.add_subparsers(dest='command')
    sub.required = True

    parse_cmd = sub.add_parser('parse', parents=[common], help='Parse and classify a statement')
    parse_cmd.add_argument('file', help='Statement file (PDF or extracted text)')
    parse_cmd.add_argument('--workers', '-w', type=int, default=CLASSIFY_WORKERS,
                           help='Classification worker threads (default: %d)' % CLASSIFY_WORKERS)
    parse_cmd.add_argument('--history', help='Reviewed ledger export to seed history (CSV/Excel)')
    parse_cmd.add_argument('--debug', action='store_true', help='Include extraction diagnostics')
    parse_cmd.set_defaults(handler=run_parse)

    train_cmd = sub.add_parser('train', parents=[common], help='Train rules from reviewed history')
    train_cmd.add_argument('file', help='Reviewed ledger export (CSV or Excel)')
    train_cmd.set_defaults(handler=run_train)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)
    configure_logging('DEBUG' if args.verbose else None, stream=sys.stderr)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
