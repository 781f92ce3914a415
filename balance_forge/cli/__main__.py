from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from balance_forge.config.loader import AppConfig, ConfigError, load_config
from balance_forge.interchange.frames import table_to_frame
from balance_forge.logging.error_log import ErrorLogBuffer
from balance_forge.logging.init import log_summary, set_debug, setup_logging
from balance_forge.services.orchestrator import ProcessingError, export_all, import_all, validate_all
from balance_forge.services.summary import render_summary_line, render_validation_summary_line
from balance_forge.services.table_store import StoreError, TableStore

"""CLI entrypoint.

    balance-forge [--config PATH] [--debug] import | validate | export | inspect [TABLE]

Exit codes:
- 0: success
- 2: partial failure (files failed or skipped) or validation errors present
- 1: fatal (config, missing source directory, unreadable store)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 5


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load ``.env`` with python-dotenv; its values take precedence over the environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="balance-forge", description="Game balance table tool")
    p.add_argument("--config", type=Path, default=None, help="Path to the YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("import", help="Import every CSV of the source directory into the store")
    sub.add_parser("validate", help="Validate every stored table")
    sub.add_parser("export", help="Export every stored table as CSV")
    inspect = sub.add_parser("inspect", help="List stored tables, or show one table")
    inspect.add_argument("table", nargs="?", default=None, help="Table name or id")
    return p.parse_args(argv)


def _run_import(cfg: AppConfig, store: TableStore, logger: logging.Logger) -> int:
    logger.info(f"Importing CSV files from: {cfg.source_directory}")
    try:
        result = import_all(cfg, store)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if result.error_log_path is not None:
        logger.info(f"error log: {result.error_log_path}")
    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result).removeprefix("SUMMARY "))

    if result.failed_files or result.skipped_files or result.validation_errors:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _run_validate(cfg: AppConfig, store: TableStore, logger: logging.Logger) -> int:
    run = validate_all(store, ErrorLogBuffer(cfg.logs_path))
    for stat in run.table_stats:
        if not stat.is_valid:
            logger.warning(f"table={stat.table_name} errors={stat.errors} warnings={stat.warnings}")
    if run.error_log_path is not None:
        logger.info(f"error log: {run.error_log_path}")
    log_summary(render_validation_summary_line(run).removeprefix("SUMMARY "))
    return EXIT_PARTIAL_FAILURE if run.error_count else EXIT_SUCCESS_ALL


def _run_export(cfg: AppConfig, store: TableStore, logger: logging.Logger) -> int:
    try:
        paths = export_all(store, cfg.export_path)
    except OSError as e:
        logger.error(f"export: {e}")
        return EXIT_FATAL
    for path in paths:
        logger.info(f"exported {path}")
    logger.info(f"exported {len(paths)} table(s) to {cfg.export_path}")
    return EXIT_SUCCESS_ALL


def _run_inspect(store: TableStore, name: str | None, logger: logging.Logger) -> int:
    if name is None:
        tables = store.tables()
        if not tables:
            logger.info("inspect: store is empty")
        for table in tables:
            logger.info(
                f"TABLE: {table.table_name} id={table.table_id} "
                f"columns={len(table.columns)} rows={len(table)}"
            )
        return EXIT_SUCCESS_ALL

    table = store.find_by_name(name) or store.get(name)
    if table is None:
        logger.error(f"inspect: table not found: {name}")
        return EXIT_FATAL
    logger.info(f"TABLE: {table.table_name} id={table.table_id} rows={len(table)}")
    for column in table.columns:
        required = " required" if column.is_required else ""
        logger.info(f"  COLUMN: {column.column_id} '{column.display_name}' {column.data_type.value}{required}")
    frame = table_to_frame(table, table.rows[:INSPECT_SAMPLE_ROWS])
    logger.info("  sample_rows=\n" + frame.to_string())
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only an explicit None reads sys.argv; main([]) must not pick up pytest's arguments
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    store = TableStore(cfg.store_path)
    try:
        loaded = store.load_all()
    except StoreError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL
    logger.debug(f"loaded {len(loaded)} table(s) from {cfg.store_directory}")

    if args.command == "import":
        return _run_import(cfg, store, logger)
    if args.command == "validate":
        return _run_validate(cfg, store, logger)
    if args.command == "export":
        return _run_export(cfg, store, logger)
    return _run_inspect(store, args.table, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
