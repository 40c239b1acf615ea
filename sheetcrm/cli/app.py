from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from sheetcrm.config.loader import DEFAULT_CONFIG_PATH, ConfigError, CRMConfig, default_config, load_config
from sheetcrm.excel.workbook import sheet_frames, write_workbook
from sheetcrm.logging.error_log import ErrorLogBuffer
from sheetcrm.logging.init import enable_debug, log_summary, setup_logging
from sheetcrm.mapping.mapper import map_order_status
from sheetcrm.models.entities import OrderStatus
from sheetcrm.parsing.csv_parser import ParseError
from sheetcrm.services.assistant_tools import execute_tool
from sheetcrm.services.bootstrap import build_facade
from sheetcrm.services.facade import CRMFacade
from sheetcrm.services.importer import ImportBatchError, import_files
from sheetcrm.services.summary import render_import_summary, render_sync_summary
from sheetcrm.storage.sheet_store import IndexOutOfRangeError, NotFoundError
from sheetcrm.storage.slots import PersistenceError

"""CLI entrypoint.

    python -m sheetcrm.cli [--config PATH] [--debug] <command> ...

Commands: sync, import, export, reset, order create|status, sample add, tool.

Exit codes:
    0  success
    1  fatal (config, storage, unknown ids)
    2  one or more import files failed
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

_STORAGE_ERRORS = (PersistenceError, NotFoundError, IndexOutOfRangeError, ParseError)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load ``.env`` so storage/database variables win over the config file."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheetcrm", description="Sheet-backed CRM data tool")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("sync", help="Load all sheets and print counts")

    imp = sub.add_parser("import", help="Bulk import CSV/XLSX files into a sheet")
    imp.add_argument("sheet")
    imp.add_argument("files", nargs="+", type=Path)

    exp = sub.add_parser("export", help="Export all sheets (.xlsx file or CSV directory)")
    exp.add_argument("output", type=Path)

    reset = sub.add_parser("reset", help="Restore seed data (destructive)")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    order = sub.add_parser("order", help="Order operations")
    order_sub = order.add_subparsers(dest="order_command", required=True)
    create = order_sub.add_parser("create")
    create.add_argument("customer")
    create.add_argument("details")
    create.add_argument("total", type=float)
    status = order_sub.add_parser("status")
    status.add_argument("order_id")
    status.add_argument("status")

    sample = sub.add_parser("sample", help="Sample request operations")
    sample_sub = sample.add_subparsers(dest="sample_command", required=True)
    add = sample_sub.add_parser("add")
    add.add_argument("customer")
    add.add_argument("address")
    add.add_argument("items")

    tool = sub.add_parser("tool", help="Run an assistant tool and print its JSON result")
    tool.add_argument("name")
    tool.add_argument("arguments", nargs="?", default="{}")
    return p.parse_args(argv)


def _resolve_config(path: Path | None) -> CRMConfig:
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return default_config()
        path = DEFAULT_CONFIG_PATH
    return load_config(path)


def _parse_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus(raw)
    except ValueError:
        return map_order_status(raw)


async def _run(args: argparse.Namespace, cfg: CRMConfig) -> int:
    logger = setup_logging()
    facade: CRMFacade = build_facade(cfg)
    try:
        await facade.start()

        if args.command == "sync":
            log_summary(render_sync_summary(facade.snapshot)[len("SUMMARY "):])
            return EXIT_SUCCESS

        if args.command == "import":
            error_log = ErrorLogBuffer(Path(cfg.error_log_dir))
            result = await import_files(facade, args.sheet, args.files, error_log)
            written = error_log.flush()
            if written is not None:
                logger.warning(f"error log written: {written}")
            log_summary(render_import_summary(result)[len("SUMMARY "):])
            return EXIT_PARTIAL_FAILURE if result.failed_files else EXIT_SUCCESS

        if args.command == "export":
            out = write_workbook(args.output, await sheet_frames(facade.store))
            logger.info(f"exported sheets to {out}")
            return EXIT_SUCCESS

        if args.command == "reset":
            if not await facade.reset_data(confirmed=args.yes):
                logger.error("reset requires --yes")
                return EXIT_FATAL
            log_summary(render_sync_summary(facade.snapshot)[len("SUMMARY "):])
            return EXIT_SUCCESS

        if args.command == "order" and args.order_command == "create":
            order_id = await facade.create_order(args.customer, args.details, args.total)
            logger.info(f"order created id={order_id}")
            return EXIT_SUCCESS

        if args.command == "order" and args.order_command == "status":
            order = facade.find_order(args.order_id)
            if order is None:
                logger.error(f"order not found: {args.order_id}")
                return EXIT_FATAL
            await facade.update_order_status(order, _parse_status(args.status))
            return EXIT_SUCCESS

        if args.command == "sample":
            sample_id = await facade.add_sample_request(args.customer, args.address, args.items)
            logger.info(f"sample request logged id={sample_id}")
            return EXIT_SUCCESS

        if args.command == "tool":
            try:
                tool_args = json.loads(args.arguments)
            except json.JSONDecodeError as e:
                logger.error(f"tool arguments are not valid JSON: {e}")
                return EXIT_FATAL
            result = await execute_tool(facade, args.name, tool_args)
            print(json.dumps(result, ensure_ascii=False))
            return EXIT_FATAL if "error" in result else EXIT_SUCCESS

        logger.error(f"unknown command: {args.command}")
        return EXIT_FATAL
    except ImportBatchError as e:
        logger.error(f"import: {e}")
        return EXIT_FATAL
    except _STORAGE_ERRORS as e:
        logger.error(f"storage: {e}")
        return EXIT_FATAL
    finally:
        facade.close()


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pull in the test runner's argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        enable_debug()

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        return asyncio.run(_run(args, cfg))
    except (PersistenceError, ValueError) as e:
        # slot construction (bad backend / unreachable database)
        logger.error(f"storage: {e}")
        return EXIT_FATAL

