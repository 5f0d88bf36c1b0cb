"""Command-line interface for inspecting and exercising the monitor datasource."""

from __future__ import annotations

import argparse
import asyncio
import inspect
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Awaitable, Callable, Union

from .config import Settings
from .datasource import MonitorDatasource
from .errors import ServiceClientError
from .models import TestStatus
from .services import SERVICES


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings(_env_file=args.config)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return settings


def _run(
    settings: Settings, action: Callable[[MonitorDatasource], Union[Any, Awaitable[Any]]]
) -> Any:
    """Run ``action`` against a datasource whose pool is closed afterwards."""

    async def _inner() -> Any:
        datasource = MonitorDatasource(settings.datasource, config=settings.client)
        try:
            result = action(datasource)
            if inspect.isawaitable(result):
                result = await result
            return result
        finally:
            await datasource.pool.aclose()

    return asyncio.run(_inner())


def _dump(value: Any) -> None:
    if isinstance(value, list):
        value = [
            v.model_dump(mode="json", by_alias=True) if hasattr(v, "model_dump") else v
            for v in value
        ]
    elif hasattr(value, "model_dump"):
        value = value.model_dump(mode="json", by_alias=True)
    print(json.dumps(value, indent=2, default=str))


def _cmd_services(_args: argparse.Namespace) -> int:
    """Print the service registry in declaration order."""

    _dump([asdict(d) for d in SERVICES])
    return 0


def _cmd_selected(args: argparse.Namespace) -> int:
    _dump(_run(_settings(args), lambda ds: ds.get_selected_services()))
    return 0


def _cmd_test(args: argparse.Namespace) -> int:
    """Test connectivity of every enabled service."""

    result = _run(_settings(args), lambda ds: ds.test_datasource())
    _dump(result)
    return 0 if result.status == TestStatus.SUCCESS else 1


def _cmd_find(args: argparse.Namespace) -> int:
    """Resolve a template-variable query string."""

    settings = _settings(args)
    try:
        values = _run(settings, lambda ds: ds.metric_find_query(args.query))
    except ServiceClientError as exc:
        print(json.dumps({"ok": False, "error": str(exc)}))
        return 1
    _dump(values)
    return 0


def _cmd_query(args: argparse.Namespace) -> int:
    """Run a panel query read from a JSON file."""

    settings = _settings(args)
    request = json.loads(Path(args.file).read_text(encoding="utf-8"))
    try:
        response = _run(settings, lambda ds: ds.query(request))
    except ServiceClientError as exc:
        print(json.dumps({"ok": False, "error": str(exc)}))
        return 1
    _dump(response)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tcm", description="Cloud monitor datasource CLI"
    )
    parser.add_argument("--config", required=False, help="Path to settings YAML")
    sub = parser.add_subparsers(dest="cmd")

    psvc = sub.add_parser("services", help="List registered services")
    psvc.set_defaults(func=_cmd_services)

    psel = sub.add_parser("selected", help="List services enabled in settings")
    psel.set_defaults(func=_cmd_selected)

    ptest = sub.add_parser("test", help="Test connectivity of enabled services")
    ptest.set_defaults(func=_cmd_test)

    pfind = sub.add_parser("find", help="Resolve a template-variable query")
    pfind.add_argument("query", help="e.g. 'Namespace=QCE/CVM&Action=DescribeRegions'")
    pfind.set_defaults(func=_cmd_find)

    pquery = sub.add_parser("query", help="Run a panel query from a JSON file")
    pquery.add_argument("--file", required=True, help="Path to request.json")
    pquery.set_defaults(func=_cmd_query)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``tcm`` command."""

    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
