"""Command line interface for utapi package."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import httpx
from rich.logging import RichHandler

from .cancellation import CancellationSignal
from .cli_progress import BatchUploadDisplay, render_configuration_summary, render_rows
from .config import API_KEY_ENV, VERSION, UploadthingConfig
from .errors import BatchTicketError, UploadthingError
from .models import (
    Acl,
    ContentDisposition,
    FileRename,
    ListFilesOpts,
    PresignedUrlOpts,
    RenameFilesOpts,
    UploadFileOpts,
    UploadRequest,
)
from .orchestrator import UtApi

logger = logging.getLogger(__name__)

EXIT_CANCELLED = 130


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _parse_pairs(values: Optional[Sequence[str]], option: str) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` arguments."""
    pairs: Dict[str, str] = {}
    for item in values or []:
        if "=" not in item:
            raise CLIError(f"{option} expects KEY=VALUE, got {item!r}")
        key, value = item.split("=", 1)
        if not key:
            raise CLIError(f"{option} expects KEY=VALUE, got {item!r}")
        pairs[key] = value
    return pairs


def _build_upload_requests(paths: Sequence[Path]) -> List[UploadRequest]:
    requests = []
    for path in paths:
        source = Path(path).expanduser()
        if not source.is_file():
            raise CLIError(f"not a file: {source}")
        requests.append(UploadRequest(source))
    return requests


async def _run_upload(api: UtApi, args: argparse.Namespace) -> int:
    requests = _build_upload_requests(args.paths)
    opts = UploadFileOpts(
        metadata=_parse_pairs(args.metadata, "--metadata"),
        content_disposition=ContentDisposition(args.disposition),
        acl=Acl(args.acl),
    )

    display = BatchUploadDisplay()
    api.on_file_complete(display.on_file_complete)
    api.on_file_fail(display.on_file_fail)

    try:
        batch = await api.upload_files_detailed(requests, opts, wait_until_done=args.wait)
    except BatchTicketError as exc:
        raise CLIError(f"could not request upload tickets: {exc}") from exc

    display.on_finish(batch)
    if api.signal.is_cancelled:
        return EXIT_CANCELLED
    return 0 if batch.all_success else 1


async def _run_command(config: UploadthingConfig, args: argparse.Namespace) -> int:
    signal = CancellationSignal()
    async with UtApi(config=config, signal=signal) as api:
        signal.install_signal_handlers()

        if args.command == "upload":
            return await _run_upload(api, args)

        if args.command == "delete":
            response = await api.delete_files(args.keys)
            render_rows("Delete", ["Success"], [[response.success]])
            return 0 if response.success else 1

        if args.command == "urls":
            urls = await api.get_file_urls(args.keys)
            render_rows("File URLs", ["Key", "URL"], [[u.key, u.url] for u in urls])
            return 0

        if args.command == "list":
            files = await api.list_files(ListFilesOpts(limit=args.limit, offset=args.offset))
            render_rows("Files", ["Key", "Id", "Status"], [[f.key, f.id, f.status.value] for f in files])
            return 0

        if args.command == "rename":
            renames = _parse_pairs(args.renames, "rename")
            await api.rename_files(
                RenameFilesOpts([FileRename(key, name) for key, name in renames.items()])
            )
            return 0

        if args.command == "usage":
            info = await api.get_usage_info()
            render_rows(
                "Usage",
                ["Total", "App total", "Files", "Limit"],
                [[info.total_readable, info.app_total_readable, info.files_uploaded, info.limit_readable]],
            )
            return 0

        if args.command == "presign":
            try:
                url = await api.get_presigned_url(PresignedUrlOpts(args.key, args.expires_in))
            except ValueError as exc:
                raise CLIError(str(exc)) from exc
            print(url)
            return 0

    raise CLIError(f"unknown command: {args.command}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="utapi",
        description="Upload and manage files on UploadThing.",
    )
    parser.add_argument("--api-key", default=None, help=f"API key (default from {API_KEY_ENV})")
    parser.add_argument("--host", default=None, help="API host (default https://uploadthing.com)")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument("--version", action="version", version=f"utapi {VERSION}")

    sub = parser.add_subparsers(dest="command")

    upload = sub.add_parser("upload", help="Upload one or more files")
    upload.add_argument("paths", nargs="+", type=Path, help="Files to upload")
    upload.add_argument("-w", "--wait", action="store_true", help="Wait until the service finished processing")
    upload.add_argument(
        "--acl",
        choices=[a.value for a in Acl],
        default=Acl.PUBLIC_READ.value,
        help="Visibility of the uploaded files",
    )
    upload.add_argument(
        "--disposition",
        choices=[c.value for c in ContentDisposition],
        default=ContentDisposition.INLINE.value,
        help="Content disposition of the uploaded files",
    )
    upload.add_argument("-m", "--metadata", action="append", metavar="KEY=VALUE", help="Metadata entry (repeatable)")

    delete = sub.add_parser("delete", help="Delete files by key")
    delete.add_argument("keys", nargs="+")

    urls = sub.add_parser("urls", help="Get URLs for file keys")
    urls.add_argument("keys", nargs="+")

    list_cmd = sub.add_parser("list", help="List stored files")
    list_cmd.add_argument("--limit", type=int, default=10)
    list_cmd.add_argument("--offset", type=int, default=0)

    rename = sub.add_parser("rename", help="Rename files")
    rename.add_argument("renames", nargs="+", metavar="KEY=NEW_NAME")

    sub.add_parser("usage", help="Show account usage")

    presign = sub.add_parser("presign", help="Generate a presigned URL for a file")
    presign.add_argument("key")
    presign.add_argument("--expires-in", type=int, default=None, help="Seconds, at most 604800")

    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = UploadthingConfig.from_env(api_key=args.api_key, host=args.host)
    except UploadthingError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.command == "upload":
        render_configuration_summary(
            {
                "Host": config.host,
                "Files": len(args.paths),
                "ACL": args.acl,
                "Disposition": args.disposition,
                "Wait Until Done": "yes" if args.wait else "no",
                "Env File": str(used_env_file) if used_env_file else "-",
                "Logging": effective_log_mode,
            }
        )

    try:
        return asyncio.run(_run_command(config, args))
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except (UploadthingError, httpx.HTTPError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return EXIT_CANCELLED


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
