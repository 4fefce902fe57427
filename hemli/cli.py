"""
hemli CLI — entry point for all operations.

Usage:
    hemli get -n NS NAME [--source-sh CMD | --source-cmd CMD] [--ttl SECONDS]
                         [--force-refresh | --no-refresh | --no-store]
    hemli edit -n NS NAME [--ttl SECONDS | --clear-ttl] [--source-sh CMD | --source-cmd CMD]
    hemli delete -n NS NAME
    hemli list [-n NS] [--repair]
    hemli inspect -n NS NAME

Every flag can also be set through the environment as HEMLI_<FLAG_NAME>,
e.g. HEMLI_NAMESPACE=app or HEMLI_FORCE_REFRESH=1. Flags on the command
line win over the environment.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from hemli.errors import HemliError

ENV_PREFIX = "HEMLI_"
TRUTHY = ("1", "true", "yes", "on")


def _env_var(flag: str) -> str:
    return ENV_PREFIX + flag.replace("-", "_").upper()


def _env_value(flag: str) -> str | None:
    return os.environ.get(_env_var(flag)) or None


def _env_flag(flag: str) -> bool:
    return os.environ.get(_env_var(flag), "").strip().lower() in TRUTHY


def _ttl_arg(value: str) -> int:
    try:
        ttl = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid TTL {value!r}, expected whole seconds"
        ) from None
    if ttl < 0:
        raise argparse.ArgumentTypeError(f"TTL must be non-negative, got {ttl}")
    return ttl


def _add_option(parser: argparse.ArgumentParser, flag: str, help: str, **kwargs) -> None:
    """Add --flag with its HEMLI_* environment fallback."""
    parser.add_argument(
        f"--{flag}",
        default=_env_value(flag),
        help=f"{help} [env: {_env_var(flag)}]",
        **kwargs,
    )


def _add_switch(parser: argparse.ArgumentParser, flag: str, help: str) -> None:
    parser.add_argument(
        f"--{flag}",
        action="store_true",
        default=_env_flag(flag),
        help=f"{help} [env: {_env_var(flag)}]",
    )


def _add_identity(
    parser: argparse.ArgumentParser, *, with_name: bool = True, required: bool = True
) -> None:
    namespace = _env_value("namespace")
    parser.add_argument(
        "-n",
        "--namespace",
        default=namespace,
        required=required and namespace is None,
        help=f"Namespace for the secret [env: {_env_var('namespace')}]",
    )
    if with_name:
        parser.add_argument("secret", help="Name of the secret")


def _add_source_options(parser: argparse.ArgumentParser, verb: str) -> None:
    _add_option(parser, "source-sh", f"{verb} command to run via the system shell", metavar="CMD")
    _add_option(
        parser, "source-cmd", f"{verb} command to run directly, split on whitespace", metavar="CMD"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hemli",
        description="hemli — secret management CLI for local development.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    # get
    get_parser = subparsers.add_parser("get", help="Get a secret, fetching from source if needed")
    _add_identity(get_parser)
    _add_switch(get_parser, "force-refresh", "Force refresh from source even if cached")
    _add_switch(get_parser, "no-refresh", "Only return cached value, never refresh")
    _add_switch(get_parser, "no-store", "Don't store the fetched secret in the keyring")
    _add_option(
        get_parser, "ttl", "TTL in seconds for the cached secret", type=_ttl_arg, metavar="SECONDS"
    )
    _add_source_options(get_parser, "Source")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete a secret from the keyring")
    _add_identity(delete_parser)

    # list
    list_parser = subparsers.add_parser("list", help="List stored secrets")
    _add_identity(list_parser, with_name=False, required=False)
    _add_switch(list_parser, "repair", "Drop index entries whose keyring entry is gone")

    # inspect
    inspect_parser = subparsers.add_parser(
        "inspect", help="Inspect a cached secret, showing full metadata as JSON"
    )
    _add_identity(inspect_parser)

    # edit
    edit_parser = subparsers.add_parser(
        "edit", help="Edit metadata of a cached secret (TTL, source command)"
    )
    _add_identity(edit_parser)
    _add_option(edit_parser, "ttl", "New TTL in seconds", type=_ttl_arg, metavar="SECONDS")
    _add_switch(edit_parser, "clear-ttl", "Remove TTL (secret will never expire)")
    _add_source_options(edit_parser, "New source")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from hemli import __version__

        print(f"hemli {__version__}")
        return 0

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging()

    handlers = {
        "get": _cmd_get,
        "delete": _cmd_delete,
        "list": _cmd_list,
        "inspect": _cmd_inspect,
        "edit": _cmd_edit,
    }
    try:
        return handlers[args.command](args)
    except HemliError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130


def _setup_logging() -> None:
    from hemli.config import get_config

    logging.basicConfig(
        level=getattr(logging, get_config().log_level, logging.WARNING),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _build_cache():
    from hemli.config import get_config
    from hemli.engine import SecretCache
    from hemli.store import KeyringStore

    return SecretCache(KeyringStore(), get_config().index_path)


def _cmd_get(args: argparse.Namespace) -> int:
    from hemli.requests import GetRequest

    request = GetRequest.from_flags(
        args.namespace,
        args.secret,
        force_refresh=args.force_refresh,
        no_refresh=args.no_refresh,
        no_store=args.no_store,
        ttl=args.ttl,
        source_sh=args.source_sh,
        source_cmd=args.source_cmd,
    )
    value = _build_cache().get(request)
    sys.stdout.write(value)
    sys.stdout.flush()
    return 0


def _cmd_delete(args: argparse.Namespace) -> int:
    if _build_cache().delete(args.namespace, args.secret):
        print(f"Deleted secret '{args.secret}' from namespace '{args.namespace}'", file=sys.stderr)
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    from hemli.models import rfc3339

    cache = _build_cache()
    if args.repair:
        pruned = cache.repair()
        print(f"Pruned {len(pruned)} stale index entries", file=sys.stderr)

    for entry in cache.list(args.namespace):
        print(f"{entry.namespace}\t{entry.name}\t{rfc3339(entry.created_at)}")
    return 0


def _cmd_inspect(args: argparse.Namespace) -> int:
    record = _build_cache().inspect(args.namespace, args.secret)
    print(record.to_json(indent=2))
    return 0


def _cmd_edit(args: argparse.Namespace) -> int:
    from hemli.requests import EditRequest

    request = EditRequest.from_flags(
        args.namespace,
        args.secret,
        ttl=args.ttl,
        clear_ttl=args.clear_ttl,
        source_sh=args.source_sh,
        source_cmd=args.source_cmd,
    )
    _build_cache().edit(request)
    print(f"Updated secret '{args.secret}' in namespace '{args.namespace}'", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
