"""CLI entrypoints for repoast commands."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigError, RepoastConfig, load_config
from .errors import PublishError, TraversalError
from .logging import configure_logging
from .pipeline import Pipeline
from .remote.sandbox import SandboxPublisher


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS,
        help="Also write debug-level logs to this file.",
    )


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        help="Path of the JSON artifact to write.",
    )
    parser.add_argument(
        "--config",
        help="Path to a .repoast.yml file (defaults to the analyzed root or the current directory).",
    )
    parser.add_argument(
        "--no-summary",
        action="store_true",
        help="Skip natural-language summaries for this run.",
    )
    parser.add_argument(
        "--include-source",
        action="store_true",
        help="Embed each file's source text in the artifact.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Number of files processed in parallel.",
    )
    parser.add_argument(
        "--indent",
        type=int,
        help="Pretty-print the artifact with this indentation.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoast",
        description="Produce structural representations and summaries for every file of a repository.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", help="Also write debug-level logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a local directory tree.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_log_file_option(analyze_parser)
    _add_run_options(analyze_parser)
    analyze_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the directory root (defaults to current directory).",
    )
    analyze_parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="NAME",
        help="Additional directory name to skip at any depth (repeatable).",
    )

    remote_parser = subparsers.add_parser(
        "remote",
        help="Analyze a GitHub repository.",
    )
    _add_verbose_option(remote_parser, suppress_default=True)
    _add_log_file_option(remote_parser)
    _add_run_options(remote_parser)
    remote_parser.add_argument("owner", help="Repository owner.")
    remote_parser.add_argument("repo", help="Repository name.")

    publish_parser = subparsers.add_parser(
        "publish",
        help="Publish a generated React component to a sandbox preview.",
    )
    _add_verbose_option(publish_parser, suppress_default=True)
    _add_log_file_option(publish_parser)
    publish_parser.add_argument("file", help="File containing the App component source.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_log_file_option(serve_parser)
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=5000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repoast commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "analyze":
        try:
            config = _resolve_config(args, default_location=Path(args.path))
            pipeline = Pipeline(config)
            aggregate = pipeline.run_local(args.path)
        except (ConfigError, TraversalError) as exc:
            parser.exit(1, f"{exc}\n")
        except Exception as exc:  # pragma: no cover - last-resort message for the CLI user
            parser.exit(1, f"repoast analyze failed: {exc}\nRun with --verbose for more details.\n")
        output = Path(args.output or pipeline.artifact_name())
        try:
            Pipeline.write(aggregate, output, indent=args.indent)
        except OSError as exc:
            parser.exit(1, f"repoast analyze failed: unable to write {output}: {exc}\n")
        print(f"Wrote {len(aggregate.files)} file records to {_relativize(output)}")
    elif args.command == "remote":
        try:
            config = _resolve_config(args, default_location=Path.cwd())
            pipeline = Pipeline(config)
            aggregate = pipeline.run_remote(args.owner, args.repo)
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        except Exception as exc:  # pragma: no cover - last-resort message for the CLI user
            parser.exit(1, f"repoast remote failed: {exc}\nRun with --verbose for more details.\n")
        output = Path(args.output or pipeline.artifact_name(args.repo))
        try:
            Pipeline.write(aggregate, output, indent=args.indent)
        except OSError as exc:
            parser.exit(1, f"repoast remote failed: unable to write {output}: {exc}\n")
        print(f"Wrote {len(aggregate.files)} file records to {_relativize(output)}")
    elif args.command == "publish":
        try:
            code = Path(args.file).read_text(encoding="utf-8")
            settings = load_config(Path.cwd()).sandbox
            preview = SandboxPublisher(
                base_url=settings.base_url, request_timeout=settings.request_timeout
            ).publish(code)
        except (OSError, ValueError, ConfigError, PublishError) as exc:
            parser.exit(1, f"repoast publish failed: {exc}\n")
        print(f"Preview available at {preview.preview_url}")
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _resolve_config(args: argparse.Namespace, *, default_location: Path) -> RepoastConfig:
    config = load_config(Path(args.config) if args.config else default_location)
    if getattr(args, "ignore", None):
        config.ignore_dirs = config.ignore_dirs | frozenset(args.ignore)
    if args.no_summary:
        config.summarizer = replace(config.summarizer, enabled=False)
    if args.include_source:
        config.include_source = True
    if args.workers is not None:
        if args.workers < 1:
            raise ConfigError("--workers must be a positive integer")
        config.workers = args.workers
    return config


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
