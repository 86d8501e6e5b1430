"""CLI entrypoints for tourgen commands."""

from __future__ import annotations

import argparse
import json
import signal
import sys
from pathlib import Path

from .errors import LLMError, TourCancelledError
from .logging import configure_logging, get_logger
from .orchestrator import CancellationToken, Orchestrator, TourOptions


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the workspace root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tourgen",
        description="Generate CodeTour walkthroughs from structural analysis of a codebase.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Analyze the workspace and generate a tour with the configured LLM.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_path_argument(generate_parser)
    generate_parser.add_argument("--title", help="Tour title (also used as the tour focus).")
    generate_parser.add_argument("--description", help="Tour description.")
    generate_parser.add_argument(
        "--focus",
        action="append",
        default=[],
        metavar="AREA",
        help="Area the tour should emphasise (repeatable).",
    )
    generate_parser.add_argument("--max-steps", type=int, default=None, help="Maximum steps in the tour.")
    generate_parser.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="Maximum files to analyze (0 analyzes every matching file).",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the tour JSON instead of writing it to the tours directory.",
    )

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Run discovery and structural analysis only and print the result as JSON.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_path_argument(analyze_parser)
    analyze_parser.add_argument("--max-files", type=int, default=None, help="Maximum files to analyze.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tourgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "generate":
        _run_generate(parser, args)
    elif args.command == "analyze":
        orchestrator = Orchestrator()
        try:
            structure = orchestrator.run_analyze(args.path, max_files=args.max_files)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except RuntimeError as exc:
            parser.exit(1, f"tourgen analyze failed: {exc}\nRun with --verbose for more details.\n")
        print(json.dumps(structure.to_dict(), indent=2))
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_generate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    orchestrator = Orchestrator()
    token = CancellationToken()
    options = TourOptions(
        title=args.title,
        description=args.description,
        focus_areas=list(args.focus),
        max_steps=args.max_steps,
        max_files=args.max_files,
        write=not args.dry_run,
    )

    def _cancel(signum: int, frame: object) -> None:
        get_logger("cli").warning("Cancellation requested; stopping at the next checkpoint")
        token.cancel()

    previous = signal.signal(signal.SIGINT, _cancel)
    try:
        result = orchestrator.run_generate(args.path, options, cancel_token=token)
    except TourCancelledError as exc:
        parser.exit(1, f"{exc}\n")
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except LLMError as exc:
        parser.exit(1, f"tourgen generate failed: {exc}\n")
    except RuntimeError as exc:
        parser.exit(1, f"tourgen generate failed: {exc}\nRun with --verbose for more details.\n")
    finally:
        signal.signal(signal.SIGINT, previous)

    if args.dry_run:
        from .tour_file import tour_to_dict

        print(json.dumps(tour_to_dict(result.tour), indent=2))
        return

    summary = f"Tour created with {result.step_count} steps"
    if result.tour_path is not None:
        summary += f" at {_relativize(result.tour_path)}"
    if result.failed_batches:
        summary += f" ({len(result.failed_batches)} batch(es) failed)"
    print(summary)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
