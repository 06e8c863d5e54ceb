# cli.py
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .brand_assistant import BrandAssistant
from .brief_loader import load_campaign
from .errors import GenerationError, ValidationError
from .generation_client import GeminiGenerationClient
from .orchestrator import VIDEO_POLL_INTERVAL_SECONDS, GenerationOrchestrator
from .session import EditingSession
from .utils import save_creative


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate multi-platform ad creatives from a YAML campaign brief."
    )
    parser.add_argument(
        "--log",
        required=False,
        type=Path,
        help="Optional path to a log file.",
    )
    subparsers = parser.add_subparsers(dest="command")

    generate = subparsers.add_parser("generate", help="Generate every selected creative.")
    generate.add_argument(
        "--brief",
        required=True,
        type=Path,
        help="Path to campaign brief YAML or JSON file.",
    )
    generate.add_argument(
        "--output",
        required=True,
        type=Path,
        help="Directory where generated creatives will be written.",
    )
    generate.add_argument(
        "--poll-interval",
        type=float,
        default=VIDEO_POLL_INTERVAL_SECONDS,
        help="Seconds between video status checks. Defaults to 15.",
    )
    generate.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Optional cap on jobs running at once. Unlimited by default.",
    )

    suggest = subparsers.add_parser("suggest", help="Ask the assistant for ideas.")
    suggest.add_argument("kind", choices=["taglines", "prompts", "logos", "mascots"])
    suggest.add_argument("--brief", required=True, type=Path)
    suggest.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Directory for logo or mascot options (required for those kinds).",
    )

    edit = subparsers.add_parser("edit-photo", help="Edit the brief's product photo.")
    edit.add_argument("action", choices=["remove-background", "stylize"])
    edit.add_argument("--brief", required=True, type=Path)
    edit.add_argument(
        "--output",
        required=True,
        type=Path,
        help="Where to write the edited PNG.",
    )

    args = parser.parse_args(argv)

    # If no command was supplied, show the help screen instead of failing
    # with a cryptic error.
    if args.command is None:
        parser.print_help(sys.stderr)
        sys.exit(1)

    return args


def configure_logging(log_path: Optional[Path]) -> None:
    """
    Configure basic logging to stderr and optionally to a file.

    The format is kept simple so logs can be tailed while a long video job
    is polling.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s: %(message)s",
        handlers=handlers,
    )


def _log_progress(message: str) -> None:
    logging.info("[progress] %s", message)


async def _generate(args: argparse.Namespace) -> int:
    config = load_campaign(args.brief)
    orchestrator = GenerationOrchestrator(
        GeminiGenerationClient(),
        poll_interval=args.poll_interval,
        max_concurrency=args.max_concurrency,
    )
    session = EditingSession(config, orchestrator.client, orchestrator=orchestrator)

    outcome = await session.generate(_log_progress)

    output_root: Path = args.output
    output_root.mkdir(parents=True, exist_ok=True)
    for creative in outcome.creatives:
        save_creative(output_root, creative)

    if outcome.error_message:
        logging.error(outcome.error_message)
    if outcome.is_total_failure:
        return 1

    logging.info(
        "Creative generation complete: %d creative(s) written to %s.",
        len(outcome.creatives),
        output_root,
    )
    return 0


async def _suggest(args: argparse.Namespace) -> int:
    config = load_campaign(args.brief)
    brand = config.brand_assets
    details = config.campaign_details
    assistant = BrandAssistant()

    if args.kind == "taglines":
        suggestions = await assistant.suggest_taglines(details.product_description)
    elif args.kind == "prompts":
        suggestions = await assistant.suggest_campaign_prompts(brand.brand_name, brand.tone)
    else:
        if args.output is None:
            logging.error("--output is required for %s suggestions.", args.kind)
            return 2
        if args.kind == "logos":
            options = await assistant.generate_logo_variations(brand.brand_name)
        else:
            options = await assistant.generate_mascot_suggestions(
                brand.brand_name, details.product_description, brand.tone
            )
        args.output.mkdir(parents=True, exist_ok=True)
        for option in options:
            (args.output / option.name).write_bytes(option.data)
        suggestions = [str(args.output / option.name) for option in options]

    if not suggestions:
        logging.warning("No %s suggestions were returned.", args.kind)
    for suggestion in suggestions:
        print(suggestion)
    return 0


async def _edit_photo(args: argparse.Namespace) -> int:
    config = load_campaign(args.brief)
    session = EditingSession(config, GeminiGenerationClient(), assistant=BrandAssistant())

    if args.action == "remove-background":
        updated = await session.remove_product_background()
    else:
        updated = await session.stylize_product_photo()

    photo = updated.campaign_details.product_photo
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(photo.data)
    logging.info("Wrote edited product photo to %s", args.output)
    return 0


_COMMANDS = {
    "generate": _generate,
    "suggest": _suggest,
    "edit-photo": _edit_photo,
}


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the CLI module.

    Validation problems (missing assets, unknown platforms, missing brief)
    exit with status 2; a run where nothing could be generated exits with 1.
    """
    args = parse_args(argv)
    configure_logging(args.log)

    try:
        code = asyncio.run(_COMMANDS[args.command](args))
    except (ValidationError, ValueError, FileNotFoundError) as exc:
        logging.error("%s", exc)
        code = 2
    except GenerationError as exc:
        logging.error("%s", exc.user_message)
        code = 1
    except RuntimeError as exc:
        # Missing API key and similar setup problems.
        logging.error("%s", exc)
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
