"""Command-line interface for cms-alt-text."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import TypeAdapter

from cms_alt_text.aggregators import ImageCollector, UsageAggregator, default_content_types
from cms_alt_text.clients import ContentstackClient
from cms_alt_text.config import DEFAULT_CHUNK_SIZE, AggregatorConfig, build_client_config
from cms_alt_text.updaters import DescriptionUpdater
from cms_alt_text.usage import (
    DEFAULT_REQUEST_DELAY,
    build_key_groups,
    drop_unused,
    filter_images_by_keys,
)
from schemas.asset import ImageAsset, Locale
from schemas.manifest import FilteredManifest, UsageManifest
from schemas.update import AltTextItem

DEFAULT_WORKSPACE = Path("./workspace")
DEFAULT_IMAGES_PATH = DEFAULT_WORKSPACE / "images.json"
DEFAULT_USAGES_PATH = DEFAULT_WORKSPACE / "usages.json"
DEFAULT_FILTERED_PATH = DEFAULT_WORKSPACE / "filtered-images.json"
DEFAULT_RESULTS_PATH = DEFAULT_WORKSPACE / "results.json"

_images_adapter = TypeAdapter(list[ImageAsset])
_alt_text_adapter = TypeAdapter(list[AltTextItem])


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def client_config(args: argparse.Namespace) -> dict:
    return build_client_config(
        api_key=args.api_key,
        management_token=args.management_token,
        host=args.host,
    )


def load_images(path: Path) -> list[ImageAsset]:
    """Read images from a bare JSON list or from a manifest with ``images``."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("images", [])
    return _images_adapter.validate_python(data)


def write_json(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def list_locales(args: argparse.Namespace) -> int:
    """Execute the list-locales command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    async def run() -> list[Locale]:
        async with ContentstackClient(client_config(args)) as client:
            return await client.list_locales()

    try:
        locales = asyncio.run(run())
    except Exception as e:
        logger.error(f"Failed to list locales: {e}")
        return 1

    logger.info(f"Found {len(locales)} locales")
    for locale in locales:
        logger.info(f"  {locale.name} ({locale.code})")
    return 0


def collect_images(args: argparse.Namespace) -> int:
    """Execute the collect-images command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    async def run() -> list[ImageAsset] | None:
        async with ContentstackClient(client_config(args)) as client:
            available = await client.list_locales()
            if args.locale:
                by_code = {locale.code: locale for locale in available}
                locales = [by_code.get(code, Locale(code=code)) for code in args.locale]
            else:
                locales = available

            if not locales:
                logger.error("No locales selected")
                return None
            logger.info(f"Selected locales: {', '.join(locale.code for locale in locales)}")

            collector = ImageCollector(client)
            content_types = args.content_type
            if not content_types:
                discovered = await collector.discover_content_types(locales)
                content_types = default_content_types(discovered)
            if not content_types:
                logger.error("No content types found")
                return None
            logger.info(f"Selected content types: {', '.join(content_types)}")

            return await collector.collect(locales, content_types)

    try:
        images = asyncio.run(run())
        if images is None:
            return 1

        write_json(args.output, _images_adapter.dump_json(images, indent=2, by_alias=True).decode())
        logger.info(f"Found {len(images)} images without description")
        logger.info(f"  Output: {args.output}")
        return 0

    except Exception as e:
        logger.error(f"Failed to collect images: {e}")
        return 1


def analyze_usages(args: argparse.Namespace) -> int:
    """Execute the analyze-usages command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    input_path = args.input.resolve()
    if not input_path.exists():
        logger.error(f"Images file not found: {input_path}")
        return 1

    try:
        images = load_images(input_path)
        config = AggregatorConfig(chunk_size=args.chunk_size, request_delay=args.delay)

        async def run() -> UsageManifest:
            async with ContentstackClient(client_config(args)) as client:
                aggregator = UsageAggregator(client, config=config)
                analyzed = await aggregator.analyze(images)
                return UsageManifest(
                    summary=aggregator.summary(),
                    key_groups=aggregator.key_groups(),
                    images=analyzed,
                )

        manifest = asyncio.run(run())

        summary = manifest.summary
        logger.info(f"Analyzed {summary.images_analyzed} images")
        logger.info(f"  Usages found: {summary.usages_found}")
        logger.info(f"  Unique keys: {summary.unique_keys}")
        logger.info(f"  Images without usages: {summary.images_without_usages}")
        if summary.images_failed:
            logger.warning(f"  Images failed: {summary.images_failed}")

        if args.drop_unused:
            kept = drop_unused(manifest.images)
            logger.info(f"Filtered out {len(manifest.images) - len(kept)} unused images")
            manifest.images = kept

        write_json(args.output, manifest.model_dump_json(indent=2, by_alias=True))
        logger.info(f"  Output: {args.output}")
        return 0

    except Exception as e:
        logger.error(f"Failed to analyze usages: {e}")
        return 1


def filter_images(args: argparse.Namespace) -> int:
    """Execute the filter-images command.

    Without ``--key`` the available keys are listed and nothing is written.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    input_path = args.input.resolve()
    if not input_path.exists():
        logger.error(f"Usages file not found: {input_path}")
        return 1

    try:
        images = load_images(input_path)
        key_groups = build_key_groups(images)

        if not args.key:
            logger.info(f"Found {len(key_groups)} unique keys")
            for group in key_groups.values():
                logger.info(f"  {group.key} ({group.image_count} images)")
            return 0

        unknown = [key for key in args.key if key not in key_groups]
        for key in unknown:
            logger.warning(f"Key not found in usages: {key}")

        kept = filter_images_by_keys(images, args.key)
        manifest = FilteredManifest(
            total_images=len(images),
            filtered_images=len(kept),
            selected_keys=list(args.key),
            key_groups=key_groups,
            images=kept,
        )
        write_json(args.output, manifest.model_dump_json(indent=2, by_alias=True))

        logger.info(f"Filtered {len(images)} images to {len(kept)}")
        logger.info(f"  Output: {args.output}")
        return 0

    except Exception as e:
        logger.error(f"Failed to filter images: {e}")
        return 1


def update_descriptions(args: argparse.Namespace) -> int:
    """Execute the update-descriptions command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    input_path = args.input.resolve()
    if not input_path.exists():
        logger.error(f"ALT text file not found: {input_path}")
        return 1

    if args.dry_run:
        logger.info("DRY RUN - no changes will be saved to Contentstack")

    try:
        items = _alt_text_adapter.validate_json(input_path.read_text(encoding="utf-8"))

        async def run():
            async with ContentstackClient(client_config(args)) as client:
                updater = DescriptionUpdater(client, dry_run=args.dry_run)
                return await updater.update(items)

        report = asyncio.run(run())
        write_json(args.output, report.model_dump_json(indent=2, by_alias=True))

        action = "Would update" if report.dry_run else "Updated"
        logger.info(f"{action} {report.successful}/{report.total} images")
        if report.failed:
            logger.warning(f"  Failed: {report.failed}")
        logger.info(f"  Output: {args.output}")
        return 0 if report.failed == 0 else 1

    except Exception as e:
        logger.error(f"Failed to update descriptions: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="cms-alt-text",
        description="Find Contentstack images without ALT text, analyze where they are used, and write ALT text back",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Contentstack stack API key (default: $CONTENTSTACK_API_KEY)",
    )
    parser.add_argument(
        "--management-token",
        type=str,
        default=None,
        help="Contentstack management token (default: $CONTENTSTACK_MANAGEMENT_TOKEN)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Contentstack API host, e.g. eu-api.contentstack.com (default: $CONTENTSTACK_HOST)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    locales_parser = subparsers.add_parser(
        "list-locales",
        help="List the locales configured on the stack",
    )
    locales_parser.set_defaults(func=list_locales)

    collect_parser = subparsers.add_parser(
        "collect-images",
        help="Collect images that have no description",
        description="Page through the assets of each locale and save the images whose description is empty.",
    )
    collect_parser.add_argument(
        "--locale",
        action="append",
        default=[],
        help="Locale code to include; repeat for several (default: all locales)",
    )
    collect_parser.add_argument(
        "--content-type",
        action="append",
        default=[],
        help="MIME type to include; repeat for several (default: every image/* type found)",
    )
    collect_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_IMAGES_PATH,
        help=f"Output file for collected images (default: {DEFAULT_IMAGES_PATH})",
    )
    collect_parser.set_defaults(func=collect_images)

    analyze_parser = subparsers.add_parser(
        "analyze-usages",
        help="Find where each image is used and key its usages",
        description="Resolve the entries, components and fields that reference each image and group them by usage key.",
    )
    analyze_parser.add_argument(
        "--input",
        type=Path,
        default=DEFAULT_IMAGES_PATH,
        help=f"Images file to analyze (default: {DEFAULT_IMAGES_PATH})",
    )
    analyze_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_USAGES_PATH,
        help=f"Output file for the usage manifest (default: {DEFAULT_USAGES_PATH})",
    )
    analyze_parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help=f"Images analyzed concurrently (default: {DEFAULT_CHUNK_SIZE})",
    )
    analyze_parser.add_argument(
        "--delay",
        type=float,
        default=DEFAULT_REQUEST_DELAY,
        help=f"Seconds between entry fetches for one image (default: {DEFAULT_REQUEST_DELAY})",
    )
    analyze_parser.add_argument(
        "--drop-unused",
        action="store_true",
        help="Leave images without usages out of the output",
    )
    analyze_parser.set_defaults(func=analyze_usages)

    filter_parser = subparsers.add_parser(
        "filter-images",
        help="Keep images used under selected keys",
        description="Select images whose usages carry one of the given keys. Without --key, list the available keys.",
    )
    filter_parser.add_argument(
        "--input",
        type=Path,
        default=DEFAULT_USAGES_PATH,
        help=f"Usage manifest to filter (default: {DEFAULT_USAGES_PATH})",
    )
    filter_parser.add_argument(
        "--key",
        action="append",
        default=[],
        help="Usage key to include; repeat for several",
    )
    filter_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_FILTERED_PATH,
        help=f"Output file for filtered images (default: {DEFAULT_FILTERED_PATH})",
    )
    filter_parser.set_defaults(func=filter_images)

    update_parser = subparsers.add_parser(
        "update-descriptions",
        help="Write reviewed ALT text to asset descriptions",
        description="Set each asset's description to its reviewed ALT text and tag it as AI generated.",
    )
    update_parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="JSON list of {uid, locale, altText, filename} items",
    )
    update_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_RESULTS_PATH,
        help=f"Output file for update results (default: {DEFAULT_RESULTS_PATH})",
    )
    update_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without updating Contentstack",
    )
    update_parser.set_defaults(func=update_descriptions)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
