"""
Review Collector

CLI entry point: crawl reviews for one or more apps and print them as JSON lines.
"""

import argparse
import json
import logging
import sys

from review_collector import (
    Collector,
    DoneCollectingEvent,
    PageCompleteEvent,
    ReviewEvent,
)
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Collect app reviews from the storefront's review listing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # First 5 pages of reviews for one app
  review-collector com.spotify.music

  # Every page for two apps, one second between requests
  review-collector com.spotify.music com.whatsapp --max-pages 0 --delay 1000

  # Ask before fetching each next page
  review-collector com.spotify.music --check-before-continue
        """
    )

    parser.add_argument(
        "apps",
        nargs="+",
        help="App ids to collect reviews for (e.g., com.spotify.music)"
    )

    parser.add_argument(
        "--max-pages",
        type=int,
        default=settings.DEFAULT_MAX_PAGES,
        help=f"Pages per app, 0 for no limit (default: {settings.DEFAULT_MAX_PAGES})"
    )

    parser.add_argument(
        "--delay",
        type=int,
        default=settings.DEFAULT_DELAY_MS,
        help=f"Milliseconds between requests (default: {settings.DEFAULT_DELAY_MS})"
    )

    parser.add_argument(
        "--max-retries",
        type=int,
        default=settings.DEFAULT_MAX_RETRIES,
        help=f"Consecutive failures tolerated per page (default: {settings.DEFAULT_MAX_RETRIES})"
    )

    parser.add_argument(
        "--user-agent",
        default=settings.DEFAULT_USER_AGENT,
        help="User-Agent header to send"
    )

    parser.add_argument(
        "--check-before-continue",
        action="store_true",
        help="Prompt on stdin before fetching each next page (ignores --max-pages)"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    return parser


def ask_to_continue(event: PageCompleteEvent) -> None:
    """Prompt the user whether to fetch the next page."""
    if not event.reviews:
        event.stop()
        return
    answer = input(
        f"{event.app_id}: page {event.page_num} had {len(event.reviews)} reviews. "
        f"Fetch the next page? [y/N] "
    )
    if answer.strip().lower() in ("y", "yes"):
        event.continue_()
    else:
        event.stop()


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    options = {
        "delay": args.delay,
        "max_retries": args.max_retries,
        "user_agent": args.user_agent,
        "check_before_continue": args.check_before_continue
    }
    if not args.check_before_continue:
        options["max_pages"] = args.max_pages

    try:
        collector = Collector(args.apps, options)
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid arguments: {e}")
        sys.exit(2)

    failed = []

    def print_review(event: ReviewEvent) -> None:
        print(json.dumps(event.review.to_dict(), ensure_ascii=False), flush=True)

    def report_done(event: DoneCollectingEvent) -> None:
        if event.error is not None:
            failed.append(event.app_id)
            logger.error(f"{event.app_id}: {event.error}")
        logger.info(f"{event.app_id} done ({event.apps_remaining} app(s) remaining)")

    collector.on(ReviewEvent, print_review)
    collector.on(DoneCollectingEvent, report_done)
    if args.check_before_continue:
        collector.on(PageCompleteEvent, ask_to_continue)

    try:
        with collector:
            collector.collect()
    except KeyboardInterrupt:
        logger.warning("Collection interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Collection failed: {e}", exc_info=True)
        sys.exit(1)

    if failed:
        logger.warning(f"Gave up on {len(failed)} app(s): {', '.join(failed)}")
    logger.info("Review collection complete")
    sys.exit(0)


if __name__ == "__main__":
    main()
