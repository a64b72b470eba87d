"""
Grimoire registry CLI - validate and browse a grimoire registry tree.

Usage:
    grimoire validate [ENTRY ...] [--root packages] [--workers 4] [--allow-warnings] [--json]
        Validates the named entries, or every entry in the registry.

    grimoire list [--root packages]
        Lists every entry with its manifest name and description.

    grimoire info effect-ts/effect/sql
        Shows manifest fields and topic count for one entry.

    grimoire topics effect-ts/effect/sql
        Lists an entry's topics in (order, slug) order.

    grimoire show effect-ts/effect/sql overview
        Prints a topic body, selected by slug or 1-based position.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from grimoire.config import Settings, get_settings
from grimoire.registry import (
    Grimoire,
    GrimoireError,
    GrimoireRegistry,
    ValidationReport,
    from_path,
    load_grimoire,
)

logger = logging.getLogger(__name__)


def _registry(settings: Settings) -> GrimoireRegistry:
    return GrimoireRegistry(
        settings.registry_root,
        min_topics=settings.min_topics,
        topic_extensions=tuple(settings.topic_extensions),
    )


def _load(settings: Settings, entry: str) -> Grimoire:
    grimoire = load_grimoire(
        settings.registry_root,
        from_path(entry),
        min_topics=settings.min_topics,
        topic_extensions=tuple(settings.topic_extensions),
    )
    if grimoire.warnings:
        print(
            f"Warning: {entry} has {len(grimoire.warnings)} validation error(s); "
            f"run 'grimoire validate {entry}' for details",
            file=sys.stderr,
        )
    return grimoire


def _print_report(report: ValidationReport) -> None:
    if report.ok:
        print(f"PASS  {report.identity}  ({len(report.grimoire.topics)} topics)")
        return

    label = "FATAL" if report.fatal else "FAIL"
    print(f"{label} {report.identity}")
    for error in report.errors:
        print(f"  - [{error.code}] {error}")


def cmd_validate(args: argparse.Namespace, settings: Settings) -> None:
    """Execute the 'validate' subcommand: check entries and report violations."""
    registry = _registry(settings)

    if args.entries:
        reports = [registry.validate(entry) for entry in args.entries]
    else:
        if registry.count() == 0:
            print(f"Error: no grimoires found under {settings.registry_root}", file=sys.stderr)
            sys.exit(1)
        logger.info(f"Validating {registry.count()} entries with {settings.workers} worker(s)")
        reports = registry.validate_all(workers=settings.workers)

    fatal = [r for r in reports if r.fatal]
    failed = [r for r in reports if not r.ok]

    if args.json:
        summary = {"checked": len(reports), "failed": len(failed), "fatal": len(fatal)}
        print(json.dumps({"entries": [r.to_dict() for r in reports], "summary": summary}, indent=2))
    else:
        for report in reports:
            _print_report(report)
        print(f"{'=' * 50}")
        print(f"  Entries checked:        {len(reports):>8}")
        print(f"  With errors:            {len(failed):>8}")
        print(f"  Fatal:                  {len(fatal):>8}")

    if fatal or (failed and not args.allow_warnings):
        sys.exit(1)


def cmd_list(args: argparse.Namespace, settings: Settings) -> None:
    """Execute the 'list' subcommand: show every entry in the registry."""
    registry = _registry(settings)
    if registry.count() == 0:
        print(f"No grimoires found under {settings.registry_root}")
        return

    for identity in registry.list_entries():
        report = registry.validate(identity)
        if report.grimoire is None:
            print(f"{identity}  (invalid)")
            continue
        manifest = report.grimoire.manifest
        print(f"{identity}  {manifest.name} - {manifest.description}")


def cmd_info(args: argparse.Namespace, settings: Settings) -> None:
    """Execute the 'info' subcommand: show manifest details for one entry."""
    grimoire = _load(settings, args.entry)
    manifest = grimoire.manifest

    print(f"Entry: {grimoire.identity}")
    print(f"{'=' * 50}")
    print(f"  Name:          {manifest.name}")
    print(f"  Description:   {manifest.description}")
    print(f"  Version:       {manifest.version}")
    print(f"  GitHub:        {manifest.github}")
    if manifest.path is not None:
        print(f"  Path:          {manifest.path}")
    print(f"  Source type:   {manifest.source_type}")
    print(f"  Topics dir:    {manifest.topics_dir}")
    print(f"  Topics:        {len(grimoire.topics)}")
    print(f"  Categories:    {', '.join(grimoire.categories())}")


def cmd_topics(args: argparse.Namespace, settings: Settings) -> None:
    """Execute the 'topics' subcommand: list topics in display order."""
    grimoire = _load(settings, args.entry)
    if not grimoire.topics:
        print(f"No topics in {grimoire.identity}")
        return

    width = max(len(slug) for slug in grimoire.slugs)
    for position, topic in enumerate(grimoire.topics, start=1):
        print(f"{position:>3}. {topic.slug:<{width}}  [{topic.order}] {topic.category}: {topic.title}")


def cmd_show(args: argparse.Namespace, settings: Settings) -> None:
    """Execute the 'show' subcommand: print one topic body."""
    grimoire = _load(settings, args.entry)
    try:
        topic = grimoire.get_topic(args.topic)
    except KeyError:
        print(f"Error: no topic {args.topic!r} in {grimoire.identity}", file=sys.stderr)
        sys.exit(1)

    print(topic.body)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--root", type=str, default=None, help="Registry root directory")
    parser.add_argument("--config", type=str, default=None, help="Path to grimoire.yaml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="grimoire",
        description="Grimoire registry - validate and browse grimoires",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # 'validate' subcommand
    validate_parser = subparsers.add_parser("validate", help="Validate registry entries")
    validate_parser.add_argument(
        "entries", nargs="*", help="Entry paths (owner/repo[/path]); default: all entries"
    )
    validate_parser.add_argument(
        "--min-topics", type=int, default=None, help="Minimum topic files per entry"
    )
    validate_parser.add_argument(
        "--workers", type=int, default=None, help="Number of parallel validation workers"
    )
    validate_parser.add_argument(
        "--allow-warnings",
        action="store_true",
        help="Only fail on fatal errors (missing or unparseable manifest)",
    )
    validate_parser.add_argument("--json", action="store_true", help="Print a JSON report")
    _add_common_arguments(validate_parser)
    validate_parser.set_defaults(func=cmd_validate)

    # 'list' subcommand
    list_parser = subparsers.add_parser("list", help="List registry entries")
    _add_common_arguments(list_parser)
    list_parser.set_defaults(func=cmd_list)

    # 'info' subcommand
    info_parser = subparsers.add_parser("info", help="Show manifest details for an entry")
    info_parser.add_argument("entry", help="Entry path (owner/repo[/path])")
    _add_common_arguments(info_parser)
    info_parser.set_defaults(func=cmd_info)

    # 'topics' subcommand
    topics_parser = subparsers.add_parser("topics", help="List an entry's topics")
    topics_parser.add_argument("entry", help="Entry path (owner/repo[/path])")
    _add_common_arguments(topics_parser)
    topics_parser.set_defaults(func=cmd_topics)

    # 'show' subcommand
    show_parser = subparsers.add_parser("show", help="Print a topic")
    show_parser.add_argument("entry", help="Entry path (owner/repo[/path])")
    show_parser.add_argument("topic", help="Topic slug or 1-based position")
    _add_common_arguments(show_parser)
    show_parser.set_defaults(func=cmd_show)

    args = parser.parse_args(argv)

    try:
        settings = get_settings(
            config_path=Path(args.config) if args.config else None,
            registry_root=args.root,
            min_topics=getattr(args, "min_topics", None),
            workers=getattr(args, "workers", None),
        )
    except (OSError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    # Configure logging
    level = logging.DEBUG if args.verbose else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        args.func(args, settings)
    except GrimoireError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
