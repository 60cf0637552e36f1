# channel_catalog/main.py
#!/usr/bin/env python3
"""
channel_catalog/main.py - catalog regeneration entry point
Run:
  python -m channel_catalog.main build --kind sites
  python -m channel_catalog.main validate --kind articles
  python -m channel_catalog.main import-csv channels.csv --build
"""
import sys
import time
import argparse

from channel_catalog.analytics.metrics_builder import append_summary, build_metrics
from channel_catalog.catalog.builder import regenerate_catalog
from channel_catalog.catalog.store import CatalogError
from channel_catalog.constants.catalogs import CATALOG_KINDS, DATA_ROOT
from channel_catalog.ingest.csv_import import import_channels
from channel_catalog.locales.loader import load_locales_config, resolved_enabled_locales
from channel_catalog.logger import get_logger
from channel_catalog.utils.cleanup import cleanup_details
from channel_catalog.utils.lock import LockBusyError
from channel_catalog.validators.consistency import check_consistency
from channel_catalog.validators.link_audit import MAX_CONCURRENT_LINKS, audit_catalog_links
from channel_catalog.validators.rules import load_validation_rules

logger = get_logger("catalog.main")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_LOCKED = 2


def print_build_summary(report):
    print()
    print(f"🎉 {report['kind']} generation completed!")
    print(f"✅ Processed: {report['processed']} files")
    print(f"⏭️  Skipped: {report['skipped']}")
    print(f"📊 Total entries: {report['total']}")
    print(f"📁 Output file: {report['output']}")
    for path in report.get("locale_outputs", []):
        print(f"🌍 Locale list: {path}")
    if report["added"]:
        print(f"🆕 Added: {', '.join(report['added'])}")
    if report["orphans"]:
        print(f"❌ Orphaned list entries (no detail file): {', '.join(report['orphans'])}")
    print("\n📈 Statistics:")
    for key, count in report["coverage"].items():
        print(f"   {key}: {count}")


def cmd_build(args, root, locales, default_locale):
    report, _ = regenerate_catalog(
        root, args.kind, args.configured_locales, default_locale,
        dry_run=args.dry_run, report_locales=locales, per_locale=args.per_locale,
    )
    print_build_summary(report)
    if not args.skip_metrics:
        append_summary(root, report)
        build_metrics(root)
    return EXIT_OK


def cmd_validate(args, root, locales, default_locale):
    result = check_consistency(root, args.kind, locales, default_locale)
    print("\n📊 Validation Summary:")
    print(f"   ✅ Synced: {result['synced']}")
    print(f"   ❌ Missing from list: {len(result['missing_from_list'])}")
    print(f"   ❌ Orphaned entries: {len(result['orphaned'])}")
    print(f"   ⚠️  Non-canonical filenames: {len(result['non_canonical'])}")
    print("\n🌍 Language Coverage:")
    for key, count in result["coverage"].items():
        print(f"   {key}: {count}")
    return EXIT_OK if result["in_sync"] else EXIT_FAILED


def cmd_import_csv(args, root, locales, default_locale):
    summary = import_channels(args.csv_path, root, locales, kind="sites")
    print(f"✅ Created: {len(summary['created'])} sites, ⏭️  Skipped: {len(summary['skipped'])}")
    if args.build:
        args.kind, args.dry_run, args.per_locale = "sites", False, False
        return cmd_build(args, root, locales, default_locale)
    return EXIT_OK


def cmd_cleanup(args, root, locales, default_locale):
    flagged = cleanup_details(root, args.kind, locales, load_validation_rules(root), apply=args.apply)
    for path in flagged:
        print(f"{'🗑️  Deleted' if args.apply else 'Would delete'}: {path}")
    return EXIT_OK


def cmd_audit_links(args, root, locales, default_locale):
    path, results = audit_catalog_links(root, args.kind, locales, concurrency=args.concurrency)
    problems = [r for r in results if r["status"] not in ("OK", "IGNORED_403")]
    print(f"🔗 Checked {len(results)} URLs, {len(problems)} problems -> {path}")
    return EXIT_OK


def cmd_metrics(args, root, locales, default_locale):
    print(build_metrics(root))
    return EXIT_OK


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Channel catalog builder")
    p.add_argument("--root", default=DATA_ROOT, help="data root (default: $CATALOG_ROOT or ./data)")
    p.add_argument("--locales", default=None, help="comma separated locale override")
    sub = p.add_subparsers(dest="command", required=True)

    b = sub.add_parser("build", help="regenerate a list file from detail files")
    b.add_argument("--kind", choices=sorted(CATALOG_KINDS), default="sites")
    b.add_argument("--dry-run", action="store_true")
    b.add_argument("--per-locale", action="store_true",
                   help="also write list/<locale>/ files for the other locales")
    b.add_argument("--skip-metrics", action="store_true")
    b.set_defaults(func=cmd_build)

    v = sub.add_parser("validate", help="compare the list file with detail files")
    v.add_argument("--kind", choices=sorted(CATALOG_KINDS), default="sites")
    v.set_defaults(func=cmd_validate)

    i = sub.add_parser("import-csv", help="create site detail files from a CSV export")
    i.add_argument("csv_path")
    i.add_argument("--build", action="store_true", help="regenerate sites afterwards")
    i.add_argument("--skip-metrics", action="store_true")
    i.set_defaults(func=cmd_import_csv)

    c = sub.add_parser("cleanup", help="remove detail files named after leaked text")
    c.add_argument("--kind", choices=sorted(CATALOG_KINDS), default="sites")
    c.add_argument("--apply", action="store_true", help="delete instead of listing")
    c.set_defaults(func=cmd_cleanup)

    a = sub.add_parser("audit-links", help="check channel URLs")
    a.add_argument("--kind", choices=sorted(CATALOG_KINDS), default="sites")
    a.add_argument("--concurrency", type=int, default=MAX_CONCURRENT_LINKS)
    a.set_defaults(func=cmd_audit_links)

    m = sub.add_parser("metrics", help="rebuild metrics.json from run history")
    m.set_defaults(func=cmd_metrics)

    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    start = time.time()

    cfg = load_locales_config(args.root)
    override = [s.strip() for s in args.locales.split(",") if s.strip()] if args.locales else None
    locales = resolved_enabled_locales(cfg, override)
    if not locales:
        logger.error("No locales to process. Exiting.")
        return EXIT_FAILED
    default_locale = cfg["default"]
    # list files are always merged from every configured locale
    args.configured_locales = resolved_enabled_locales(cfg)

    try:
        code = args.func(args, args.root, locales, default_locale)
    except LockBusyError as e:
        logger.error("❌ %s", e)
        return EXIT_LOCKED
    except CatalogError as e:
        logger.error("❌ Fatal error: %s", e)
        return EXIT_FAILED

    logger.info("All done: %s finished in %.2fs", args.command, time.time() - start)
    return code


if __name__ == "__main__":
    sys.exit(main())
