import argparse
import logging
import sys

import yaml

from .alerts import LoggingAlertSink
from .config import CONFIG
from .logging_utils import setup_logging
from .notifier import BackgroundProximityMonitor
from .pipeline import IntersectionPipeline
from .settings import get_settings, update_settings
from .storage import JsonFileStore

logger = logging.getLogger(__name__)


def _resolve_position(args):
    if args.lat is not None and args.lon is not None:
        return args.lon, args.lat
    from .location import get_current_location
    lat, lon = get_current_location()
    logger.info(f"Using approximate IP location lat={lat:.6f} lon={lon:.6f}")
    return lon, lat


def cmd_scan(args, store) -> int:
    if args.features:
        from .fetch import GeoJsonFeatureProvider
        provider = GeoJsonFeatureProvider(args.features)
    else:
        from .fetch import OsmFeatureProvider
        provider = OsmFeatureProvider()
    lon, lat = _resolve_position(args)
    pipeline = IntersectionPipeline(provider, store, alerts=LoggingAlertSink(), half_size_m=args.radius)
    pipeline.on_map_ready()
    result = pipeline.on_location(lon, lat)
    if result is None:
        print(yaml.dump({"status": "skipped"}, sort_keys=False))
        return 1
    summary = {
        "status": "ok",
        "region": [round(v, 6) for v in result.region],
        "roads": result.roads,
        "lines": result.lines,
        "alerted": result.alerted,
        "points": [p.to_dict() for p in result.points],
    }
    print(yaml.dump(summary, sort_keys=False))
    if args.map:
        from .visualize import save_map
        path = save_map(result.points, args.map, user=(lon, lat))
        logger.info(f"Map saved to {path}")
    return 0


def cmd_check(args, store) -> int:
    lon, lat = _resolve_position(args)
    monitor = BackgroundProximityMonitor(store, alerts=LoggingAlertSink())
    fired = monitor.process_location_update(lon, lat)
    print(yaml.dump({"alerted": fired}, sort_keys=False))
    return 0


def cmd_settings(args, store) -> int:
    if args.set:
        changes = {}
        for item in args.set:
            key, sep, value = item.partition("=")
            if not sep:
                print(f"Expected key=value, got {item!r}", file=sys.stderr)
                return 2
            changes[key.strip()] = yaml.safe_load(value)
        settings = update_settings(store, **changes)
    else:
        settings = get_settings(store)
    print(yaml.dump(settings.to_dict(), sort_keys=False))
    return 0


def cmd_locate(args, store) -> int:
    from .location import get_area_info
    print(yaml.dump(get_area_info(), sort_keys=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="junction_alert", description="Branching-intersection detection and proximity alerts.")
    parser.add_argument("--store", default=CONFIG["storage"]["path"], help="JSON file used for cache, settings and alert state")
    parser.add_argument("--log-level", default=CONFIG["logging"]["level"])
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Detect intersections around a position and cache them")
    scan.add_argument("--lat", type=float)
    scan.add_argument("--lon", type=float)
    scan.add_argument("--radius", type=float, default=None, help="Half size of the query box in meters")
    scan.add_argument("--features", help="Local GeoJSON FeatureCollection instead of OpenStreetMap")
    scan.add_argument("--map", help="Write an HTML map of the detected points")
    scan.set_defaults(func=cmd_scan)

    check = sub.add_parser("check", help="Background proximity check against cached intersections")
    check.add_argument("--lat", type=float)
    check.add_argument("--lon", type=float)
    check.set_defaults(func=cmd_check)

    settings = sub.add_parser("settings", help="Show or update notification settings")
    settings.add_argument("--set", action="append", metavar="KEY=VALUE")
    settings.set_defaults(func=cmd_settings)

    locate = sub.add_parser("locate", help="Print the approximate current location")
    locate.set_defaults(func=cmd_locate)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    return args.func(args, JsonFileStore(args.store))


if __name__ == "__main__":
    sys.exit(main())
