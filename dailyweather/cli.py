"""CLI entry point for the daily weather cache."""

import argparse
import asyncio
import logging
from datetime import timedelta

from dailyweather.config.defaults import get_preset
from dailyweather.config.loader import get_config_value, load_config
from dailyweather.config.schema import AppConfig, LocationConfig
from dailyweather.ingest.daily_source import OpenMeteoDailySource
from dailyweather.ingest.open_meteo_client import OpenMeteoClient
from dailyweather.ingest.staleness import fetch_age_minutes
from dailyweather.pipeline.daily_weather_manager import DailyWeatherDataManager
from dailyweather.reporting.formatters import format_week_json, format_week_text
from dailyweather.storage.local_store import SqliteDailyWeatherStore

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "configs/default.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="dailyweather",
        description="Rolling 7-day weather cache",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument("--db", default=None, help="SQLite DB path (overrides config)")

    sub = parser.add_subparsers(dest="command")

    # week
    week_p = sub.add_parser("week", help="Show the current 7-day window")
    week_p.add_argument("--preset", help="Use a preset location by slug")
    week_p.add_argument("--json", action="store_true", help="Print JSON")

    # watch
    watch_p = sub.add_parser("watch", help="Keep the window fresh and print changes")
    watch_p.add_argument("--preset", help="Use a preset location by slug")
    watch_p.add_argument(
        "--interval", type=int, default=None, help="Seconds between refresh checks"
    )

    # config show / config get
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    get_p = config_sub.add_parser("get", help="Print a config value")
    get_p.add_argument("key", help="Dotted key, e.g. sync.refresh_interval_minutes")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: could not load config {args.config}: {e}")
        return 1

    if args.command == "week":
        return _cmd_week(config, args)
    elif args.command == "watch":
        return _cmd_watch(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


async def build_manager(
    config: AppConfig, location: LocationConfig, db_path: str | None = None
) -> DailyWeatherDataManager:
    """Wire the manager to Open-Meteo and the SQLite store on the running loop."""
    om = config.open_meteo
    client = OpenMeteoClient(
        base_url=om.base_url,
        user_agent=om.user_agent,
        timeout=om.timeout,
        max_retries=om.max_retries,
        retry_base_delay=om.retry_base_delay,
    )
    store = await SqliteDailyWeatherStore.open(db_path or config.storage.db_path)
    return DailyWeatherDataManager(
        context=location.to_context(),
        server=OpenMeteoDailySource(client),
        store=store,
        refresh_interval=timedelta(minutes=config.sync.refresh_interval_minutes),
    )


def _resolve_location(config: AppConfig, args) -> LocationConfig | None:
    if args.preset:
        try:
            return get_preset(args.preset)
        except KeyError as e:
            print(f"Error: {e.args[0]}")
            return None
    assert config.location is not None
    return config.location


def _cmd_week(config: AppConfig, args) -> int:
    location = _resolve_location(config, args)
    if location is None:
        return 1

    async def _run() -> DailyWeatherDataManager:
        manager = await build_manager(config, location, args.db)
        await manager.wait_until_idle()
        return manager

    manager = asyncio.run(_run())
    days = manager.daily_weather
    if args.json:
        print(format_week_json(manager.timestamps, days, manager.timezone))
    else:
        print(f"{location.name}")
        print(format_week_text(manager.timestamps, days, manager.timezone))
        print(f"Last fetch: {fetch_age_minutes(manager.last_fetch_date):.0f} min ago")
    return 0 if any(d is not None for d in days) else 1


class _WeekPrinter:
    """Prints the window every time the manager reports a change."""

    def __init__(self, manager: DailyWeatherDataManager, title: str):
        self.manager = manager
        self.title = title

    def daily_weather_changed(self) -> None:
        days = self.manager.daily_weather
        if not any(d is not None for d in days):
            return
        print(self.title)
        print(format_week_text(self.manager.timestamps, days, self.manager.timezone))


def _cmd_watch(config: AppConfig, args) -> int:
    location = _resolve_location(config, args)
    if location is None:
        return 1
    interval = args.interval or config.sync.watch_interval_seconds

    async def _run() -> None:
        manager = await build_manager(config, location, args.db)
        printer = _WeekPrinter(manager, location.name)
        manager.add_listener(printer)
        logger.info("Watching %s, checking every %ds", location.name, interval)
        try:
            while True:
                await asyncio.sleep(interval)
                if manager.refetch_data_if_needed():
                    logger.info("Refresh due, fetching from Open-Meteo")
        finally:
            manager.remove_listener(printer)

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        print("\nStopped watching")
    return 0


def _cmd_config(config: AppConfig, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "get":
        try:
            value = get_config_value(config, args.key)
        except (KeyError, IndexError, ValueError) as e:
            print(f"Error: {e}")
            return 1
        print(value)
        return 0
    else:
        print("Use: config show | config get KEY")
        return 1
