"""CLI entry point for turnero."""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import signal
import sys
from pathlib import Path

from . import __version__

MINIMAL_CONFIG = """business:
  name: "Mi Negocio"

slots:
  opening_time: "09:00"
  closing_time: "19:00"
  step_minutes: 30

channels:
  telegram:
    enabled: true
    bot_token: "${TELEGRAM_BOT_TOKEN}"

services:
  - name: "Corte clásico"
    duration_minutes: 30
    price: 5000
"""


def _setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def _open_store(config, seed: bool = True):
    """Connect the database and, unless seed is False, add missing catalog services."""
    from .database import Database
    from .models import Service

    db = Database(config.database.path)
    db.connect()
    if not seed:
        return db
    db.seed_services([
        Service(
            id="",
            name=svc.name,
            description=svc.description,
            duration_minutes=svc.duration_minutes,
            price=svc.price,
        )
        for svc in config.services
    ])
    return db


def cmd_init(args: argparse.Namespace) -> None:
    """Initialize turnero configuration in the current directory."""
    config_dest = Path("config.yaml")
    env_dest = Path(".env")

    pkg_dir = Path(__file__).parent.parent.parent  # src/turnero -> project root
    config_src = pkg_dir / "config.example.yaml"
    env_src = pkg_dir / ".env.example"

    if config_dest.exists() and not args.force:
        print("config.yaml already exists. Use --force to overwrite.")
    else:
        if config_src.exists():
            shutil.copy(config_src, config_dest)
        else:
            config_dest.write_text(MINIMAL_CONFIG, encoding="utf-8")
        print(f"Created {config_dest}")

    if env_dest.exists() and not args.force:
        print(".env already exists. Use --force to overwrite.")
    else:
        if env_src.exists():
            shutil.copy(env_src, env_dest)
        else:
            env_dest.write_text("TELEGRAM_BOT_TOKEN=...\nANTHROPIC_API_KEY=\n", encoding="utf-8")
        print(f"Created {env_dest}")

    print("\nNext steps:")
    print("  1. Edit config.yaml with your business and services")
    print("  2. Edit .env with your bot token")
    print("  3. Run: turnero check")
    print("  4. Run: turnero run")


def cmd_check(args: argparse.Namespace) -> None:
    """Check config, database, classifier and channels."""
    from .config import load_config
    from .llm.classifier import build_classifier

    print(f"turnero v{__version__}: connection check\n")

    try:
        config = load_config(args.config)
        print(f"[OK] Config loaded from {args.config}")
    except Exception as e:
        print(f"[FAIL] Config: {e}")
        sys.exit(1)

    try:
        db = _open_store(config, seed=False)
        services = db.list_services()
        print(f"[OK] Database {config.database.path}: {len(services)} service(s) stored")
        db.close()
    except Exception as e:
        print(f"[FAIL] Database: {e}")

    try:
        classifier = build_classifier(config.classifier, config.business.name)
        if classifier:
            print(f"[OK] Intent classifier: {config.classifier.provider} ({config.classifier.model})")
        else:
            print("[--] Intent classifier: disabled (typed commands only)")
    except Exception as e:
        print(f"[FAIL] Intent classifier: {e}")

    for name, ch_config in config.channels.items():
        if not ch_config.enabled:
            print(f"[--] Channel {name}: disabled")
        elif name == "telegram":
            token = ch_config.get("bot_token", "")
            if token and not token.startswith("$"):
                print(f"[OK] Channel {name}: token configured")
            else:
                print(f"[WARN] Channel {name}: enabled but token not set")
        else:
            print(f"[OK] Channel {name}: enabled")


def cmd_services(args: argparse.Namespace) -> None:
    """List the service catalog."""
    from .config import load_config

    config = load_config(args.config)
    db = _open_store(config)
    try:
        services = db.list_services()
        if not services:
            print("No services configured.")
            return
        for svc in services:
            duration = f"{svc.duration_minutes} min" if svc.duration_minutes is not None else "-"
            price = f"{svc.price:.2f}" if svc.price is not None else "-"
            print(f"  {svc.name:<30} {duration:>8} {price:>10}")
    finally:
        db.close()


def cmd_bookings(args: argparse.Namespace) -> None:
    """List bookings or delete one by id."""
    from .config import load_config
    from .core.registry import BookingRegistry
    from .errors import BookingError

    config = load_config(args.config)
    db = _open_store(config)
    registry = BookingRegistry(db)
    try:
        if args.action == "delete":
            registry.delete(args.booking_id)
            print(f"Deleted booking {args.booking_id}")
            return

        bookings = registry.list()
        if not bookings:
            print("No bookings yet.")
            return
        for b in bookings:
            print(f"  {b.date} {b.time}  {b.service:<24} {b.name} ({b.phone})  [{b.id}]")
        print(f"\nTotal: {len(bookings)} booking(s)")
    except BookingError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()


def cmd_slots(args: argparse.Namespace) -> None:
    """Show free grid times for a date and service."""
    from .config import load_config
    from .core.availability import AvailabilitySuggester
    from .core.registry import BookingRegistry

    config = load_config(args.config)
    db = _open_store(config)
    try:
        service = db.find_service_by_name(args.service)
        if service is None:
            print(f"Unknown service: {args.service}")
            sys.exit(1)
        registry = BookingRegistry(db)
        suggester = AvailabilitySuggester(config.slots, registry)
        free = [
            t for t in suggester.daily_grid(args.date)
            if registry.is_slot_available(args.date, t, service.name)
        ]
        if not free:
            print(f"No free slots for {service.name} on {args.date}.")
            return
        print(f"Free slots for {service.name} on {args.date}:\n")
        for t in free:
            print(f"  {t}")
    finally:
        db.close()


def cmd_run(args: argparse.Namespace) -> None:
    """Run the booking bot."""
    from .config import load_config

    config = load_config(args.config)
    _setup_logging(args.verbose)
    asyncio.run(_run_bot(config))


async def _run_bot(config) -> None:
    """Create -> start -> serve -> stop every enabled channel session."""
    from .core.engine import BookingEngine
    from .llm.classifier import build_classifier

    db = _open_store(config)
    classifier = build_classifier(config.classifier, config.business.name)
    engine = BookingEngine(config, db, classifier)

    adapters = []
    for name, ch_config in config.channels.items():
        if not ch_config.enabled:
            continue
        adapter = _build_channel(name, ch_config.extra, engine.handle_message)
        if adapter:
            adapters.append(adapter)

    if not adapters:
        print("No channels enabled. Enable at least one channel in config.yaml.")
        db.close()
        sys.exit(1)

    print(f"Starting {len(adapters)} channel(s): {', '.join(a.name for a in adapters)}")

    stop_event = asyncio.Event()

    def signal_handler():
        print("\nShutting down...")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        for adapter in adapters:
            await adapter.start()
        await stop_event.wait()
    finally:
        for adapter in adapters:
            try:
                await adapter.stop()
            except Exception as e:
                logging.getLogger(__name__).error(f"Error stopping {adapter.name}: {e}")
        db.close()


def _build_channel(name, config_extra, on_message):
    """Build channel adapter by name."""
    if name == "telegram":
        from .channels.telegram import TelegramAdapter
        return TelegramAdapter(config_extra, on_message)
    elif name == "web":
        from .channels.web import WebAdapter
        return WebAdapter(config_extra, on_message)
    else:
        print(f"[WARN] Unknown channel: {name}")
        return None


def main():
    parser = argparse.ArgumentParser(
        prog="turnero",
        description="Chat booking assistant for appointment-based businesses",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    init_parser = subparsers.add_parser("init", help="Initialize configuration")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing files")

    check_parser = subparsers.add_parser("check", help="Check config, database and channels")
    check_parser.add_argument("-c", "--config", default="config.yaml", help="Config file path")

    run_parser = subparsers.add_parser("run", help="Run the bot")
    run_parser.add_argument("-c", "--config", default="config.yaml", help="Config file path")
    run_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    services_parser = subparsers.add_parser("services", help="List services")
    services_parser.add_argument("-c", "--config", default="config.yaml", help="Config file path")

    bookings_parser = subparsers.add_parser("bookings", help="List or delete bookings")
    bookings_parser.add_argument("-c", "--config", default="config.yaml", help="Config file path")
    bookings_sub = bookings_parser.add_subparsers(dest="action")
    bookings_sub.add_parser("list", help="List bookings by date and time")
    delete_parser = bookings_sub.add_parser("delete", help="Delete a booking")
    delete_parser.add_argument("booking_id", help="Booking id")

    slots_parser = subparsers.add_parser("slots", help="Show free slots for a date and service")
    slots_parser.add_argument("date", help="YYYY-MM-DD")
    slots_parser.add_argument("service", help="Service name")
    slots_parser.add_argument("-c", "--config", default="config.yaml", help="Config file path")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(0)

    commands = {
        "init": cmd_init,
        "check": cmd_check,
        "run": cmd_run,
        "services": cmd_services,
        "bookings": cmd_bookings,
        "slots": cmd_slots,
    }
    commands[args.command](args)
