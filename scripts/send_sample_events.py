#!/usr/bin/env python3
"""Sample event harness for end-to-end validation.

This script routes a set of sample order events through the event router
without a broker. It can operate in two modes:

1. Recording mode (default): providers are recording stubs, nothing is sent
2. Live mode: providers are built from the configuration and send for real

Usage:
    # Render and route sample events (no network required)
    python scripts/send_sample_events.py --email customer@example.com

    # Send through the configured vendors (requires credentials)
    SAMPLE_EVENTS_LIVE=1 python scripts/send_sample_events.py --config config.yaml --email you@example.com
"""

import argparse
import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from notification_service.config.loader import load_config
from notification_service.config.models import FrontendConfig
from notification_service.events import ContentBuilder, EventRouter
from notification_service.logging.config import configure_logging
from notification_service.main import build_manager
from notification_service.notifications import (
    EmailStrategy,
    NotificationManager,
    PushStrategy,
    SmsStrategy,
)
from tests.helpers import RecordingProvider, make_record


def sample_events(email: str, phone: str, channel: str):
    """Sample order events covering every supported event name."""
    base = {
        "_id": "665f1c2ab8e4d2a1ORD12345",
        "customerName": "John Doe",
        "customerEmail": email,
        "customerPhone": phone,
        "preferredChannel": channel,
    }
    return [
        {"event": "order-created", "data": {**base, "finalTotal": 499}},
        {"event": "order-status-updated", "data": {**base, "status": "out_for_delivery"}},
        {"event": "order-payment-completed", "data": {**base, "total": 499}},
        {"event": "order-payment-refunded", "data": {**base, "finalTotal": 250.5}},
        {"event": "order-deleted", "data": base},
    ]


def print_header(title: str):
    """Print a formatted section header."""
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def main():
    """Main entry point for the sample event harness."""
    parser = argparse.ArgumentParser(
        description="Route sample order events through the notification pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration file (live mode, optional otherwise)")
    parser.add_argument("--email", default="customer@example.com", help="Recipient email address")
    parser.add_argument("--phone", default="+919876543210", help="Recipient phone number")
    parser.add_argument("--channel", default="email", choices=["email", "sms", "push"], help="Preferred channel")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()

    load_dotenv()
    live = os.environ.get("SAMPLE_EVENTS_LIVE", "0") == "1"

    print_header("Order Notification Service - Sample Event Harness")
    configure_logging(level=args.log_level, format_type="key-value", environment="validation")

    recorders = {}
    if live:
        print("⚠️  LIVE MODE ENABLED: notifications will be sent through the configured vendors.")
        response = input("\nContinue? [y/N]: ")
        if response.lower() != "y":
            print("Aborted.")
            return 1
        app_config, env_config = load_config(args.config)
        frontend = app_config.frontend
        manager = build_manager(app_config, env_config)
    else:
        frontend = FrontendConfig(url="http://localhost:3000")
        if args.config:
            app_config, _ = load_config(args.config)
            frontend = app_config.frontend
        recorders = {
            "email": RecordingProvider("stub-email"),
            "sms": RecordingProvider("stub-sms"),
            "push": RecordingProvider("stub-push"),
        }
        manager = NotificationManager(
            strategies=[
                EmailStrategy(recorders["email"]),
                SmsStrategy(recorders["sms"]),
                PushStrategy(recorders["push"]),
            ]
        )

    router = EventRouter(manager, ContentBuilder(frontend))

    for offset, event in enumerate(sample_events(args.email, args.phone, args.channel), start=1):
        print(f"📦 {event['event']}")
        router.handle(make_record(event, offset=offset))

    if recorders:
        print_header("Recorded Notifications")
        for channel, provider in recorders.items():
            for payload in provider.calls:
                title = getattr(payload, "subject", None) or getattr(payload, "title", None) or payload.body[:60]
                print(f"[{channel}] to={payload.to} :: {title}")

    print("\n✅ All sample events routed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
