"""Main entry point for the order notification service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from notification_service.config.environment import EnvironmentConfig
from notification_service.config.exceptions import ConfigurationError
from notification_service.config.loader import load_config
from notification_service.config.models import AppConfig
from notification_service.consumer import StreamConsumer, StreamConsumerError
from notification_service.events import ContentBuilder, EventRouter
from notification_service.logging import get_logger
from notification_service.logging.config import configure_logging
from notification_service.notifications import (
    EmailStrategy,
    NotificationManager,
    PushStrategy,
    SmsStrategy,
    TemplateRenderer,
)
from notification_service.notifications.providers import (
    get_email_provider,
    get_push_provider,
    get_sms_provider,
)

logger = get_logger(__name__, component="cli")


@dataclass
class Application:
    """Wired service components."""

    manager: NotificationManager
    router: EventRouter
    consumer: StreamConsumer


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def build_manager(app_config: AppConfig, env_config: EnvironmentConfig) -> NotificationManager:
    """Build providers for each channel and register their strategies."""
    notifications = app_config.notifications
    return NotificationManager(
        strategies=[
            EmailStrategy(get_email_provider(notifications, env_config)),
            SmsStrategy(get_sms_provider(notifications, env_config)),
            PushStrategy(get_push_provider(notifications, env_config)),
        ]
    )


def build_application(
    app_config: AppConfig,
    env_config: EnvironmentConfig,
    manager: Optional[NotificationManager] = None,
    consumer: Optional[StreamConsumer] = None,
) -> Application:
    """Construct every component once and wire them together explicitly."""
    manager = manager or build_manager(app_config, env_config)
    router = EventRouter(
        manager=manager,
        content_builder=ContentBuilder(app_config.frontend, TemplateRenderer()),
    )
    consumer = consumer or StreamConsumer(
        app_config.kafka,
        sasl_username=env_config.kafka_sasl_username,
        sasl_password=env_config.kafka_sasl_password,
    )
    return Application(manager=manager, router=router, consumer=consumer)


def _safe_disconnect(consumer: StreamConsumer) -> None:
    try:
        consumer.disconnect()
    except Exception as e:
        logger.warning(
            f"Error during disconnect: {e}",
            extra={"event": "service.disconnect.failed", "error_type": type(e).__name__},
        )


def run(app: Application, topics: Optional[List[str]] = None, from_beginning: Optional[bool] = None) -> int:
    """
    Connect, subscribe and consume until a shutdown signal arrives.

    Returns:
        Exit code (0 after an orderly shutdown, 1 if the broker session fails)
    """
    consumer = app.consumer

    try:
        consumer.connect()
        consumer.subscribe(topics, from_beginning)
    except StreamConsumerError as e:
        logger.error(
            f"Failed to start consumer: {e}",
            extra={"event": "service.startup.failed", "error_type": type(e).__name__},
        )
        _safe_disconnect(consumer)
        return 1

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        consumer.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    exit_code = 0
    try:
        consumer.consume(app.router.handle)
    except StreamConsumerError as e:
        logger.error(
            f"Consumer stopped with a fatal error: {e}",
            extra={"event": "service.consumer.failed", "error_type": type(e).__name__},
        )
        exit_code = 1
    except KeyboardInterrupt:
        logger.info(
            "Keyboard interrupt received, shutting down",
            extra={"event": "service.keyboard_interrupt"},
        )
    finally:
        _safe_disconnect(consumer)

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the notification service.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    parser = argparse.ArgumentParser(
        description="Order Notification Service - routes order events to email, SMS and push"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--from-beginning",
        action="store_true",
        default=None,
        help="Start partitions without a committed offset at the earliest record",
    )
    parser.add_argument(
        "--topic",
        dest="topics",
        action="append",
        default=None,
        help="Topic to subscribe to (repeatable; overrides kafka.topics)",
    )

    args = parser.parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
            silent=app_config.logging.silent,
            directory=app_config.logging.directory,
        )

        logger.info(
            "Notification service starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
            },
        )

        app = build_application(app_config, env_config)

        logger.info(
            "Services initialized",
            extra={
                "event": "services.initialized",
                "email_provider": app_config.notifications.email.provider,
                "sms_provider": app_config.notifications.sms.provider,
                "push_provider": app_config.notifications.push.provider,
            },
        )

        exit_code = run(app, topics=args.topics, from_beginning=args.from_beginning)

        logger.info(
            "Notification service stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
                "exit_code": exit_code,
            },
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
