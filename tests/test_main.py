"""Unit tests for the main entry point.

Tests the main() function including:
- CLI argument parsing
- Configuration loading with priority (CLI > env > config)
- Logging configuration
- Component wiring
- Consumer startup, shutdown signals and exit codes
- Error handling
"""

import signal
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest

from notification_service.config.environment import EnvironmentConfig
from notification_service.config.exceptions import ConfigurationError
from notification_service.config.models import AppConfig, FrontendConfig, KafkaConfig, LoggingConfig
from notification_service.consumer import ConsumerConnectionError, ConsumerSubscriptionError, StreamConsumer
from notification_service.main import (
    Application,
    build_application,
    build_manager,
    load_runtime_config,
    main,
    run,
)
from notification_service.notifications import Channel, NotificationManager


@pytest.fixture
def app_config():
    return AppConfig(
        kafka=KafkaConfig(brokers=["localhost:9092"]),
        frontend=FrontendConfig(url="https://pizza.example.com"),
        logging=LoggingConfig(level="WARNING"),
    )


@pytest.fixture
def consumer():
    return Mock(spec=StreamConsumer)


@pytest.fixture
def application(consumer):
    return Application(manager=Mock(spec=NotificationManager), router=MagicMock(), consumer=consumer)


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config helper."""

    def test_log_level_priority(self, app_config):
        """CLI beats environment, environment beats config file."""
        with patch("notification_service.main.load_config") as mock_load:
            mock_load.return_value = (app_config, EnvironmentConfig(log_level="ERROR"))
            _, env_config = load_runtime_config(Path("config.yaml"), "DEBUG")
            assert env_config.log_level == "DEBUG"

            mock_load.return_value = (app_config, EnvironmentConfig(log_level="ERROR"))
            _, env_config = load_runtime_config(Path("config.yaml"), None)
            assert env_config.log_level == "ERROR"

            mock_load.return_value = (app_config, EnvironmentConfig())
            _, env_config = load_runtime_config(Path("config.yaml"), None)
            assert env_config.log_level == "WARNING"

    def test_passes_config_path(self, app_config):
        with patch("notification_service.main.load_config") as mock_load:
            mock_load.return_value = (app_config, EnvironmentConfig())

            load_runtime_config(Path("custom.yaml"), None)

            mock_load.assert_called_once_with(Path("custom.yaml"))


class TestWiring:
    def test_build_manager_registers_every_channel(self, app_config):
        manager = build_manager(app_config, EnvironmentConfig())

        for channel in Channel:
            strategy = manager.get_strategy(channel)
            assert strategy is not None
            assert strategy.get_provider() is not None

    def test_build_application_uses_kafka_settings(self, app_config):
        app = build_application(
            app_config,
            EnvironmentConfig(kafka_sasl_username="svc", kafka_sasl_password="pw"),
        )

        assert app.consumer.config is app_config.kafka
        assert app.consumer.sasl_username == "svc"
        assert app.router.manager is app.manager

    def test_build_application_accepts_overrides(self, app_config, consumer):
        manager = NotificationManager()

        app = build_application(app_config, EnvironmentConfig(), manager=manager, consumer=consumer)

        assert app.manager is manager
        assert app.consumer is consumer


class TestRun:
    @patch("signal.signal")
    def test_orderly_shutdown(self, mock_signal, application, consumer):
        exit_code = run(application, topics=["order"], from_beginning=True)

        assert exit_code == 0
        consumer.connect.assert_called_once()
        consumer.subscribe.assert_called_once_with(["order"], True)
        consumer.consume.assert_called_once_with(application.router.handle)
        consumer.disconnect.assert_called_once()

    @patch("signal.signal")
    def test_signal_handlers_stop_consumer(self, mock_signal, application, consumer):
        run(application)

        handlers = {call_args[0][0]: call_args[0][1] for call_args in mock_signal.call_args_list}
        assert set(handlers) == {signal.SIGINT, signal.SIGTERM}

        handlers[signal.SIGTERM](signal.SIGTERM, None)
        consumer.stop.assert_called_once()

    @patch("signal.signal")
    def test_connect_failure(self, mock_signal, application, consumer):
        consumer.connect.side_effect = ConsumerConnectionError("Failed to connect to Kafka at localhost:9092")

        assert run(application) == 1
        consumer.consume.assert_not_called()
        consumer.disconnect.assert_called_once()
        mock_signal.assert_not_called()

    @patch("signal.signal")
    def test_subscribe_failure(self, mock_signal, application, consumer):
        consumer.subscribe.side_effect = ConsumerSubscriptionError("Failed to subscribe to order")

        assert run(application) == 1
        consumer.consume.assert_not_called()

    @patch("signal.signal")
    def test_fatal_consumer_error(self, mock_signal, application, consumer):
        consumer.consume.side_effect = ConsumerConnectionError("Fatal Kafka error")

        assert run(application) == 1
        consumer.disconnect.assert_called_once()

    @patch("signal.signal")
    def test_keyboard_interrupt(self, mock_signal, application, consumer):
        consumer.consume.side_effect = KeyboardInterrupt()

        assert run(application) == 0
        consumer.disconnect.assert_called_once()

    @patch("signal.signal")
    def test_disconnect_error_is_not_fatal(self, mock_signal, application, consumer):
        consumer.disconnect.side_effect = RuntimeError("already closed")

        assert run(application) == 0


class TestMain:
    """Test suite for main() function."""

    @patch("notification_service.main.run")
    @patch("notification_service.main.build_application")
    @patch("notification_service.main.configure_logging")
    @patch("notification_service.main.load_runtime_config")
    def test_main_success(self, mock_load_config, mock_configure_logging, mock_build, mock_run, app_config):
        env_config = EnvironmentConfig(log_level="INFO", environment="staging")
        mock_load_config.return_value = (app_config, env_config)
        mock_run.return_value = 0

        exit_code = main(["--config", "config.yaml", "--topic", "order", "--topic", "refunds", "--from-beginning"])

        assert exit_code == 0
        mock_load_config.assert_called_once_with(Path("config.yaml"), None)
        mock_configure_logging.assert_called_once_with(
            level="INFO",
            format_type="key-value",
            environment="staging",
            silent=False,
            directory=None,
        )
        mock_build.assert_called_once_with(app_config, env_config)
        mock_run.assert_called_once_with(mock_build.return_value, topics=["order", "refunds"], from_beginning=True)

    @patch("notification_service.main.run")
    @patch("notification_service.main.build_application")
    @patch("notification_service.main.configure_logging")
    @patch("notification_service.main.load_runtime_config")
    def test_main_defaults(self, mock_load_config, mock_configure_logging, mock_build, mock_run, app_config):
        mock_load_config.return_value = (app_config, EnvironmentConfig(log_level="INFO"))
        mock_run.return_value = 1

        assert main([]) == 1
        mock_load_config.assert_called_once_with(None, None)
        mock_run.assert_called_once_with(mock_build.return_value, topics=None, from_beginning=None)

    @patch("notification_service.main.load_runtime_config")
    def test_main_configuration_error(self, mock_load_config, capsys):
        mock_load_config.side_effect = ConfigurationError("Configuration file not found: nonexistent.yaml")

        exit_code = main(["--config", "nonexistent.yaml"])

        assert exit_code == 1
        assert "Configuration Error" in capsys.readouterr().err

    @patch("notification_service.main.configure_logging")
    @patch("notification_service.main.load_runtime_config")
    def test_main_unexpected_error(self, mock_load_config, mock_configure_logging, app_config, capsys):
        mock_load_config.return_value = (app_config, EnvironmentConfig(log_level="INFO"))
        with patch("notification_service.main.build_application", side_effect=RuntimeError("boom")):
            exit_code = main([])

        assert exit_code == 1
        assert "Fatal error: boom" in capsys.readouterr().err

    def test_main_rejects_invalid_log_level(self):
        with pytest.raises(SystemExit):
            main(["--log-level", "VERBOSE"])
