"""Unit tests for src/api/main.py."""

import pytest
from fastapi import FastAPI
from pytest_mock import MockerFixture

from src.api.main import create_app, lifespan, should_report_configuration
from src.core.config import ReportConfig, Settings


@pytest.mark.unit
class TestShouldReportConfiguration:
    """Test the report activation decision."""

    @pytest.mark.parametrize(
        ("environment", "profiles", "report_config", "expected"),
        [
            ("development", [], ReportConfig(), True),
            ("production", ["prod"], ReportConfig(), True),
            ("development", ["test"], ReportConfig(), False),
            ("development", ["prod", "test"], ReportConfig(), False),
            ("test", [], ReportConfig(), False),
            ("development", [], ReportConfig(enabled=False), False),
            ("development", ["ci"], ReportConfig(suppressed_profiles=["ci"]), False),
            ("test", [], ReportConfig(suppressed_profiles=[]), True),
        ],
    )
    def test_decision(
        self,
        environment: str,
        profiles: list[str],
        report_config: ReportConfig,
        expected: bool,
    ) -> None:
        """Disabled reports and suppressed profiles skip the report."""
        settings = Settings(
            environment=environment,  # type: ignore[arg-type]
            active_profiles=profiles,
            report_config=report_config,
        )

        assert should_report_configuration(settings) is expected


@pytest.mark.unit
class TestLifespan:
    """Test the startup hook."""

    async def test_reports_after_startup(self, mocker: MockerFixture) -> None:
        """The report runs once with the service environment."""
        mock_reporter_cls = mocker.patch("src.api.main.StartupConfigReporter")
        mock_build = mocker.patch("src.api.main.build_environment")
        mock_logger = mocker.patch("src.api.main.logger")
        test_app = FastAPI(title="Test App", version="1.0.0")

        async with lifespan(test_app):
            mock_logger.info.assert_any_call(
                "Application startup complete - {} v{}",
                "Test App",
                "1.0.0",
            )
            mock_reporter_cls.return_value.report.assert_called_once_with(
                mock_build.return_value
            )

        mock_logger.info.assert_any_call("Application shutdown complete")

    async def test_report_suppressed_in_test_profile(
        self, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """No report is produced when the test profile is active."""
        monkeypatch.setenv("ACTIVE_PROFILES", "test")
        mock_reporter_cls = mocker.patch("src.api.main.StartupConfigReporter")
        mock_build = mocker.patch("src.api.main.build_environment")
        mock_logger = mocker.patch("src.api.main.logger")

        async with lifespan(FastAPI()):
            pass

        mock_reporter_cls.assert_not_called()
        mock_build.assert_not_called()
        mock_logger.debug.assert_called_once_with(
            "Configuration report suppressed for this environment"
        )

    async def test_disabled_report_of_created_app(self, mocker: MockerFixture) -> None:
        """Settings given to create_app decide the report, not cached ones."""
        mocker.patch("src.api.main.setup_logging")
        mock_get_settings = mocker.patch("src.api.main.get_settings")
        mock_reporter_cls = mocker.patch("src.api.main.StartupConfigReporter")
        application = create_app(
            Settings(report_config=ReportConfig(enabled=False))
        )

        async with lifespan(application):
            pass

        mock_get_settings.assert_not_called()
        mock_reporter_cls.assert_not_called()

    async def test_report_uses_settings_of_created_app(
        self, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The environment is built from the app's own settings."""
        monkeypatch.setenv("ACTIVE_PROFILES", "test")
        mocker.patch("src.api.main.setup_logging")
        mock_reporter_cls = mocker.patch("src.api.main.StartupConfigReporter")
        mock_build = mocker.patch("src.api.main.build_environment")
        settings = Settings(active_profiles=["prod"])
        application = create_app(settings)

        async with lifespan(application):
            pass

        assert application.state.settings is settings
        mock_build.assert_called_once_with(settings)
        mock_reporter_cls.return_value.report.assert_called_once_with(
            mock_build.return_value
        )


@pytest.mark.unit
class TestCreateApp:
    """Test the application factory."""

    def test_uses_settings(self, mocker: MockerFixture, mock_settings: Settings) -> None:
        """Title, version and docs come from settings; logging is set up."""
        mock_setup_logging = mocker.patch("src.api.main.setup_logging")

        application = create_app(mock_settings)

        mock_setup_logging.assert_called_once_with(mock_settings)
        assert application.title == "TestApp"
        assert application.version == "1.0.0"
        assert application.docs_url == "/docs"

    def test_defaults_to_cached_settings(self, mocker: MockerFixture) -> None:
        """Without arguments the cached settings are used."""
        mocker.patch("src.api.main.setup_logging")
        mock_get_settings = mocker.patch("src.api.main.get_settings")
        mock_get_settings.return_value = Settings(app_name="Cached")

        application = create_app()

        mock_get_settings.assert_called_once()
        assert application.title == "Cached"
