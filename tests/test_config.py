"""Tests for environment-driven settings and logging setup."""

import logging

import pytest

from guided_breathing import ConfigError, MotionPreference, Settings, setup_logging


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.technique == "balanced"
        assert settings.duration == 60
        assert settings.frame_rate == 60
        assert settings.fade_delay == 10
        assert settings.tolerance_ms == 100
        assert settings.reduced_motion is False
        assert settings.glasses_address is None

    def test_overrides(self):
        settings = Settings.from_env({
            "GUIDED_BREATHING_TECHNIQUE": "long-exhale",
            "GUIDED_BREATHING_DURATION": "300",
            "GUIDED_BREATHING_FRAME_RATE": "30",
            "GUIDED_BREATHING_FADE_DELAY": "2.5",
            "GUIDED_BREATHING_REDUCED_MOTION": "yes",
            "GUIDED_BREATHING_LOG_LEVEL": "debug",
            "GUIDED_BREATHING_GLASSES_ADDRESS": "AA:BB:CC:DD:EE:FF",
        })
        assert settings.technique == "longExhale"
        assert settings.duration == 300
        assert settings.frame_rate == 30
        assert settings.fade_delay == 2.5
        assert settings.reduced_motion is True
        assert settings.log_level == "DEBUG"
        assert settings.glasses_address == "AA:BB:CC:DD:EE:FF"

    @pytest.mark.parametrize("raw, expected", [("reduce", True), ("no-preference", False)])
    def test_reduced_motion_matches_motion_preference(self, raw, expected):
        env = {"GUIDED_BREATHING_REDUCED_MOTION": raw}
        assert Settings.from_env(env).reduced_motion is expected
        assert MotionPreference.from_env(env).reduced is expected

    @pytest.mark.parametrize("env", [
        {"GUIDED_BREATHING_DURATION": "soon"},
        {"GUIDED_BREATHING_DURATION": "0"},
        {"GUIDED_BREATHING_TECHNIQUE": "square"},
        {"GUIDED_BREATHING_FRAME_RATE": "-1"},
        {"GUIDED_BREATHING_REDUCED_MOTION": "maybe"},
    ])
    def test_invalid_values(self, env):
        with pytest.raises(ConfigError):
            Settings.from_env(env)


class TestLogging:

    def test_setup_is_idempotent(self, tmp_path):
        name = "guided_breathing.test_setup"
        log_file = tmp_path / "logs" / "session.log"
        logger = setup_logging("DEBUG", log_file, logger_name=name)
        assert len(logger.handlers) == 2
        assert logger.level == logging.DEBUG

        logger = setup_logging("WARNING", log_file, logger_name=name)
        assert len(logger.handlers) == 2
        assert all(h.level == logging.WARNING for h in logger.handlers)

        logger.warning("written")
        for handler in logger.handlers:
            handler.flush()
        assert "written" in log_file.read_text(encoding="utf-8")

        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
