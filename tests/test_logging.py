"""Tests for logging setup."""
import logging

from monobmp.logging_config import setup_logging


def test_setup_logging_uses_configured_level(tmp_path):
    setup_logging(tmp_path, "WARNING")
    assert logging.getLogger().level == logging.WARNING
    setup_logging(tmp_path, "INFO")
    assert logging.getLogger().level == logging.INFO


def test_pillow_debug_chatter_is_silenced(tmp_path):
    setup_logging(tmp_path, "DEBUG")
    try:
        assert logging.getLogger("PIL").getEffectiveLevel() == logging.INFO
    finally:
        setup_logging(tmp_path, "INFO")


def test_repeated_setup_does_not_stack_handlers(tmp_path):
    setup_logging(tmp_path)
    before = len(logging.getLogger().handlers)
    setup_logging(tmp_path)
    assert len(logging.getLogger().handlers) == before
    assert (tmp_path / "monobmp.log").exists()
