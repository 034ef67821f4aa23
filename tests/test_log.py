import logging

import pytest

from sbm.cli import build_arg_parser
from sbm.log import LogConfig, setup_logging


@pytest.fixture
def root_handlers():
    root = logging.getLogger()
    saved, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = saved
    root.setLevel(level)


def test_plain_handler_stamps_each_line(root_handlers):
    setup_logging(LogConfig(level="debug", no_color=True))
    (handler,) = root_handlers.handlers
    assert type(handler) is logging.StreamHandler
    assert handler.formatter._fmt == "%(asctime)s %(levelname)s %(name)s: %(message)s"
    assert root_handlers.level == logging.DEBUG


def test_unknown_level_falls_back_to_info(root_handlers):
    setup_logging(LogConfig(level="chatty", no_color=True))
    assert root_handlers.level == logging.INFO


def test_config_help_states_yaml_wins_over_env():
    (action,) = [a for a in build_arg_parser()._actions if a.dest == "config"]
    assert "override SBM_* env vars" in action.help
