import logging
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from distmatmul.__main__ import main
import distmatmul.utils.logger as logger_module
from distmatmul.utils.logger import create_logger

logger = create_logger(__name__)

def test_default_run_prints_matrices_and_success(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Distributed Matrix Multiplication (10x10) with 4 processes" in out
    assert "Result matrix C (distributed):" in out
    assert "Reference matrix C_ref (single-threaded):" in out
    # first row of C for the seed matrices
    assert "56 57 58 59 60 61 62 63 64 65 " in out
    assert "SUCCESS: distributed result matches reference." in out

def test_quiet_socket_run(capsys):
    assert main(["-q", "-n", "7", "-p", "3", "--transport", "socket", "--element-bits", "32"]) == 0
    out = capsys.readouterr().out
    assert "Distributed Matrix Multiplication (7x7) with 3 processes" in out
    assert "Result matrix C" not in out
    assert "SUCCESS" in out

def test_invalid_worker_count():
    with pytest.raises(SystemExit):
        main(["--workers", "0"])

def test_logs_stay_out_of_the_results_by_default(monkeypatch):
    monkeypatch.setattr(logger_module, "logs_env", None)
    monkeypatch.setattr(logger_module, "_level_override", None)
    try:
        assert main(["-q"]) == 0
        assert logging.getLogger("distmatmul.coordinator").level == logging.WARNING
        assert main(["-q", "--verbose"]) == 0
        assert logging.getLogger("distmatmul.coordinator").level == logging.DEBUG
    finally:
        logger_module.set_console_level(logging.INFO)
