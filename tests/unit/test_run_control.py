from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from inscripciones_import.services.run_control import (
    CancellationToken,
    ImportCancelled,
    ImportInProgressError,
    check_cancelled,
    import_lock,
)


def test_token_starts_clear_and_cancels_once_set():
    token = CancellationToken()
    token.raise_if_cancelled()
    check_cancelled(token)
    check_cancelled(None)

    token.cancel()

    assert token.cancelled
    with pytest.raises(ImportCancelled):
        check_cancelled(token)


def test_token_can_be_set_from_another_thread():
    token = CancellationToken()
    t = threading.Thread(target=token.cancel)
    t.start()
    t.join()

    assert token.cancelled


def test_lock_file_held_and_released(tmp_path: Path):
    lock = tmp_path / "run" / "import.lock"

    with import_lock(lock) as held:
        assert held == lock
        assert lock.read_text(encoding="ascii") == str(os.getpid())

    assert not lock.exists()


def test_second_import_is_rejected_while_lock_held(tmp_path: Path):
    lock = tmp_path / "import.lock"

    with import_lock(lock):
        with pytest.raises(ImportInProgressError, match="another import is running"):
            with import_lock(lock):
                pass
        assert lock.exists()


def test_lock_released_when_body_raises(tmp_path: Path):
    lock = tmp_path / "import.lock"

    with pytest.raises(RuntimeError):
        with import_lock(lock):
            raise RuntimeError("boom")

    assert not lock.exists()


def test_stale_lock_from_dead_process_is_replaced(tmp_path: Path, caplog):
    lock = tmp_path / "import.lock"
    lock.write_text("4242", encoding="ascii")

    with patch("inscripciones_import.services.run_control._pid_alive", return_value=False):
        with caplog.at_level(logging.WARNING):
            with import_lock(lock):
                assert lock.read_text(encoding="ascii") == str(os.getpid())

    assert not lock.exists()
    assert "removing stale lock file" in caplog.text
    assert "pid 4242" in caplog.text


def test_live_lock_error_names_pid_and_file(tmp_path: Path):
    lock = tmp_path / "import.lock"
    lock.write_text("4242", encoding="ascii")

    with patch("inscripciones_import.services.run_control._pid_alive", return_value=True):
        with pytest.raises(ImportInProgressError) as excinfo:
            with import_lock(lock):
                pass

    assert "pid 4242" in str(excinfo.value)
    assert str(lock) in str(excinfo.value)
    assert lock.read_text(encoding="ascii") == "4242"


def test_unreadable_lock_is_treated_as_held(tmp_path: Path):
    lock = tmp_path / "import.lock"
    lock.write_text("", encoding="ascii")

    with pytest.raises(ImportInProgressError, match="pid \\?"):
        with import_lock(lock):
            pass

    assert lock.exists()
