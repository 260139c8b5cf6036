from __future__ import annotations

import atexit
import logging
import subprocess
from contextlib import contextmanager
from typing import Iterator, List, Sequence

logger = logging.getLogger(__name__)

_active_processes: List[subprocess.Popen] = []


def register_process(proc: subprocess.Popen) -> subprocess.Popen:
    if proc not in _active_processes:
        _active_processes.append(proc)
    return proc


def unregister_process(proc: subprocess.Popen) -> None:
    try:
        _active_processes.remove(proc)
    except ValueError:
        pass


def terminate_process(proc: subprocess.Popen, *, timeout: float = 5.0) -> None:
    if proc.poll() is not None:
        return
    try:
        proc.terminate()
        proc.wait(timeout=timeout)
    except (OSError, subprocess.TimeoutExpired):
        logger.debug("pid %s ignored SIGTERM, killing", proc.pid)
        try:
            proc.kill()
            proc.wait(timeout=timeout)
        except (OSError, subprocess.TimeoutExpired):
            logger.warning("Could not kill pid %s", proc.pid)


def cleanup_processes() -> None:
    for proc in list(_active_processes):
        terminate_process(proc)
    _active_processes.clear()


@contextmanager
def managed_process(cmd: Sequence[str], *, terminate: bool = False, **kwargs) -> Iterator[subprocess.Popen]:
    """Spawn ``cmd`` and keep it registered for cleanup while the block runs.

    With ``terminate=True`` the child is stopped when the block exits, which
    is what one-shot collaborators such as the renderer need.
    """
    proc = subprocess.Popen(list(cmd), **kwargs)
    register_process(proc)
    logger.debug("Started %s (pid %s)", cmd[0], proc.pid)
    try:
        yield proc
    finally:
        if terminate:
            terminate_process(proc)
        unregister_process(proc)


atexit.register(cleanup_processes)
