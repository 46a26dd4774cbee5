import sys
import threading
from collections.abc import Callable

from loguru import logger

NotificationSink = Callable[[str], None]
""" Host provided callback showing a message to the user """

_fault_hook_installed: bool = False
_fault_hook_lock = threading.Lock()


def set_fault_hook() -> None:
    """ Routes uncaught exceptions of the process and its threads to the log, installs hooks only once """
    global _fault_hook_installed
    if _fault_hook_installed:
        return

    with _fault_hook_lock:
        if _fault_hook_installed:
            return
        _install_fault_hooks()
        _fault_hook_installed = True


def _install_fault_hooks() -> None:
    previous_hook = sys.excepthook
    previous_threading_hook = threading.excepthook

    def _log_fault(exc_type, exc_value, exc_tb) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            logger.opt(exception=(exc_type, exc_value, exc_tb)).critical("Unhandled fault")
        previous_hook(exc_type, exc_value, exc_tb)

    def _log_thread_fault(args: threading.ExceptHookArgs) -> None:
        thread_name = args.thread.name if args.thread else '<unknown>'
        logger.opt(exception=(args.exc_type, args.exc_value, args.exc_traceback)).critical(
            f"Unhandled fault in thread {thread_name}")
        previous_threading_hook(args)

    sys.excepthook = _log_fault
    threading.excepthook = _log_thread_fault


def greet(alert: NotificationSink) -> None:
    alert("hello, world")
