import sys

PREFIX = "[iBoot-Loader]"

DEBUG, INFO, WARN, ERROR = range(4)


class StderrSink:
    """Minimal stand-in for a Binary Ninja logger when running headless."""

    LEVEL_NAMES = ("debug", "info", "warn", "error")

    def __init__(self, level=INFO, stream=None):
        self.level = level
        self.stream = stream if stream is not None else sys.stderr

    def _emit(self, level, msg):
        if level >= self.level:
            print(f"{self.LEVEL_NAMES[level]}: {msg}", file=self.stream)

    def log_debug(self, msg):
        self._emit(DEBUG, msg)

    def log_info(self, msg):
        self._emit(INFO, msg)

    def log_warn(self, msg):
        self._emit(WARN, msg)

    def log_error(self, msg):
        self._emit(ERROR, msg)


class LoaderLog:
    """Prefixes every message and forwards it to a sink.

    The sink only needs ``log_debug``/``log_info``/``log_warn``/``log_error``,
    which is what ``binaryninja.log.Logger`` provides.
    """

    def __init__(self, sink=None):
        self.sink = sink if sink is not None else StderrSink()

    def debug(self, msg):
        self.sink.log_debug(f"{PREFIX} {msg}")

    def info(self, msg):
        self.sink.log_info(f"{PREFIX} {msg}")

    def warn(self, msg):
        self.sink.log_warn(f"{PREFIX} {msg}")

    def error(self, msg):
        self.sink.log_error(f"{PREFIX} {msg}")
