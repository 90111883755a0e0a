"""
Endpoints Module

Endpoints are the writable sinks (log files or the console) every log line is
written to, in the order they were given.

Accepted endpoint references:
    - paths (str or os.PathLike) to log files, opened append-only and created with
      0600 permissions (missing parent directories are created with 0700)
    - already opened file-like objects (anything with a write() method), e.g. sys.stdout
      or the write end of a pipe

The console is never closed. Any other endpoint is closed when the notifier exits.
"""

# System modules
import logging
import os
import sys
import threading
from typing import IO, Iterator

# Notify modules
from notify.syswarn import syswarn

logger = logging.getLogger(__name__)


class EndpointRegistry:
    """
    Tracks which notifier writes to which log file.

    Pass the same registry to several notifiers to prevent them from writing to the
    same file. A notifier gives its files back when it exits.
    """

    def __init__(self) -> None:
        self._claims: dict[str, object] = {}
        self._lock: threading.Lock = threading.Lock()

    def claim(self, path: str, owner: object) -> bool:
        """Claim a (resolved) path for owner. Returns False if somebody else owns it."""
        with self._lock:
            holder = self._claims.setdefault(path, owner)
            return holder is owner

    def release_path(self, path: str, owner: object) -> None:
        with self._lock:
            if self._claims.get(path) is owner:
                del self._claims[path]

    def release(self, owner: object) -> None:
        """Give back every path claimed by owner."""
        with self._lock:
            self._claims = {path: holder for path, holder in self._claims.items() if holder is not owner}

    def owner_of(self, path: str) -> object | None:
        with self._lock:
            return self._claims.get(path)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._claims


def is_console(sink: object) -> bool:
    return any(sink is stream for stream in (sys.stdout, sys.stderr, sys.__stdout__, sys.__stderr__))


def open_log_file(logfile: str) -> IO[str] | None:
    """
    Open a log file and return a reference to it.

    Falls back to the console if the file cannot be opened. Returns None if the
    path points to a directory, such a path cannot become an endpoint.
    """
    # Check validity of file
    if os.path.splitext(logfile)[1].lower() != ".log":
        syswarn("log file's extension is not *.log")

    if os.path.isdir(logfile):
        syswarn(f"{logfile} is a directory. Will not be able to write notifications to it.")
        return None

    if not os.path.exists(logfile):
        parent = os.path.dirname(logfile)
        if parent and not os.path.isdir(parent):
            try:
                os.makedirs(parent, mode=0o700, exist_ok=True)
            except OSError as e:
                syswarn(f"log file directory does not exist. Failed creating it: {e}")

    # Open the log file
    try:
        fd = os.open(logfile, os.O_CREAT | os.O_APPEND | os.O_WRONLY, 0o600)
    except OSError as e:
        syswarn(f"Failed opening log file: {e}. Using stdout instead")
        return sys.stdout
    logger.debug("opened log file %s", logfile)
    return os.fdopen(fd, "a", encoding="utf-8")


class EndpointSet:
    """
    Ordered, duplicate-free, lock-guarded list of sinks.

    The consumer loop holds `lock` for as long as it runs, so the membership cannot
    change while notes are written. Exit takes the same lock to close the sinks.
    """

    def __init__(self, owner: object, registry: EndpointRegistry | None = None) -> None:
        self.lock: threading.Lock = threading.Lock()
        self._owner: object = owner
        self._registry: EndpointRegistry = registry if registry is not None else EndpointRegistry()
        self._sinks: list[IO[str]] = []
        self._paths: dict[str, IO[str]] = {}  # resolved path -> sink opened for it

    def add(self, reference: object) -> bool:
        """Add a path or a file-like sink. Returns False if the reference was rejected."""
        with self.lock:
            if isinstance(reference, (str, os.PathLike)):
                return self._add_path(os.fsdecode(reference))
            if callable(getattr(reference, "write", None)):
                return self._append(reference)
            syswarn(f"endpoint {reference!r} is not supported. Either provide a file path or a writable file object")
            return False

    def ensure_console(self) -> None:
        """Route everything to the console if no endpoint is left."""
        with self.lock:
            if not self._sinks:
                syswarn("No endpoints available. Going to route all notes to stdout")
                self._append(sys.stdout)

    def _add_path(self, path: str) -> bool:
        resolved: str = os.path.realpath(path)

        # Same file given twice
        if resolved in self._paths:
            return True

        if not self._registry.claim(resolved, self._owner):
            syswarn(f"{path} is already used by another notifier. Will not write to it.")
            return False

        sink = open_log_file(path)
        if sink is None:
            self._registry.release_path(resolved, self._owner)
            return False
        if is_console(sink):
            # Fell back to the console, the file itself is not in use
            self._registry.release_path(resolved, self._owner)
            return self._append(sink)

        self._paths[resolved] = sink
        return self._append(sink)

    def _append(self, sink: IO[str]) -> bool:
        # Duplicates collapse to their first occurrence
        if not any(sink is known for known in self._sinks):
            self._sinks.append(sink)
        return True

    def __iter__(self) -> Iterator[IO[str]]:
        return iter(list(self._sinks))

    def __len__(self) -> int:
        return len(self._sinks)

    def write_line(self, line: str) -> None:
        """Write one line to every sink. The caller must hold `lock`."""
        for i, sink in enumerate(self._sinks, start=1):
            try:
                sink.write(line + "\n")
                sink.flush()
            except Exception as e:
                # Do not log to avoid an infinite loop
                syswarn(f"failed writing to endpoint #{i}: {e}")

    def close(self) -> None:
        """Close every sink except the console and give the files back to the registry."""
        with self.lock:
            for sink in self._sinks:
                if is_console(sink):
                    continue
                try:
                    sink.close()
                except OSError as e:
                    syswarn(f"failed closing endpoint {getattr(sink, 'name', sink)!r}: {e}")
            self._registry.release(self._owner)
