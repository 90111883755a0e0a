"""
Notifier Module

Welcome to the notifier! Many threads send notes, one consumer thread writes them.

Usage:
    notifier = Notifier("MyService", "MyServiceInstance", "logs/myservice.log", log_all=True)
    threading.Thread(target=notifier.run, daemon=True).start()

    send = notifier.sender("Loader")      # plain messages and exceptions
    fail = notifier.failure("Loader")     # coded notifications

    send("Loading configuration")         # logged with code 0 (only when log_all=True)
    raise fail(3, "Could not open %s", path)   # logged with code 3 AND raised

    notifier.exit()                       # drain the backlog, close the endpoints

Each note goes through the following steps:
    1. Submission: send() wraps (sender, value) into a Note and routes it into the
       bounded note queue, either from the calling thread (blocks while the queue is
       full) or from a detached thread (async, order between sends not guaranteed).
    2. Consumption: run() is the only reader of the queue and the only writer of the
       endpoints. Every note is decoded, turned into a LogEntry and written as a
       tab-separated line or a JSON object to every endpoint.
    3. Shutdown: exit() stops accepting notes, queues a last note after the backlog,
       waits until it has been written and then closes the queue and the endpoints.
"""

# System modules
from concurrent.futures import Future
import logging
import queue
import sys
import threading
import time
from typing import Callable, Mapping

# Notify modules
from notify.codes import GENERAL_ERROR_CODE, MESSAGE_CODE, UNKNOWN_CODE, CodeEntry, CodeTable
from notify.endpoints import EndpointRegistry, EndpointSet
from notify.notification import (
    Coded, Failure, MissingSystemCode, Notification, NotifierInactive, Payload, Text, Unrecognized,
    classify, newf,
)
from notify.ops import Operations
from notify.records import LogEntry, Note
from notify.syswarn import syswarn

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100
NOTIFIER_SENDER = "notifier"
STOP_MESSAGE = "Notifier is stopping. Note queue has been closed."


class NoteQueue:
    """
    Bounded FIFO of notes that can be closed.

    Once closed, get() returns None immediately, for every caller and every call.
    """

    _CLOSED = object()

    def __init__(self, capacity: int) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize=capacity)
        self.closed: bool = False

    def put(self, note: Note, block: bool = True) -> None:
        """Block until there is room for the note. Without blocking a full queue raises queue.Full."""
        self._queue.put(note, block=block)

    def get(self) -> Note | None:
        item = self._queue.get()
        if item is NoteQueue._CLOSED:
            self._queue.put_nowait(item)  # Leave the marker for the next reader
            return None
        return item

    def close(self) -> None:
        self.closed = True
        self._queue.put(NoteQueue._CLOSED)

    def __len__(self) -> int:
        return self._queue.qsize()


class Notifier:
    """
    In-process notification service.

    Accepted endpoints: paths to log files (e.g. "myservice.log") and writable file
    objects (e.g. sys.stdout). Notes are written to all endpoints in their given
    order. Without endpoints everything goes to stdout.

    Args:
        service: Service that uses the notifier (e.g. fractal-beacon)
        instance: Unique instance name of the service (e.g. beacon_server_01)
        endpoints: Log file paths and/or file objects
        log_all: If True, also logs plain (non-error) messages
        async_send: If True, sends never block but their order is not guaranteed
        json_format: If True, every line is a JSON object instead of 8 tab-separated fields
        capacity: Number of notes the queue holds before sync senders block
        registry: Shared registry preventing several notifiers from writing to the same file
    """

    def __init__(
        self,
        service: str,
        instance: str,
        *endpoints: object,
        log_all: bool = False,
        async_send: bool = False,
        json_format: bool = False,
        capacity: int = DEFAULT_CAPACITY,
        registry: EndpointRegistry | None = None,
    ) -> None:
        self.service: str = service
        self.instance: str = instance
        self.log_all: bool = log_all
        self.async_send: bool = async_send
        self.json_format: bool = json_format

        if capacity < 1:
            syswarn(f"Note queue capacity must be at least 1. Changing {capacity} to 1")
            capacity = 1

        self._queue: NoteQueue = NoteQueue(capacity)
        self._codes: CodeTable = CodeTable()
        self._ops: Operations = Operations()
        self._consumer: threading.Thread | None = None
        self._ready: threading.Event = threading.Event()

        # Prepare endpoints
        self._endpoints: EndpointSet = EndpointSet(owner=self, registry=registry)
        if not endpoints:
            syswarn("No endpoints provided. Going to route all notes to stdout")
            endpoints = (sys.stdout,)
        for endpoint in endpoints:
            self._endpoints.add(endpoint)
        self._endpoints.ensure_console()

    @property
    def ident(self) -> str:
        """Notifier's details."""
        return f"Notifier[{self.service}][{self.instance}] {id(self):#x}"

    def __repr__(self) -> str:
        return self.ident

    @property
    def endpoints(self) -> list:
        return list(self._endpoints)

    @property
    def backlog(self) -> int:
        """Number of notes waiting in the queue."""
        return len(self._queue)

    def lookup_code(self, code: int) -> CodeEntry | None:
        return self._codes.lookup(code)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def send(
        self,
        sender: str,
        value: object,
        confirm: Future | None = None,
        async_send: bool | None = None,
    ) -> BaseException | None:
        """
        Create a note and route it into the note queue.

        Returns value if it is an exception (so the call can stand in for building
        the error), otherwise None.
        """
        note = Note(sender, value, confirm)
        if self.async_send if async_send is None else async_send:
            threading.Thread(target=self._route, args=(note,), daemon=True, name="notify.route").start()
        else:
            self._route(note)

        if isinstance(value, BaseException):
            return value
        return None

    def _route(self, note: Note, block: bool = True) -> None:
        """Put the note into the queue unless the notifier is halting."""
        with self._ops.lock.read():
            if not self._ops.halt:
                try:
                    self._queue.put(note, block=block)
                    return
                except queue.Full:
                    warning = f"note queue is full, dropping note from {note.sender}: {note.value}"
            else:
                warning = f"{note.sender} cannot send to a closed channel"

        # Nobody may wait forever for a note that will never be written
        note.confirmed()
        syswarn(warning)

    def _note_to_self(self, value: BaseException) -> BaseException:
        """
        Communicate internal problems through the notifier itself.

        Notes from the consumer thread are always routed asynchronously, the consumer
        must never wait for room in its own queue. Such a note races with exit(): once
        the notifier halts it is rejected with a warning instead of being written.
        Before the consumer runs nobody drains the queue, so a note that does not fit
        is printed as a warning instead of blocking.
        """
        note = Note(NOTIFIER_SENDER, value)
        if threading.current_thread() is self._consumer or self.async_send:
            threading.Thread(target=self._route, args=(note,), daemon=True, name="notify.route").start()
        else:
            self._route(note, block=self.is_ready())
        return value

    # ------------------------------------------------------------------
    # Personalized senders
    # ------------------------------------------------------------------

    def sender(self, sender: str) -> Callable[[object], BaseException | None]:
        """
        Create a personalized send function, which only needs the value (a message
        or an exception). Each unique sender (e.g. server, client) should have its own.
        """
        def send(value: object) -> BaseException | None:
            return self.send(sender, value)
        return send

    def failure(self, sender: str) -> Callable[..., Notification]:
        """
        Create a personalized function building and sending a coded notification,
        e.g. fail(3, "Could not open %s", path). The notification is also returned.
        """
        def fail(code: int, fmt: str, *args: object) -> Notification:
            notification = newf(code, fmt, *args, stacklevel=2)
            self.send(sender, notification)
            return notification
        return fail

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_codes(self, new_codes: Mapping[int, tuple[str, str]]) -> Notification | None:
        """
        Replace built-in notification codes with custom ones, e.g. {5: ("WRN", "BeCareful")}.

        A partial replacement is allowed, but only once per notifier and only before
        it runs. Codes outside 1 < code < 999 are dropped and reported.
        """
        self._is_ok()

        # The table is frozen from the first run() on, also after exit()
        if self._ops.has_started():
            return Notification(4, "Cannot change codes on a running notifier")

        # Only allow one change of codes per notifier
        if self._codes.replaced:
            return self._note_to_self(newf(
                UNKNOWN_CODE, "You are trying to change notification codes again. This action is not permitted."
            ))

        rejected = self._codes.replace(new_codes)
        for code in rejected:
            if CodeTable.is_replaceable(code):
                self._note_to_self(newf(4, "Notification code '%s' needs a (level, status) pair of strings. Removing it", code))
            else:
                self._note_to_self(newf(4, "Only notification codes 1 < code < 999 are replaceable. Removing '%s'", code))

        if rejected:
            return Notification(4, f"Failed replacing {len(rejected)} status codes: invalid range")
        return None

    # ------------------------------------------------------------------
    # Consumer loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """
        Write the notes sent to the note queue. Blocks until exit() is called.

        run() is the only consumer of the queue and the only writer of the endpoints.
        Start it on its own thread unless blocking behaviour is wanted.
        """
        self._is_ok()

        if self._queue.closed:
            syswarn(f"{self.ident} has already exited. Cannot run it again.")
            return

        with self._endpoints.lock:
            self._consumer = threading.current_thread()
            with self._ops.lock.write():
                self._ops.running = True
                self._ops.started = True
            self._ready.set()
            logger.info("%s is running", self.ident)

            while True:
                note = self._queue.get()
                if note is None:
                    break
                try:
                    self._log(note)
                except MissingSystemCode as fatal:
                    syswarn(f"{self.ident} cannot write notes anymore: {fatal}")
                    self._fail_backlog(fatal)
                    raise

        logger.info("%s stopped consuming notes", self.ident)

    def _fail_backlog(self, fatal: MissingSystemCode) -> None:
        """Hand the fatal error to every note still arriving, until the queue is closed."""
        while True:
            note = self._queue.get()
            if note is None:
                break
            note.failed(fatal)

    def start(self) -> threading.Thread:
        """Run the notifier on a daemon thread and wait until it is ready."""
        consumer = threading.Thread(target=self.run, daemon=True, name=f"notify.{self.service}.{self.instance}")
        consumer.start()
        while not self._ready.wait(timeout=0.05):
            if not consumer.is_alive():
                break
        return consumer

    def is_ready(self) -> bool:
        """Indicate whether logging (writing to endpoints) has started."""
        return self._ops.is_running()

    def _log(self, note: Note) -> None:
        """Write a single note to all endpoints, then confirm it."""
        try:
            payload = classify(note.value)
            match payload:
                case Text() if not self.log_all:
                    return

            # Sanity check (fatal)
            self._is_ok()

            entry = self._entry(note.sender, payload)
            self._endpoints.write_line(entry.to_json() if self.json_format else entry.to_str())
        except MissingSystemCode as fatal:
            note.failed(fatal)
            raise
        finally:
            note.confirmed()

    def _entry(self, sender: str, payload: Payload) -> LogEntry:
        entry = LogEntry(
            Timestamp=int(time.time()),
            Service=self.service,
            Instance=self.instance,
            Sender=sender,
        )

        match payload:
            case Coded(code, message):
                if code not in self._codes:
                    self._note_to_self(newf(UNKNOWN_CODE, "Unknown error code used. Replacing '%d' with '1'", code))
                    code = GENERAL_ERROR_CODE
                entry.Code, entry.Message = code, message
            case Failure(message):
                entry.Code, entry.Message = GENERAL_ERROR_CODE, message
            case Text(message):
                entry.Code, entry.Message = MESSAGE_CODE, message
            case Unrecognized(value):
                entry.Code, entry.Message = UNKNOWN_CODE, "Unknown value used in notify.send"
                self._note_to_self(newf(
                    UNKNOWN_CODE, "Unknown value of type '%s' sent by '%s'", type(value).__name__, sender
                ))

        # Determine level and status
        entry.Level, entry.Status = self._codes.lookup(entry.Code)
        entry.correct()
        return entry

    def _is_ok(self) -> None:
        """The notifier expects the restricted notification codes to be available at all times."""
        missing = self._codes.missing_system_codes()
        if missing:
            raise MissingSystemCode(f"notify: notification code {missing[0]} is not available")

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def exit(self) -> Notification | None:
        """
        Stop the notifier: reject new notes, wait until the backlog has been
        written, then close the note queue and the endpoints.
        """
        if not self.is_ready():
            return NotifierInactive(f"{self.ident} was not running at exit time.")

        # Halt operations and issue the last log entry, behind every accepted note
        confirm: Future = Future()
        with self._ops.lock.write():
            if self._ops.halt:
                return NotifierInactive(f"{self.ident} is already exiting.")
            self._ops.halt = True
            self._queue.put(Note(NOTIFIER_SENDER, STOP_MESSAGE, confirm))
        logger.info("%s is stopping, backlog: %d", self.ident, len(self._queue))

        # Wait for confirmation that all notes have been written.
        # A fatal error in the consumer loop is raised here, after cleaning up.
        try:
            confirm.result()
        finally:
            self._queue.close()

            # Close endpoints (waits for the consumer loop to let go of them)
            self._endpoints.close()

            with self._ops.lock.write():
                self._ops.running = False
        return None

    def __enter__(self) -> "Notifier":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.exit()
        return False
