"""
Records Module

Note: the unit of work travelling through the note queue (sender, value, optional
confirmation future).
LogEntry: the 8-field line written to every endpoint, e.g.

    1481552048	beacon	beacon_server_01	collector	MSG	0	GeneralMessage	Pushing a new Job
    1481552049	beacon	beacon_server_01	dispatcher	ERR	3	FailedAction	Could not dispatch Job
"""

# System modules
from concurrent.futures import Future
from dataclasses import asdict, dataclass
import json

# Notify modules
from notify.syswarn import syswarn

NOT_AVAILABLE = "N/A"
CONTROL_SYMBOLS = ("\t", "\n", "\r", "\b", "\f", "\v")


@dataclass(frozen=True)
class Note:
    """One submission. Created by a sender, consumed exactly once by the consumer loop."""
    sender: str
    value: object
    confirm: Future | None = None

    def confirmed(self) -> None:
        """Resolve the confirmation future, if any (and if nobody resolved it yet)."""
        if self.confirm is not None and not self.confirm.done():
            self.confirm.set_result(True)

    def failed(self, error: BaseException) -> None:
        """Resolve the confirmation future with an error instead of a result."""
        if self.confirm is not None and not self.confirm.done():
            self.confirm.set_exception(error)


@dataclass
class LogEntry:
    Timestamp: int
    Service: str
    Instance: str
    Sender: str
    Level: str = ""
    Code: int = 0
    Status: str = ""
    Message: str = ""

    def correct(self) -> None:
        """Correct possible mistakes: no empty strings, no tabs, newlines and so on."""
        for field in ("Service", "Instance", "Sender", "Level", "Status", "Message"):
            value: str = str(getattr(self, field))
            if value == "":
                value = NOT_AVAILABLE
            for symbol in CONTROL_SYMBOLS:
                value = value.replace(symbol, " ")
            setattr(self, field, value)

    def to_str(self) -> str:
        return "\t".join([
            str(self.Timestamp), self.Service, self.Instance, self.Sender,
            self.Level, str(self.Code), self.Status, self.Message,
        ])

    def to_json(self) -> str:
        try:
            return json.dumps(asdict(self), separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            syswarn(f"Could not convert logEntry to JSON: {e}")
            return '{"ERROR":"Could not convert logEntry to JSON"}'
