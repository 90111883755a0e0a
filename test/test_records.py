"""
Unit tests for notes and log entries.
"""

from concurrent.futures import Future
import dataclasses
import json

import pytest

from notify.records import LogEntry, Note


def make_entry(**overrides) -> LogEntry:
    values = dict(
        Timestamp=1481552048, Service="beacon", Instance="beacon_server_01", Sender="collector",
        Level="MSG", Code=0, Status="GeneralMessage", Message="Pushing a new Job",
    )
    values.update(overrides)
    return LogEntry(**values)


class TestNote:

    def test_immutable(self):
        note = Note("sender", "value")
        with pytest.raises(dataclasses.FrozenInstanceError):
            note.sender = "other"

    def test_confirmed_resolves_future_once(self):
        confirm: Future = Future()
        note = Note("sender", "value", confirm)
        note.confirmed()
        note.confirmed()
        assert confirm.result(timeout=0) is True

    def test_confirmed_without_future(self):
        Note("sender", "value").confirmed()


class TestLogEntry:

    def test_to_str_has_eight_fields(self):
        line = make_entry().to_str()
        assert line == "1481552048\tbeacon\tbeacon_server_01\tcollector\tMSG\t0\tGeneralMessage\tPushing a new Job"

    def test_correct_fills_empty_fields(self):
        entry = make_entry(Service="", Sender="", Message="")
        entry.correct()
        assert (entry.Service, entry.Sender, entry.Message) == ("N/A", "N/A", "N/A")

    def test_correct_removes_control_characters(self):
        entry = make_entry(Message="line one\nline\ttwo\r\b\f\v", Sender="col\tlector")
        entry.correct()
        assert entry.Message == "line one line two    "
        assert entry.Sender == "col lector"
        assert len(entry.to_str().split("\t")) == 8

    def test_to_json(self):
        entry = make_entry(Code=3, Level="ERR", Status="FailedAction", Message="boom")
        line = entry.to_json()
        assert "\n" not in line
        decoded = json.loads(line)
        assert list(decoded) == ["Timestamp", "Service", "Instance", "Sender", "Level", "Code", "Status", "Message"]
        assert decoded["Code"] == 3
        assert decoded["Timestamp"] == 1481552048
        assert decoded["Message"] == "boom"
