"""
Unit tests for notifications and payload decoding.
"""

import pytest

from notify.notification import (
    Coded, Failure, Notification, NotifierInactive, Text, Unrecognized, classify, is_code, newf,
)


class TestNotification:

    def test_is_an_exception(self):
        err = Notification(3, "boom")
        assert isinstance(err, Exception)
        assert str(err) == "boom"
        assert (err.code, err.message) == (3, "boom")

    def test_read_only(self):
        err = Notification(3, "boom")
        with pytest.raises(AttributeError):
            err.code = 4

    def test_can_be_raised(self):
        with pytest.raises(Notification) as excinfo:
            raise Notification(10, "core overheating")
        assert excinfo.value.code == 10

    def test_notifier_inactive_is_a_user_error(self):
        err = NotifierInactive("not running")
        assert err.code == 4
        assert str(err) == "not running"


class TestIsCode:

    def test_notification_codes(self):
        assert is_code(3, Notification(3, "boom"))
        assert not is_code(1, Notification(3, "boom"))

    @pytest.mark.parametrize("err", [ValueError("x"), OSError("y"), RuntimeError()])
    def test_other_exceptions_count_as_general_error(self, err):
        assert is_code(1, err)
        assert not is_code(0, err)
        assert not is_code(3, err)


class TestNewf:

    def test_formats_and_appends_location(self):
        err = newf(3, "Could not open %s: %d", "myfunc.cfg", 2)
        assert err.code == 3
        assert err.message.startswith("Could not open myfunc.cfg: 2 -> [test_notification.py: ")

    def test_format_without_args_is_literal(self):
        err = newf(2, "100% sure")
        assert err.message.startswith("100% sure")

    def test_negative_code_becomes_general_error(self, capsys):
        err = newf(-5, "bad")
        assert err.code == 1
        assert "Changing -5 to 1" in capsys.readouterr().out

    def test_zero_code_is_kept(self, capsys):
        assert newf(0, "hello").code == 0
        assert capsys.readouterr().out == ""


class TestClassify:

    def test_notification(self):
        assert classify(Notification(3, "boom")) == Coded(3, "boom")
        assert classify(NotifierInactive("down")) == Coded(4, "down")

    def test_other_exception(self):
        assert classify(KeyError("k")) == Failure(str(KeyError("k")))

    def test_text(self):
        assert classify("hello") == Text("hello")

    @pytest.mark.parametrize("value", [42, None, ["a"], b"bytes"])
    def test_unrecognized(self, value):
        assert classify(value) == Unrecognized(value)
