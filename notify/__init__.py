"""
notify is a simple in-process notification/logging service.

Use a function created by Notifier.sender or Notifier.failure to send and log
notifications. Senders understand strings, notify.Notification and any other
exception.

Use Notifier.run() either directly or on a thread to run the service.

General advice on using notify:
* even though you can have several notifiers pointing to different log files,
  use as few notifiers as possible to simplify log analysis.
* use sys.stdout as an endpoint to view logs and messages in debug mode.
* connect notify to other processes by supplying a writable file object (e.g. the
  write end of os.pipe()), then read the notifications from the other end.
"""

from notify.codes import STANDARD_CODES, SYSTEM_CODES, CodeEntry, CodeTable
from notify.config import ConfigError, NotifierConfig, load_config
from notify.endpoints import EndpointRegistry
from notify.notification import MissingSystemCode, Notification, NotifierInactive, is_code, newf
from notify.notifier import Notifier

__all__ = [
    "CodeEntry",
    "CodeTable",
    "ConfigError",
    "EndpointRegistry",
    "MissingSystemCode",
    "Notification",
    "Notifier",
    "NotifierConfig",
    "NotifierInactive",
    "STANDARD_CODES",
    "SYSTEM_CODES",
    "is_code",
    "load_config",
    "newf",
]
