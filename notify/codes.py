"""
Notification Codes Module

The table of notification codes should be detailed enough to satisfy the use cases
of your program, but small enough to keep log analysis meaningful.
Replace parts of it with Notifier.set_codes() before the notifier starts running.
"""

# System modules
from types import MappingProxyType
from typing import Mapping, NamedTuple


class CodeEntry(NamedTuple):
    """Meaning of a notification code: severity level and human readable status."""
    level: str
    status: str


MESSAGE_CODE = 0        # [Restricted] Notifications that are not errors
GENERAL_ERROR_CODE = 1  # [Restricted] Nonspecific errors, also any other exception type
UNKNOWN_CODE = 999      # [Restricted] Used to track "should-never-happen" cases
SYSTEM_CODES: tuple[int, ...] = (MESSAGE_CODE, GENERAL_ERROR_CODE, UNKNOWN_CODE)

STANDARD_CODES: Mapping[int, CodeEntry] = MappingProxyType({
    0:   CodeEntry("MSG", "GeneralMessage"),
    1:   CodeEntry("ERR", "GeneralError"),
    2:   CodeEntry("ERR", "ConfigurationError"),   # inappropriate configuration value (e.g. error parsing flags)
    3:   CodeEntry("ERR", "FailedAction"),         # failed attempt to do something, e.g. open or write to a file
    4:   CodeEntry("ERR", "UserError"),
    10:  CodeEntry("ERR", "CatastrophicFailure"),  # an error that will (should) stop the program
    100: CodeEntry("MSG", "HTTP-StatusContinue"),
    101: CodeEntry("MSG", "HTTP-StatusSwitchingProtocols"),
    102: CodeEntry("MSG", "HTTP-StatusProcessing"),
    200: CodeEntry("MSG", "HTTP-StatusOK"),
    201: CodeEntry("MSG", "HTTP-StatusCreated"),
    202: CodeEntry("MSG", "HTTP-StatusAccepted"),
    203: CodeEntry("MSG", "HTTP-StatusNonAuthoritativeInfo"),
    204: CodeEntry("MSG", "HTTP-StatusNoContent"),
    205: CodeEntry("MSG", "HTTP-StatusResetContent"),
    206: CodeEntry("MSG", "HTTP-StatusPartialContent"),
    207: CodeEntry("MSG", "HTTP-StatusMultiStatus"),
    208: CodeEntry("MSG", "HTTP-StatusAlreadyReported"),
    226: CodeEntry("MSG", "HTTP-StatusIMUsed"),
    300: CodeEntry("MSG", "HTTP-StatusMultipleChoices"),
    301: CodeEntry("MSG", "HTTP-StatusMovedPermanently"),
    302: CodeEntry("MSG", "HTTP-StatusFound"),
    303: CodeEntry("MSG", "HTTP-StatusSeeOther"),
    304: CodeEntry("MSG", "HTTP-StatusNotModified"),
    305: CodeEntry("MSG", "HTTP-StatusUseProxy"),
    307: CodeEntry("MSG", "HTTP-StatusTemporaryRedirect"),
    308: CodeEntry("MSG", "HTTP-StatusPermanentRedirect"),
    400: CodeEntry("ERR", "HTTP-StatusBadRequest"),
    401: CodeEntry("ERR", "HTTP-StatusUnauthorized"),
    402: CodeEntry("ERR", "HTTP-StatusPaymentRequired"),
    403: CodeEntry("ERR", "HTTP-StatusForbidden"),
    404: CodeEntry("ERR", "HTTP-StatusNotFound"),
    405: CodeEntry("ERR", "HTTP-StatusMethodNotAllowed"),
    406: CodeEntry("ERR", "HTTP-StatusNotAcceptable"),
    407: CodeEntry("ERR", "HTTP-StatusProxyAuthRequired"),
    408: CodeEntry("ERR", "HTTP-StatusRequestTimeout"),
    409: CodeEntry("ERR", "HTTP-StatusConflict"),
    410: CodeEntry("ERR", "HTTP-StatusGone"),
    411: CodeEntry("ERR", "HTTP-StatusLengthRequired"),
    412: CodeEntry("ERR", "HTTP-StatusPreconditionFailed"),
    413: CodeEntry("ERR", "HTTP-StatusRequestEntityTooLarge"),
    414: CodeEntry("ERR", "HTTP-StatusRequestURITooLong"),
    415: CodeEntry("ERR", "HTTP-StatusUnsupportedMediaType"),
    416: CodeEntry("ERR", "HTTP-StatusRequestedRangeNotSatisfiable"),
    417: CodeEntry("ERR", "HTTP-StatusExpectationFailed"),
    418: CodeEntry("ERR", "HTTP-StatusTeapot"),
    422: CodeEntry("ERR", "HTTP-StatusUnprocessableEntity"),
    423: CodeEntry("ERR", "HTTP-StatusLocked"),
    424: CodeEntry("ERR", "HTTP-StatusFailedDependency"),
    426: CodeEntry("ERR", "HTTP-StatusUpgradeRequired"),
    428: CodeEntry("ERR", "HTTP-StatusPreconditionRequired"),
    429: CodeEntry("ERR", "HTTP-StatusTooManyRequests"),
    431: CodeEntry("ERR", "HTTP-StatusRequestHeaderFieldsTooLarge"),
    451: CodeEntry("ERR", "HTTP-StatusUnavailableForLegalReasons"),
    500: CodeEntry("ERR", "HTTP-StatusInternalServerError"),
    501: CodeEntry("ERR", "HTTP-StatusNotImplemented"),
    502: CodeEntry("ERR", "HTTP-StatusBadGateway"),
    503: CodeEntry("ERR", "HTTP-StatusServiceUnavailable"),
    504: CodeEntry("ERR", "HTTP-StatusGatewayTimeout"),
    505: CodeEntry("ERR", "HTTP-StatusHTTPVersionNotSupported"),
    506: CodeEntry("ERR", "HTTP-StatusVariantAlsoNegotiates"),
    507: CodeEntry("ERR", "HTTP-StatusInsufficientStorage"),
    508: CodeEntry("ERR", "HTTP-StatusLoopDetected"),
    510: CodeEntry("ERR", "HTTP-StatusNotExtended"),
    511: CodeEntry("ERR", "HTTP-StatusNetworkAuthenticationRequired"),
    999: CodeEntry("ERR", "ShouldNeverHappen"),
})


class CodeTable:
    """
    Per-notifier copy of the notification codes.

    The table is seeded from STANDARD_CODES and may be replaced (partially) once.
    There is no lock: the notifier only allows the replacement before its consumer
    loop starts, so the table is read-only whenever more than one thread can see it.
    """

    def __init__(self, codes: Mapping[int, CodeEntry] = STANDARD_CODES) -> None:
        self._codes: dict[int, CodeEntry] = dict(codes)
        self.replaced: bool = False     # Safety switch, flipped by the first replacement

    def lookup(self, code: int) -> CodeEntry | None:
        return self._codes.get(code)

    def __contains__(self, code: object) -> bool:
        return code in self._codes

    def __len__(self) -> int:
        return len(self._codes)

    def missing_system_codes(self) -> list[int]:
        """Return the restricted codes that are no longer available."""
        return [code for code in SYSTEM_CODES if code not in self._codes]

    @staticmethod
    def is_replaceable(code: object) -> bool:
        """Only codes 1 < code < 999 can be overwritten."""
        return isinstance(code, int) and not isinstance(code, bool) and GENERAL_ERROR_CODE < code < UNKNOWN_CODE

    def replace(self, new_codes: Mapping[int, object]) -> list[int]:
        """
        Apply a (partial) replacement and flip the safety switch.

        Entries with a restricted or out-of-range code, or whose meaning is not a
        pair of strings, are skipped. The caller is responsible for refusing a
        second replacement and for reporting the skipped codes.

        Returns:
            list[int]: the codes that were skipped, in the order they were given.
        """
        self.replaced = True

        rejected: list[int] = []
        for code, meaning in new_codes.items():
            entry = self._as_entry(meaning)
            if not self.is_replaceable(code) or entry is None:
                rejected.append(code)
                continue
            self._codes[code] = entry
        return rejected

    @staticmethod
    def _as_entry(meaning: object) -> CodeEntry | None:
        if isinstance(meaning, (tuple, list)) and len(meaning) == 2 and all(isinstance(m, str) for m in meaning):
            return CodeEntry(*meaning)
        return None
