# app/errors.py


class TypingEngineError(Exception):
    """Base class for engine faults (not typing mistakes)."""


class EmptyTargetError(TypingEngineError, ValueError):
    pass


class InvalidKeystrokeError(TypingEngineError, ValueError):
    pass


class SessionClosedError(TypingEngineError):
    """Raised when input arrives after the session has completed."""


class ConfigError(TypingEngineError):
    pass


class ReportFormatError(TypingEngineError):
    pass


class TextSourceError(TypingEngineError):
    pass
