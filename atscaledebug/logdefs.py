"""Log levels, streams and options used throughout the agent."""

from __future__ import annotations

from enum import IntEnum, IntFlag


class LogLevel(IntEnum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4
    OFF = 5


class LogStream(IntFlag):
    NONE = 0
    NETWORK = 1
    JTAG = 2
    PINS = 4
    I2C = 8
    TEST = 16
    DAEMON = 32
    SDK = 64
    SPP = 128
    ALL = 0xFFFF


class LogOption(IntEnum):
    NONE = 0
    NO_REMOTE = 1


_LEVEL_NAMES = ("Trace", "Debug", "Info", "Warning", "Error", "Off")

_STREAM_NAMES = {
    LogStream.NONE: "None",
    LogStream.NETWORK: "Network",
    LogStream.JTAG: "JTAG",
    LogStream.PINS: "Pins",
    LogStream.I2C: "I2C",
    LogStream.TEST: "Test",
    LogStream.DAEMON: "Daemon",
    LogStream.SDK: "SDK",
    LogStream.SPP: "SPP",
    LogStream.ALL: "All",
}


def level_to_string(level: int) -> str:
    """Return the display name of a log level."""
    if not 0 <= int(level) < len(_LEVEL_NAMES):
        raise ValueError(f"unknown log level {level}")
    return _LEVEL_NAMES[int(level)]


def stream_to_string(stream: int) -> str:
    """Return the name of a single stream flag, or "Unknown-Stream"."""
    return _STREAM_NAMES.get(int(stream), "Unknown-Stream")