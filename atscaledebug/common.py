"""Protocol constants, enumerations and wire structures shared by the debug agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

MAX_DATA_SIZE = 3000
SUPPORTED_JTAG_CHAINS = 1
NO_JTAG_CHAINS = 0
SUPPORTED_I2C_BUSES = 1
HEADER_SIZE = 4
MAX_PACKET_SIZE = MAX_DATA_SIZE + HEADER_SIZE
BUFFER_SIZE = 256
MAX_REG_NAME = 256
MAX_WAIT_CYCLES = 256
BROADCAST_MESSAGE_ORIGIN_ID = 7
MAX_FIELD_NAME_SIZE = 40

# Under 255 characters and free of dashes.
ASD_VERSION = "ASD_BMC_v1.6.0"

# AGENT_CONTROL_TYPE commands
NUM_IN_FLIGHT_MESSAGES_SUPPORTED_CMD = 3
OBTAIN_DOWNSTREAM_VERSION_CMD = 5
AGENT_CONFIGURATION_CMD = 8
MAX_DATA_SIZE_CMD = 13
SUPPORTED_JTAG_CHAINS_CMD = 14
SUPPORTED_I2C_BUSES_CMD = 15
SUPPORTED_REMOTE_PROBES_CMD = 16
REMOTE_PROBES_CONFIG_CMD = 17
LOOPBACK_CMD = 18
REMOTE_SPP_CONFIG_CMD = 19

# AGENT_CONFIGURATION_CMD types
AGENT_CONFIG_TYPE_LOGGING = 1
AGENT_CONFIG_TYPE_GPIO = 2
AGENT_CONFIG_TYPE_JTAG_SETTINGS = 3

JTAG_DRIVER_MODE_MASK = 0x01
JTAG_CHAIN_SELECT_MODE_MASK = 0x02

MAX_IXC_BUSES = 8
MAX_SPP_BUSES = 8
MAX_BUSES = MAX_IXC_BUSES + MAX_SPP_BUSES

# JTAG command encodings
WRITE_EVENT_CONFIG = 0
WRITE_CFG_MIN = 1
WRITE_CFG_MAX = 6
WRITE_CFG_MASK = 0x7F
WRITE_PINS = 7
WRITE_PIN_MASK = 0x7F
SCAN_CHAIN_SELECT = 0x40
SCAN_CHAIN_SELECT_MASK = 0xF
READ_STATUS_MIN = 8
READ_STATUS_MAX = 0xF
READ_STATUS_MASK = 0x7
READ_STATUS_PIN_MASK = 0x7F
WAIT_CYCLES_TCK_DISABLE = 0x10
WAIT_CYCLES_TCK_ENABLE = 0x11
WAIT_PRDY = 0x12
CLEAR_TIMEOUT = 0x13
TAP_RESET = 0x14
WAIT_SYNC = 0x19
WAIT_SYNC_CMD_LENGTH = 4
TAP_STATE_MIN = 0x20
TAP_STATE_MAX = 0x2F
TAP_STATE_MASK = 0xF
WRITE_SCAN_MIN = 0x40
WRITE_SCAN_MAX = 0x7F
READ_SCAN_MIN = 0x80
READ_SCAN_MAX = 0xBF
READ_WRITE_SCAN_MIN = 0xC0
READ_WRITE_SCAN_MAX = 0xFF
SCAN_LENGTH_MASK = 0x3F

# I2C command encodings
ASD_I2C_BUFFER_LEN = 15
I2C_WRITE_CFG_BUS_SELECT = 1
I2C_WRITE_CFG_SCLK = 2
I2C_READ_MIN = 0x20
I2C_READ_MAX = 0x3F
I2C_LENGTH_MASK = 0xF
I2C_CONTINUE_BIT_MASK = 0x10
I2C_ADDRESS_MASK = 0xFE
I2C_FORCE_STOP_MASK = 0x1
I2C_ADDRESS_ACK = 0x80
I2C_WRITE_MIN = 0x60
I2C_WRITE_MAX = 0x7F

# SPP command encodings
SPP_CFG_MIN = 0x00
SPP_CFG_MAX = 0x0F
SPP_CFG_BUS_SELECT = 0x00
MAX_SPP_BUS_DEVICES = 8
SPP_SEND = 0x10
SPP_SEND_COMMAND_SIZE = 4
SPP_RECEIVE = 0x20
SPP_RECEIVE_COMMAND_SIZE = 4
SPP_SEND_CMD = 0x30
SPP_SEND_CMD_COMMAND_SIZE = 5
SPP_SEND_RECEIVE_CMD = 0x40
SPP_SEND_RECEIVE_CMD_COMMAND_SIZE = 7
SPP_SET_SIM_DATA_CMD = 0x50
SPP_SET_SIM_DATA_CMD_COMMAND_SIZE = 3
SPP_XFER_LENGTH_MSB_MASK = 0x0F
SPP_XFER_LENGTH_LSB_MASK = 0xFF
SPP_CMD_MASK = 0xF0

NUM_GPIOS = 14
NUM_DBUS_FDS = 1


class AsdEvent(IntEnum):
    PLRSTASSERT = 1
    PLRSTDEASSRT = 2
    PRDY_EVENT = 3
    PWRRESTORE = 4
    PWRFAIL = 5
    XDP_PRESENT = 6
    MBP = 7
    PWRRESTORE2 = 8
    PWRFAIL2 = 9
    PWRRESTORE3 = 10
    PWRFAIL3 = 11
    RSV1 = 12
    RSV2 = 13
    BPK = 14
    NONE = 15


class WriteConfig(IntEnum):
    JTAG_FREQ = 1
    DR_PREFIX = 2
    DR_POSTFIX = 3
    IR_PREFIX = 4
    IR_POSTFIX = 5
    PRDY_TIMEOUT = 6


class HeaderType(IntEnum):
    AGENT_CONTROL = 0
    JTAG = 1
    PROBE_MODE = 2
    DMA = 3
    HARDWARE_LOG_EVENT = 5
    I2C = 6
    SPP = 7


class Pin(IntEnum):
    MIN = -1
    PWRGOOD = 0
    PREQ = 1
    RESET_BUTTON = 2
    POWER_BUTTON = 3
    EARLY_BOOT_STALL = 4
    SYS_PWR_OK = 5
    PRDY = 6
    TCK_MUX_SELECT = 7
    MAX = 8


class JtagChainSelectMode(IntEnum):
    SINGLE = 1
    MULTI = 2


class ScanChain(IntEnum):
    CHAIN_0 = 0
    CHAIN_1 = 1
    MAX = 2


class AsdError(IntEnum):
    SUCCESS = 0
    MSG_CRYPY_NOT_SUPPORTED = 0x25
    FAILURE_INIT_JTAG_HANDLER = 0x26
    FAILURE_INIT_I2C_HANDLER = 0x27
    FAILURE_DEINIT_JTAG_HANDLER = 0x28
    MSG_NOT_SUPPORTED = 0x29
    FAILURE_PROCESS_JTAG_MSG = 0x2A
    FAILURE_PROCESS_I2C_MSG = 0x2B
    FAILURE_PROCESS_I2C_LOCK = 0x2C
    I2C_MSG_NOT_SUPPORTED = 0x2D
    FAILURE_REMOVE_I2C_LOCK = 0x2E
    FAILURE_HEADER_SIZE = 0x2F
    FAILURE_XDP_PRESENT = 0x30
    FAILURE_INIT_VPROBE_HANDLER = 0x31
    FAILURE_INIT_SPP_HANDLER = 0x3C
    FAILURE_PROCESS_SPP_MSG = 0x3D
    FAILURE_PROCESS_SPP_LOCK = 0x3E
    FAILURE_REMOVE_SPP_LOCK = 0x3F
    SPP_MSG_NOT_SUPPORTED = 0x40
    UNKNOWN_ERROR = 0x7F
    PACKET_CONTINUATION = 0x80


class IpcLogType(IntEnum):
    MIN = -1
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4
    OFF = 5
    MAX = 6


class BusConfigType(IntEnum):
    BUS_CONFIG_NOT_ALLOWED = 0
    BUS_CONFIG_I2C = 1
    BUS_CONFIG_I3C = 2
    BUS_CONFIG_SPP = 3


class JtagDriverMode(IntEnum):
    SOFTWARE = 0
    HARDWARE = 1


def _check_bits(name: str, value: int, bits: int) -> None:
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{name} must fit in {bits} bits, got {value}")


def _check_length(name: str, values, expected: int) -> None:
    if len(values) != expected:
        raise ValueError(f"{name} must hold {expected} entries, got {len(values)}")


@dataclass
class MessageHeader:
    """The four-byte header that starts every protocol message."""

    origin_id: int = 0
    reserved: int = 0
    enc_bit: int = 0
    type: int = HeaderType.AGENT_CONTROL
    size: int = 0
    tag: int = 0
    cmd_stat: int = 0

    def __post_init__(self) -> None:
        _check_bits("origin_id", self.origin_id, 3)
        _check_bits("reserved", self.reserved, 1)
        _check_bits("enc_bit", self.enc_bit, 1)
        _check_bits("type", self.type, 3)
        _check_bits("size", self.size, 13)
        _check_bits("tag", self.tag, 3)
        _check_bits("cmd_stat", self.cmd_stat, 8)

    def to_bytes(self) -> bytes:
        """Pack the header into its wire form."""
        first = self.origin_id | (self.reserved << 3) | (self.enc_bit << 4) | (self.type << 5)
        third = (self.size >> 8) | (self.tag << 5)
        return bytes((first, self.size & 0xFF, third, self.cmd_stat))

    @classmethod
    def from_bytes(cls, data: bytes) -> MessageHeader:
        """Unpack a header from the first four bytes of ``data``."""
        if len(data) < HEADER_SIZE:
            raise ValueError(f"header needs {HEADER_SIZE} bytes, got {len(data)}")
        first, size_lsb, third, cmd_stat = data[:HEADER_SIZE]
        return cls(
            origin_id=first & 0x07,
            reserved=(first >> 3) & 0x01,
            enc_bit=(first >> 4) & 0x01,
            type=(first >> 5) & 0x07,
            size=((third & 0x1F) << 8) | size_lsb,
            tag=(third >> 5) & 0x07,
            cmd_stat=cmd_stat,
        )


@dataclass
class AsdMessage:
    """A header followed by ``header.size`` bytes of payload."""

    header: MessageHeader = field(default_factory=MessageHeader)
    buffer: bytes = b""

    def __post_init__(self) -> None:
        self.buffer = bytes(self.buffer)
        if len(self.buffer) > MAX_DATA_SIZE:
            raise ValueError(f"payload exceeds {MAX_DATA_SIZE} bytes")
        if len(self.buffer) != self.header.size:
            raise ValueError(
                f"header size {self.header.size} does not match payload length {len(self.buffer)}"
            )

    def to_bytes(self) -> bytes:
        """Serialise header and payload."""
        return self.header.to_bytes() + self.buffer

    @classmethod
    def from_bytes(cls, data: bytes) -> AsdMessage:
        """Parse a message; bytes beyond the declared size are ignored."""
        header = MessageHeader.from_bytes(data)
        if header.size > MAX_DATA_SIZE:
            raise ValueError(f"declared size {header.size} exceeds {MAX_DATA_SIZE}")
        end = HEADER_SIZE + header.size
        if len(data) < end:
            raise ValueError(f"message needs {end} bytes, got {len(data)}")
        return cls(header=header, buffer=bytes(data[HEADER_SIZE:end]))


@dataclass
class RemoteLoggingConfig:
    """Remote logging level and stream selection packed into one byte."""

    logging_level: int = 0
    logging_stream: int = 0

    def __post_init__(self) -> None:
        _check_bits("logging_level", self.logging_level, 3)
        _check_bits("logging_stream", self.logging_stream, 3)

    def to_byte(self) -> int:
        return self.logging_level | (self.logging_stream << 3)

    @classmethod
    def from_byte(cls, value: int) -> RemoteLoggingConfig:
        _check_bits("value", value, 8)
        return cls(logging_level=value & 0x07, logging_stream=(value >> 3) & 0x07)


def _default_bus_types() -> list[BusConfigType]:
    return [BusConfigType.BUS_CONFIG_NOT_ALLOWED] * MAX_BUSES


def _default_bus_map() -> list[int]:
    return [0] * MAX_BUSES


@dataclass
class BusOptions:
    """Bus selections given on the command line."""

    enable_i2c: bool = False
    enable_i3c: bool = False
    enable_spp: bool = False
    bus_config_map: list[int] = field(default_factory=_default_bus_map)
    bus_config_type: list[BusConfigType] = field(default_factory=_default_bus_types)
    bus: int = 0

    def __post_init__(self) -> None:
        _check_length("bus_config_map", self.bus_config_map, MAX_BUSES)
        _check_length("bus_config_type", self.bus_config_type, MAX_BUSES)
        _check_bits("bus", self.bus, 8)


@dataclass
class I2cMessage:
    """One I2C transfer segment."""

    read: bool = False
    force_stop: bool = False
    address: int = 0
    length: int = 0
    buffer: bytes = b""

    def __post_init__(self) -> None:
        self.buffer = bytes(self.buffer)
        _check_bits("address", self.address, 8)
        if not 0 <= self.length <= ASD_I2C_BUFFER_LEN:
            raise ValueError(f"length must be between 0 and {ASD_I2C_BUFFER_LEN}")
        if len(self.buffer) > ASD_I2C_BUFFER_LEN:
            raise ValueError(f"buffer exceeds {ASD_I2C_BUFFER_LEN} bytes")


@dataclass
class JtagConfig:
    mode: JtagDriverMode = JtagDriverMode.SOFTWARE
    chain_mode: JtagChainSelectMode = JtagChainSelectMode.SINGLE
    xdp_fail_enable: bool = False


@dataclass
class BusConfig:
    enable_i2c: bool = False
    enable_i3c: bool = False
    enable_spp: bool = False
    default_bus: int = 0
    bus_config_type: list[BusConfigType] = field(default_factory=_default_bus_types)
    bus_config_map: list[int] = field(default_factory=_default_bus_map)

    def __post_init__(self) -> None:
        _check_length("bus_config_map", self.bus_config_map, MAX_BUSES)
        _check_length("bus_config_type", self.bus_config_type, MAX_BUSES)
        _check_bits("default_bus", self.default_bus, 8)


def _default_log_map() -> list[IpcLogType]:
    return [
        IpcLogType.TRACE,
        IpcLogType.DEBUG,
        IpcLogType.INFO,
        IpcLogType.WARNING,
        IpcLogType.ERROR,
        IpcLogType.OFF,
    ]


@dataclass
class Config:
    """Agent configuration."""

    jtag: JtagConfig = field(default_factory=JtagConfig)
    remote_logging: RemoteLoggingConfig = field(default_factory=RemoteLoggingConfig)
    ipc_asd_log_map: list[IpcLogType] = field(default_factory=_default_log_map)
    buscfg: BusConfig = field(default_factory=BusConfig)

    def __post_init__(self) -> None:
        _check_length("ipc_asd_log_map", self.ipc_asd_log_map, 6)