import pytest

from atscaledebug.common import (
    ASD_I2C_BUFFER_LEN,
    BROADCAST_MESSAGE_ORIGIN_ID,
    HEADER_SIZE,
    MAX_BUSES,
    MAX_DATA_SIZE,
    AsdMessage,
    BusConfig,
    BusOptions,
    Config,
    HeaderType,
    I2cMessage,
    IpcLogType,
    MessageHeader,
    RemoteLoggingConfig,
)


@pytest.mark.parametrize(
    "header",
    [
        MessageHeader(),
        MessageHeader(origin_id=BROADCAST_MESSAGE_ORIGIN_ID, reserved=1, enc_bit=1,
                      type=HeaderType.SPP, size=0x1FFF, tag=7, cmd_stat=0xFF),
        MessageHeader(origin_id=3, type=HeaderType.I2C, size=MAX_DATA_SIZE, tag=4, cmd_stat=0x80),
    ],
)
def test_header_round_trip(header):
    raw = header.to_bytes()
    assert len(raw) == HEADER_SIZE
    assert MessageHeader.from_bytes(raw) == header


def test_header_wire_layout():
    header = MessageHeader(origin_id=1, type=HeaderType.JTAG, size=0x123, tag=2, cmd_stat=0)
    assert header.to_bytes() == b"\x21\x23\x41\x00"


def test_header_origin_occupies_low_bits():
    raw = MessageHeader(origin_id=BROADCAST_MESSAGE_ORIGIN_ID).to_bytes()
    assert raw[0] & 0x07 == BROADCAST_MESSAGE_ORIGIN_ID
    assert raw[1:] == b"\x00\x00\x00"


@pytest.mark.parametrize(
    "kwargs",
    [{"origin_id": 8}, {"reserved": 2}, {"enc_bit": 2}, {"type": 8},
     {"size": 0x2000}, {"tag": 8}, {"cmd_stat": 256}, {"size": -1}],
)
def test_header_rejects_out_of_range(kwargs):
    with pytest.raises(ValueError):
        MessageHeader(**kwargs)


def test_header_from_short_data():
    with pytest.raises(ValueError):
        MessageHeader.from_bytes(b"\x00\x00\x00")


def test_message_round_trip():
    payload = bytes(range(10))
    msg = AsdMessage(MessageHeader(type=HeaderType.JTAG, size=len(payload)), payload)
    raw = msg.to_bytes()
    assert len(raw) == HEADER_SIZE + len(payload)
    assert AsdMessage.from_bytes(raw) == msg


def test_message_ignores_trailing_bytes():
    msg = AsdMessage(MessageHeader(size=2), b"ab")
    parsed = AsdMessage.from_bytes(msg.to_bytes() + b"extra")
    assert parsed.buffer == b"ab"


def test_message_truncated_payload():
    raw = MessageHeader(size=5).to_bytes() + b"abc"
    with pytest.raises(ValueError):
        AsdMessage.from_bytes(raw)


def test_message_declared_size_too_large():
    raw = MessageHeader(size=MAX_DATA_SIZE + 1).to_bytes() + bytes(MAX_DATA_SIZE + 1)
    with pytest.raises(ValueError):
        AsdMessage.from_bytes(raw)


def test_message_size_mismatch():
    with pytest.raises(ValueError):
        AsdMessage(MessageHeader(size=3), b"ab")


def test_message_payload_too_large():
    with pytest.raises(ValueError):
        AsdMessage(MessageHeader(size=MAX_DATA_SIZE + 1), bytes(MAX_DATA_SIZE + 1))


def test_remote_logging_byte():
    assert RemoteLoggingConfig(logging_level=4, logging_stream=2).to_byte() == 0x14


@pytest.mark.parametrize("value", [0, 1, 7, 8, 0x3F])
def test_remote_logging_round_trip(value):
    assert RemoteLoggingConfig.from_byte(value).to_byte() == value


def test_remote_logging_drops_high_bits():
    cfg = RemoteLoggingConfig.from_byte(0xC5)
    assert (cfg.logging_level, cfg.logging_stream) == (5, 0)


def test_remote_logging_rejects_invalid():
    with pytest.raises(ValueError):
        RemoteLoggingConfig(logging_level=8)
    with pytest.raises(ValueError):
        RemoteLoggingConfig.from_byte(256)


def test_bus_options_defaults_sized():
    opts = BusOptions()
    assert len(opts.bus_config_map) == MAX_BUSES
    assert len(opts.bus_config_type) == MAX_BUSES


def test_bus_options_wrong_length():
    with pytest.raises(ValueError):
        BusOptions(bus_config_map=[0] * (MAX_BUSES - 1))
    with pytest.raises(ValueError):
        BusConfig(bus_config_type=[])


def test_i2c_message_limits():
    msg = I2cMessage(read=True, address=0xA0, length=ASD_I2C_BUFFER_LEN,
                     buffer=bytes(ASD_I2C_BUFFER_LEN))
    assert msg.length == ASD_I2C_BUFFER_LEN
    with pytest.raises(ValueError):
        I2cMessage(buffer=bytes(ASD_I2C_BUFFER_LEN + 1))
    with pytest.raises(ValueError):
        I2cMessage(length=ASD_I2C_BUFFER_LEN + 1)


def test_config_log_map():
    cfg = Config()
    assert cfg.ipc_asd_log_map[0] == IpcLogType.TRACE
    assert cfg.ipc_asd_log_map[-1] == IpcLogType.OFF
    with pytest.raises(ValueError):
        Config(ipc_asd_log_map=[IpcLogType.INFO])


def test_config_defaults_independent():
    first, second = Config(), Config()
    first.buscfg.bus_config_map[0] = 3
    assert second.buscfg.bus_config_map[0] == 0