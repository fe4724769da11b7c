# atscaledebug

Building blocks for an At-Scale Debug (ASD) server: the protocol's message
layout and enumerations, and the external network layer that accepts
debugger clients over plain TCP or TLS.

## Installation

```
pip install atscaledebug
```

There are no runtime dependencies beyond the standard library. TLS support
uses the standard `ssl` module.

## What is inside

- `atscaledebug.common`: protocol constants and enumerations (`AsdEvent`,
  `HeaderType`, `WriteConfig`, `Pin`, `JtagChainSelectMode`, `ScanChain`,
  `AsdError`, `IpcLogType`, `BusConfigType`, `JtagDriverMode`) and the wire
  structures `MessageHeader`, `AsdMessage` and `RemoteLoggingConfig`, each
  with byte-level encoding and decoding (`to_bytes`/`from_bytes`,
  `to_byte`/`from_byte`). Also the records `I2cMessage`, `JtagConfig`,
  `BusConfig`, `BusOptions` and `Config`. Field values that do not fit their
  bit widths or lengths raise `ValueError`.
- `atscaledebug.logdefs`: `LogLevel`, `LogStream`, `LogOption` and the
  helpers `level_to_string` and `stream_to_string`.
- `atscaledebug.transport`: `Connection`, `HandlerType`, `NetworkError`, the
  `NetworkHandler` interface and the unencrypted `TcpHandler`.
- `atscaledebug.tls`: `create_server_context` and `TlsHandler`. The context
  accepts TLS 1.2 and newer, disables compression, prefers the server's
  cipher order, limits the TLS 1.2 cipher list to ECDHE AES-256-GCM suites
  and selects the `secp384r1` curve. The handshake on accept times out after
  three seconds.
- `atscaledebug.network`: `ExtNet`, which opens an IPv6 listening socket
  (optionally bound to one network device), accepts clients and routes reads
  and writes through the chosen handler.

## Example

```python
from atscaledebug.common import AsdMessage, HeaderType, MessageHeader

header = MessageHeader(type=HeaderType.JTAG, size=3, cmd_stat=0)
message = AsdMessage(header=header, buffer=b"\x01\x02\x03")
raw = message.to_bytes()
assert AsdMessage.from_bytes(raw) == message
```

Serving clients:

```python
from atscaledebug.network import ExtNet
from atscaledebug.transport import HandlerType

net = ExtNet(HandlerType.NON_ENCRYPT, handler_data="", max_sessions=1)
listener = net.open_external_socket(None, 5123)
conn = net.accept_connection(listener)
data, more_pending = net.recv(conn, 4096)
net.send(conn, data)
net.close_client(conn)
```

For TLS, pass `HandlerType.TLS` and the path of a PEM file holding both the
certificate and the private key as `handler_data`.

Failures raise `atscaledebug.transport.NetworkError`.

## What this package does not do

It has no server command and no main loop: there is no session handling,
client authentication, or processing of JTAG, I2C or SPP messages against
real hardware. It provides the protocol definitions and the network
transport that such a server would be built on.

## Running the tests

```
pip install "atscaledebug[test]"
pytest
```