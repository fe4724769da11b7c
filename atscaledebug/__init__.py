"""At-Scale Debug protocol definitions, log definitions and TCP/TLS network transports."""

__version__ = "1.6.0"
__all__ = ["common", "logdefs", "transport", "tls", "network"]