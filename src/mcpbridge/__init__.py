"""Keep a host's plugin collection in sync with the tools an MCP bridge exposes."""

__version__ = "0.1.0"
