"""Serial bridge and MCP server for the Tiva C clock/ADC board."""

__version__ = "0.1.0"
