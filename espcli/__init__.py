"""Configuration, argument parsing, serial port, partition and monitor-output helpers for Espressif device tools."""

__version__ = "0.1.0"