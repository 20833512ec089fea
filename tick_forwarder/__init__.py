"""Tick forwarder: sequence time & sales records and deliver them to a file or TCP peer."""

__version__ = "0.1.0"
