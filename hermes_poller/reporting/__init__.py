"""Reporting modules."""
from .console import ConsoleReporter

__all__ = ["ConsoleReporter"]
