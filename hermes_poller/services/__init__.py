"""Service modules"""
from .scheduler import PollingScheduler

__all__ = ["PollingScheduler"]
