"""Reporting module - run reports."""

from .json_reporter import JsonReporter

__all__ = ["JsonReporter"]
