"""Orchestrates declarative tests against a cluster resource API."""

__version__ = "0.1.0"
