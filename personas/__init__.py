"""Personas ABM: citizen and foreigner records managed over a REST API."""

__version__ = "0.1.0"
