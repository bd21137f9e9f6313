"""Prometheus file-based service discovery for AWS Classic Load Balancers."""

__version__ = "0.1.0"
