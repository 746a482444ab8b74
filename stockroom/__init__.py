"""Stockroom API: authentication, user management and RBAC for the inventory backend."""

__version__ = "0.1.0"
