"""MCP server for managing the worker nodes of a Kubernetes user cluster."""

__version__ = "0.3.0"
