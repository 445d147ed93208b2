"""
muxops - a task runner for multi-service development stacks.

Generates protobuf bindings, installs dependencies, runs tests with
coverage and drives the container stack for services written in Go and
Python.
"""

try:
    from importlib.metadata import version

    __version__ = version("muxops")
except Exception:
    __version__ = "0.1.0"

__all__ = ["__version__"]
