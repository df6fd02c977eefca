"""tasktrack: task/event query and aggregate-assembly engine."""

__version__ = "0.3.0"
