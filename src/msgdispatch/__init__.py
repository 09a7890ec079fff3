"""msgdispatch - scheduled outbound message dispatcher."""

__version__ = "0.1.0"
