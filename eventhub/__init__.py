"""EventHub web and command-line client for the event-management API."""

__version__ = "1.0.0"
