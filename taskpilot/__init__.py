"""taskpilot: executes model-proposed actions against Asana."""

__version__ = "0.1.0"
