"""DemoApp: a single-endpoint web service wired through an explicit service registry."""

__version__ = "0.1.0"
