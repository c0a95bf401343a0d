"""
DemoApp HTTP API

This package provides the HTTP layer for demoapp and the wiring that
connects it to its services.

Architecture:
- server.py: FastAPI application setup (composition root)
- config.py: Service configuration management
- services.py: Value service capability and the service registry
- value.py: Value endpoint
- testing.py: In-process test server with overridable registrations
"""

__version__ = "0.1.0"
