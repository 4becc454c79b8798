"""
Core modules for the wallet connector library.

This package contains:
- Exceptions and provider error codes (core.exceptions)
- Event emitter (core.events)
- Chain definitions (core.chains)
- Connector storage (core.storage)
- Logging and metrics (core.observability)
"""
