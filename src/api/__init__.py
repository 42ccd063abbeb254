"""HTTP API layer with FastAPI.

The application lifespan is the startup hook of the service: once startup
completes it logs the effective configuration through
``src.core.config_report``, unless the report is suppressed for the active
profiles.
"""
