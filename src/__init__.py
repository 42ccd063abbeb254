"""Config Reporter - a FastAPI service that reports its configuration at startup.

Architecture Overview:
- **API Layer**: FastAPI application and its lifespan (the startup hook)
- **Core Layer**: Settings, property sources, the configuration environment,
  the startup report, logging and exceptions

Once the application has started, every configuration property known to the
service is logged in sorted order, with values of sensitive-looking
properties masked.
"""
