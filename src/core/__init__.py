"""Core infrastructure package for shared application functionality.

- **config**: Centralized configuration management with environment support
- **property_sources**: Named sources of configuration properties
- **environment**: Merged property lookup with placeholder resolution
- **config_report**: Startup report of the effective configuration
- **exceptions**: Structured exception hierarchy with error codes
- **logging**: Loguru setup with console and JSON output
"""
