"""
Automation Connectors - Core Package.

Support layer between test runs and the external test-management services:
- Configuration: framework defaults with project overrides.
- Exceptions: fatal AutomationException signal.
- Connectors: Jira and Zephyr Scale REST clients.
- Reporting: scenario outcome reporting and the pytest plugin.
"""

__version__ = "0.1.0"
