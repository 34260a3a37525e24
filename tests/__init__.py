"""
Automation Connectors - Test Suite Package.

Pytest unit tests for configuration, the Jira and Zephyr connectors and
scenario reporting. HTTP sessions are mocked throughout.
"""
