"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Extension identity, XML namespace, storage defaults
- exceptions: Custom exception hierarchy with explicit error kinds
"""
