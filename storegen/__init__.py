"""
storegen — build-time persistence code generation from marked Python types.
"""

__version__ = "0.1.0"
