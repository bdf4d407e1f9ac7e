"""
Utility modules for the linkding CLI.

Error hierarchy, logging setup, secret redaction and terminal output
formatting.
"""
