"""
Core package.

Holds process-wide configuration loaded once at startup.
"""
