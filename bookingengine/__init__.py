"""
Availability and scheduling engine for a home-service booking platform.
"""

__version__ = "0.1.0"
