"""
Meeting Bot Package.
Joins online meetings as a guest and records them.
"""

__version__ = "1.0.0"
__author__ = "Meeting Bot Team"
