"""
Scribe - users and their posts behind a bearer-token trust boundary.
"""

__version__ = "0.1.0"
