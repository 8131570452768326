"""
deatomize: reconcile aborted chunked uploads against their version history.
"""

__version__ = "0.1.0"
