"""Salsila backend.

Family-tree and social-network REST backend: users, authentication and the
persistence plumbing around them.
"""

__version__ = "0.1.0"
