"""Inkpress — a minimal blogging service.

Users sign up, log in, and publish text posts. Anyone can read posts;
only a post's author can edit or delete it.
"""

__version__ = "0.1.0"
