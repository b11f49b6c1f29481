"""
Marketing Dashboard API: user accounts and marketing campaigns behind
JWT authentication and role-based access control.
"""

__version__ = "0.1.0"
