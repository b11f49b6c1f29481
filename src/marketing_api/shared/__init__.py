"""
Shared infrastructure: configuration-aware logging, database sessions,
error taxonomy, response envelope and request middleware.
"""
