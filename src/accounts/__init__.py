"""
accounts: user accounts backend.

Validation of user-supplied account data, JSON responses, and the mapping of
application errors onto HTTP status codes.
"""
