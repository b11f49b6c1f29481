"""
Authentication and authorization: password hashing, access tokens,
the bearer-token gate, role gates and the account service.
"""
