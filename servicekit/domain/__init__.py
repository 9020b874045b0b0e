"""
Domain layer package.

Contains the pure rules of the response layer: which wire format a
request gets and what an error response contains.
No framework imports, no IO, no side effects.
"""
