"""HTTP request abstraction consumed by rule matching.

Immutable metadata only: method, path, host, scheme, headers and query
parameters. Bodies are never read during routing.
"""
