"""
Caching package.

Holds the in-process cache used to reduce load on PokeAPI and the helper
that warms a running service. Prefer short-lived entries and explicit
invalidation.
"""
