"""
Domain helpers for Pokémon lookups: validation, response shaping, the
lookup service and its errors.
"""
