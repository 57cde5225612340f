"""Pokémon Abilities service."""
