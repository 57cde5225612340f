"""
Pokémon Abilities API service package.

The service fronts PokeAPI for ability lookups:
- Validation: names are trimmed, lower-cased and pattern checked
- Caching: in-process TTL cache with per-key request coalescing
- Circuit-breaking and retries for resilient upstream calls

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.adapters: HTTP client for PokeAPI.
- app.caching: Cache manager and remote cache warming.
- app.domain: Validation, response shaping and the lookup service.
- app.client / app.cli: Terminal consumer of the API.
"""
