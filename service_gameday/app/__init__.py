"""
Gameday gateway service package.

The gateway fronts the MLB Stats API for the browser client:
- Caching: per-resource TTL cache, failures never cached
- Enrichment: batched people lookups with per-batch failure isolation
- Aggregation: concurrent per-game feed + roster enrichment

Structure:
- app.main: FastAPI app, routes, and wiring.
- app.adapters: HTTP client for the Stats API.
- app.caching: TTL cache and the cached resource resolver.
- app.enrichment: batch engine, per-game aggregator, settle-all fan-out.
- app.domain: data model and nationality lookup.
"""
