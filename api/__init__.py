"""
FastAPI API package for the annotation relay.

Exposes:
- `main`   : `create_app` factory with `/hana/info` and health/graph endpoints
- `config` : `Settings` and the `RelayConfig` handed to the factory
- `auth`   : optional HTTP Basic gate
"""
