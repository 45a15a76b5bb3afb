"""
Job Board Backend.

Core components:
- services: identity, job catalog, scoring, application workflow
- agents: LLM evaluator used by scoring
- db: tables and the Database handle
- api: FastAPI app and routers
"""
