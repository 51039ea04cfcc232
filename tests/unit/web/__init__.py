"""Unit tests for ProdCalc web route modules.

Testing pattern:
    - Use FastAPI's TestClient against prodcalc.web.app
    - Swap get_repository for an InMemoryOrderRepository via dependency_overrides
    - Check JSON shapes, error mapping and export payloads
"""
