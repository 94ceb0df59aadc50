"""
Test suite for the order funnel backend.

Test categories:
- unit: services and models with fake remote functions and in-memory SQLite
- api: the FastAPI app end to end through httpx / TestClient
"""
