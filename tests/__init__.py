# tests/__init__.py

"""
Test suite of the hospital equipment tracker (pytest + pytest-asyncio + httpx).

- `conftest.py`: shared fixtures (in-memory storage, logged-in clients per role).
- `test_main.py`: application level endpoints and error handling.
- `test_storage.py`: storage implementations, side by side.
- `domains/`: endpoint tests per domain.
"""
