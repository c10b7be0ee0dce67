"""
Test Suite for the Bitter Melon aggregation engine.

Test Organization:
- conftest.py: Shared fixtures (per-test SQLite database, ledger, reference data)
- test_ledger.py: review writes and the statistics they refresh
- test_cascades.py: critic, feature and outlet deletion
- test_aggregation.py: recompute, drift detection and rebuild
- test_reviews_service.py: the functional facade, end to end

Running Tests:
    pip install -e ".[test]"
    pytest
    pytest tests/test_ledger.py -v
"""
