# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Image Agent backend:
# - fakes.py: In-memory store, provider and storage doubles
# - test_models.py: Unit tests for Pydantic model validation
# - test_*_generation.py, test_prediction_poller.py, test_schedule_processor.py:
#   service behaviour against the fakes
# - test_replicate_client.py, test_supabase_client.py: client wrappers
# - test_api.py: Endpoint tests through TestClient
#
# Run tests with: pytest
# =============================================================================
