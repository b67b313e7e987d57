# =============================================================================
# tests/ - Test Suite
# =============================================================================
# Unit and API tests. OpenAI and Supabase are always mocked.
#
# Run with:
#   pytest tests/ -v
# =============================================================================
