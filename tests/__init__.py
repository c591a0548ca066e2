# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the CSV plugin:
# - test_locator.py, test_csv_reader.py: file discovery and CSV parsing
# - test_clusterer.py, test_schema_settings.py: schema grouping and settings
# - test_type_inference.py, test_record_streamer.py: typing and validation
# - test_services.py: Discover/Publish orchestration end to end
# - test_servicer.py, test_main.py: gRPC surface and process contract
# - test_models.py, test_config.py: models and settings
#
# Run tests with: poetry run pytest
# =============================================================================
