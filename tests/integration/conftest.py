"""
Integration Test Configuration

Provides fixtures and configuration for integration tests.
When running in CI environment (CI=true), slow tests are automatically skipped.
Tests that call the live directory (marked integration) only run when
RMP_LIVE_TESTS=true.
"""

import os
import pytest


@pytest.fixture
def is_ci_environment() -> bool:
    """
    Detect if tests are running in CI environment.

    Returns:
        True if CI environment variable is set to 'true'
    """
    return os.getenv("CI", "").lower() == "true"


@pytest.fixture
def live_directory_enabled() -> bool:
    """True if RMP_LIVE_TESTS is set to 'true'."""
    return os.getenv("RMP_LIVE_TESTS", "").lower() == "true"


@pytest.fixture(autouse=True)
def skip_slow_tests_in_ci(request, is_ci_environment):
    """
    Automatically skip slow integration tests when running in CI.

    Args:
        request: pytest request fixture
        is_ci_environment: Fixture indicating CI environment
    """
    if is_ci_environment and request.node.get_closest_marker("slow"):
        pytest.skip("Skipping slow test in CI environment")


@pytest.fixture(autouse=True)
def skip_live_tests_unless_enabled(request, live_directory_enabled):
    """Skip tests that hit the real directory unless explicitly enabled."""
    if request.node.get_closest_marker("integration") and not live_directory_enabled:
        pytest.skip("Set RMP_LIVE_TESTS=true to run live directory tests")
