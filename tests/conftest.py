"""
Shared pytest fixtures for polycache tests.

This module provides:
- structlog / settings cache reset between tests
- Ready-made in-process stores (memory, weighted)
"""

import sys
from pathlib import Path

import pytest
import structlog

# Ensure polycache package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from polycache.logging import clear_context
from polycache.settings import clear_settings_cache
from polycache.store.memory import InMemoryCache, MemoryStore
from polycache.store.weighted import WeightedCache, WeightedStore


@pytest.fixture(autouse=True)
def _reset_ambient_state():
    """Reset structlog configuration and cached settings after each test."""
    yield
    structlog.reset_defaults()
    clear_context()
    clear_settings_cache()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore(InMemoryCache(max_size=100))


@pytest.fixture
def weighted_store() -> WeightedStore:
    return WeightedStore(WeightedCache(max_cost=1_000))
