"""Shared fixtures and helpers for tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from protolink.config import Settings
from protolink.vfs import VirtualFileTree

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag every test under tests/unit as "unit"
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tree() -> Iterator[VirtualFileTree]:
    """Return a fresh virtual file tree, closed after the test."""
    with VirtualFileTree() as t:
        yield t


@pytest.fixture
def settings() -> Settings:
    """Return default settings, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def order_proto() -> str:
    """A proto3 schema importing two catalog entries."""
    return """
syntax = "proto3";

package com.example.shop;

import "google/type/money.proto";
import "google/type/date.proto";

option java_package = "com.example.shop";

message Order {
  string id = 1;
  google.type.Money total = 2;
  google.type.Date placed_on = 3;
  repeated LineItem items = 4;
  Status status = 5;

  message LineItem {
    string sku = 1;
    int32 quantity = 2;
    google.type.Money unit_price = 3;
  }
}

enum Status {
  STATUS_UNSPECIFIED = 0;
  PLACED = 1;
  SHIPPED = 2;
}

service OrderService {
  rpc GetOrder (GetOrderRequest) returns (Order);
  rpc WatchOrders (stream GetOrderRequest) returns (stream Order) {}
}

message GetOrderRequest {
  string id = 1;
}
"""
