"""Shared fixtures for procexplorer tests."""

import pytest
from fakes import FakeScreen, make_tasks

from procexplorer.models import TaskRecord


@pytest.fixture
def screen() -> FakeScreen:
    return FakeScreen()


@pytest.fixture
def tasks() -> list[TaskRecord]:
    return make_tasks(50)
