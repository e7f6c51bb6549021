"""Shared test fixtures for the RepoPush test suite.

Job state is in-memory, so every test gets a fresh registry. GitHub is
replaced by FakeGitHubClient through the client factory dependency.
"""

import os

# Quiet, deterministic settings before any app imports.
os.environ["LOG_FORMAT"] = "text"
os.environ["GITHUB_MAX_RETRIES"] = "0"
os.environ["ENVIRONMENT"] = "development"

import pytest
from fastapi.testclient import TestClient

from repopush.dependencies import get_client_factory
from repopush.main import app
from repopush.repositories.job_registry import JobRegistry
from tests.fakes import FakeGitHubClient


@pytest.fixture()
def registry() -> JobRegistry:
    return JobRegistry()


@pytest.fixture()
def github() -> FakeGitHubClient:
    """Recording GitHub double with an accessible, empty repository."""
    return FakeGitHubClient()


@pytest.fixture()
def client(github):
    """FastAPI TestClient with GitHub calls routed to the fake client."""
    app.dependency_overrides[get_client_factory] = lambda: github.factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_job_data(**overrides) -> dict:
    """Factory for ``job_data`` payloads."""
    payload = {
        "github_token": "ghp_testtoken000000000000000000",
        "repository_url": "https://github.com/octo/demo",
        "target_branch": "main",
        "preserve_structure": True,
        "overwrite_files": False,
    }
    payload.update(overrides)
    return payload
