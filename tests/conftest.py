"""Shared fixtures for conference_companion tests."""

import httpx
import pytest
from payloads import FakeCMS, make_config

from conference_companion.client import CMSClient
from conference_companion.settings import CompanionConfig


@pytest.fixture
def config() -> CompanionConfig:
    return make_config()


@pytest.fixture
def fake_cms() -> FakeCMS:
    return FakeCMS()


@pytest.fixture
def client(config: CompanionConfig, fake_cms: FakeCMS) -> CMSClient:
    return CMSClient(config, transport=httpx.MockTransport(fake_cms.handle))
