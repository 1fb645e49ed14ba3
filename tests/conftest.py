"""Shared pytest fixtures for Aesthetic Lab tests."""

import asyncio
import itertools
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from aestheticlab.core.catalog import AestheticParameter
from aestheticlab.core.config import AestheticLabConfig
from aestheticlab.core.generation_client import GenerationFailure, ImagePayload
from aestheticlab.core.models import GeneratedImage, GenerationResult
from aestheticlab.core.storage import JsonFileStore
from aestheticlab.ui.session import LabSession


class FakeImageProvider:
    """In-memory image provider.

    Returns the prompt text as the image bytes.  Prompts containing any of
    ``fail_on`` raise GenerationFailure; ``delays`` maps a prompt substring to
    a sleep in seconds so completion order can differ from request order.
    """

    def __init__(self, fail_on=(), delays=None, mime_type="image/png"):
        self.fail_on = tuple(fail_on)
        self.delays = dict(delays or {})
        self.mime_type = mime_type
        self.calls: list[str] = []
        self.completed: list[str] = []

    async def generate_image(self, prompt: str) -> ImagePayload:
        self.calls.append(prompt)
        for fragment, delay in self.delays.items():
            if fragment in prompt:
                await asyncio.sleep(delay)
        if any(fragment in prompt for fragment in self.fail_on):
            self.completed.append(prompt)
            raise GenerationFailure(f"Provider busy for: {prompt}")
        self.completed.append(prompt)
        return ImagePayload(data=prompt.encode("utf-8"), mime_type=self.mime_type)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> AestheticLabConfig:
    """Create a test configuration with a temporary data directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        AestheticLabConfig instance for testing
    """
    return AestheticLabConfig(
        _env_file=None,
        gemini_api_key="test-key",
        data_dir=temp_dir / "data",
        storage_backend="json",
        default_temperature=0.5,
    )


@pytest.fixture
def id_factory():
    """Deterministic identifier factory producing id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def fixed_clock():
    """Clock that always returns 2024-05-01 12:00:00."""
    return lambda: datetime(2024, 5, 1, 12, 0, 0)


@pytest.fixture
def fake_provider() -> FakeImageProvider:
    """Provider that always succeeds."""
    return FakeImageProvider()


@pytest.fixture
def make_provider():
    """Factory for FakeImageProvider instances with custom behaviour."""
    return FakeImageProvider


@pytest.fixture
def json_store(test_config: AestheticLabConfig) -> JsonFileStore:
    """JSON file store inside the test data directory."""
    return JsonFileStore(test_config.data_dir)


@pytest.fixture
def lab_session(test_config, fake_provider, json_store, id_factory, fixed_clock) -> LabSession:
    """LabSession with a fake provider, deterministic ids and a fixed clock."""
    return LabSession(
        test_config,
        fake_provider,
        json_store,
        new_id=id_factory,
        clock=fixed_clock,
    )


@pytest.fixture
def sample_generation() -> GenerationResult:
    """The 'a cat' Style batch with two unrated images."""
    return GenerationResult(
        id="gen-1",
        base_prompt="a cat",
        parameter=AestheticParameter.STYLE,
        variations=("Cyberpunk", "Ukiyo-e"),
        images=(
            GeneratedImage(
                id="img-1",
                src="data:image/png;base64,AAAA",
                prompt="a cat, Style: Cyberpunk",
                variation="Cyberpunk",
            ),
            GeneratedImage(
                id="img-2",
                src="data:image/png;base64,BBBB",
                prompt="a cat, Style: Ukiyo-e",
                variation="Ukiyo-e",
            ),
        ),
        timestamp="2024-05-01T12:00:00",
        temperature=0.5,
    )


@pytest.fixture
def test_client(test_config, fake_provider):
    """FastAPI TestClient with patched configuration and provider.

    The lifespan runs inside the ``with`` block, so the session and its
    persistence worker are live for the duration of the test.
    """
    from fastapi.testclient import TestClient

    from aestheticlab.api import main as api_main

    with patch.object(api_main, "config", test_config), patch.object(
        api_main, "GeminiImageProvider", return_value=fake_provider
    ):
        with TestClient(api_main.app) as client:
            yield client
