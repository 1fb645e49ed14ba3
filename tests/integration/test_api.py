"""Integration tests for aestheticlab.api.main — FastAPI REST API endpoints.

All tests use the FastAPI TestClient with a fake image provider so that no
network access occurs.  The application lifespan runs for every test, so
the session and its persistence worker are live.  Tests cover:

- ``GET /api/config`` — Catalog, examples and defaults.
- ``GET /api/state`` and ``PUT /api/form`` — Form editing.
- ``POST /api/form/variations/toggle`` and ``POST /api/form/load``.
- ``POST /api/generate`` — Batch generation, validation and failure.
- ``/api/generations`` — History, selection, blueprints and image bytes.
- ``POST /api/images/rate`` — Rating toggles.
- ``/api/presets`` and ``/api/prompt-history`` — Saved configurations.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from aestheticlab.api import main as api_main


def _fill_form(client, prompt="a cat", variations=("Cyberpunk", "Ukiyo-e")):
    client.put("/api/form", json={"base_prompt": prompt})
    for variation in variations:
        client.post("/api/form/variations/toggle", json={"variation": variation})


def _generate(client, **kwargs) -> dict:
    _fill_form(client, **kwargs)
    resp = client.post("/api/generate")
    assert resp.status_code == 200
    return resp.json()["generation"]


@pytest.fixture
def failing_client(test_config, make_provider):
    """TestClient whose provider fails every Ukiyo-e request."""
    provider = make_provider(fail_on=("Ukiyo-e",))
    with patch.object(api_main, "config", test_config), patch.object(
        api_main, "GeminiImageProvider", return_value=provider
    ):
        with TestClient(api_main.app) as client:
            yield client


# ---------------------------------------------------------------------------
# Configuration and form tests.
# ---------------------------------------------------------------------------


class TestGetConfig:
    """Test GET /api/config — static configuration."""

    def test_config_lists_parameters(self, test_client):
        """Response should map every parameter to its labels."""
        resp = test_client.get("/api/config")
        assert resp.status_code == 200
        data = resp.json()
        assert set(data["parameters"]) == {"Style", "Lighting", "Composition"}
        assert "Ukiyo-e" in data["parameters"]["Style"]
        assert data["default_temperature"] == 0.5
        assert "version" in data

    def test_config_lists_examples(self, test_client):
        """Response should include the built-in examples."""
        examples = test_client.get("/api/config").json()["examples"]
        assert len(examples) == 5
        assert examples[0]["id"] == "cyberpunk-city-lighting"


class TestForm:
    """Test form endpoints."""

    def test_initial_state(self, test_client):
        """A fresh session has an empty form and nothing displayed."""
        data = test_client.get("/api/state").json()
        assert data["form"]["base_prompt"] == ""
        assert data["form"]["parameter"] == "Style"
        assert data["is_loading"] is False
        assert data["can_submit"] is False
        assert data["displayed_generation_id"] is None

    def test_update_form(self, test_client):
        """Fields present in the body are applied."""
        resp = test_client.put(
            "/api/form", json={"base_prompt": "a cat", "temperature": 0.7, "seed": 3}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["base_prompt"] == "a cat"
        assert data["temperature"] == 0.7
        assert data["seed"] == 3

    def test_clear_seed(self, test_client):
        """An explicit null clears the seed."""
        test_client.put("/api/form", json={"seed": 3})
        assert test_client.put("/api/form", json={"seed": None}).json()["seed"] is None

    def test_parameter_switch_prunes(self, test_client):
        """Switching parameter drops selections and lists new labels."""
        _fill_form(test_client)
        data = test_client.put("/api/form", json={"parameter": "Lighting"}).json()
        assert data["variations"] == []
        assert "Golden hour" in data["available_variations"]

    def test_invalid_temperature(self, test_client):
        """Temperature above 1.0 should be rejected with 422."""
        assert test_client.put("/api/form", json={"temperature": 1.5}).status_code == 422

    def test_invalid_parameter(self, test_client):
        """Unknown parameters should be rejected with 422."""
        assert test_client.put("/api/form", json={"parameter": "Colour"}).status_code == 422

    def test_toggle_variation(self, test_client):
        """Toggling selects and deselects; foreign labels are ignored."""
        first = test_client.post("/api/form/variations/toggle", json={"variation": "Cyberpunk"})
        assert first.json()["variations"] == ["Cyberpunk"]

        foreign = test_client.post("/api/form/variations/toggle", json={"variation": "Neon glow"})
        assert foreign.json()["variations"] == ["Cyberpunk"]

        second = test_client.post("/api/form/variations/toggle", json={"variation": "Cyberpunk"})
        assert second.json()["variations"] == []

    def test_load_example(self, test_client):
        """Loading an example copies it into the form."""
        resp = test_client.post(
            "/api/form/load", json={"source": "example", "id": "dramatic-coffee-photo"}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["parameter"] == "Lighting"
        assert data["seed"] == 42

    def test_load_unknown(self, test_client):
        """Unknown configurations return 404."""
        resp = test_client.post("/api/form/load", json={"source": "preset", "id": "nope"})
        assert resp.status_code == 404

    def test_load_invalid_source(self, test_client):
        """Unknown sources are rejected with 422."""
        resp = test_client.post("/api/form/load", json={"source": "gallery", "id": "x"})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Generation tests.
# ---------------------------------------------------------------------------


class TestGenerate:
    """Test POST /api/generate — batch generation."""

    def test_generate_success(self, test_client, fake_provider):
        """A valid form yields one image per variation in order."""
        generation = _generate(test_client)

        assert generation["base_prompt"] == "a cat"
        assert generation["parameter"] == "Style"
        assert [img["variation"] for img in generation["images"]] == ["Cyberpunk", "Ukiyo-e"]
        assert [img["prompt"] for img in generation["images"]] == fake_provider.calls
        assert all(img["rating"] == 0 for img in generation["images"])

        state = test_client.get("/api/state").json()
        assert state["displayed_generation_id"] == generation["id"]
        assert state["is_loading"] is False

    def test_generate_blank_prompt(self, test_client, fake_provider):
        """A blank prompt returns 400 and sends nothing."""
        test_client.post("/api/form/variations/toggle", json={"variation": "Cyberpunk"})

        resp = test_client.post("/api/generate")

        assert resp.status_code == 400
        assert "base prompt" in resp.json()["detail"]
        assert fake_provider.calls == []

    def test_generate_without_variations(self, test_client):
        """A form without variations returns 400."""
        test_client.put("/api/form", json={"base_prompt": "a cat"})
        resp = test_client.post("/api/generate")
        assert resp.status_code == 400

    def test_generate_failure(self, failing_client):
        """A failed batch returns 502 and keeps the prompt history entry."""
        _fill_form(failing_client)

        resp = failing_client.post("/api/generate")

        assert resp.status_code == 502
        assert "couldn't generate the images" in resp.json()["detail"]
        assert failing_client.get("/api/generations").json()["generations"] == []
        assert len(failing_client.get("/api/prompt-history").json()["entries"]) == 1
        assert failing_client.get("/api/generations/current").json()["generation"] is None
        assert failing_client.get("/api/state").json()["error"] is not None


class TestGenerations:
    """Test generation history endpoints."""

    def test_list_newest_first(self, test_client):
        """Generations are listed newest first."""
        first = _generate(test_client)
        second = _generate(test_client, prompt="a dog", variations=())

        ids = [g["id"] for g in test_client.get("/api/generations").json()["generations"]]
        assert ids == [second["id"], first["id"]]

    def test_select_generation(self, test_client):
        """Selecting an older generation makes it current."""
        first = _generate(test_client)
        _generate(test_client, prompt="a dog", variations=())

        resp = test_client.post(f"/api/generations/{first['id']}/select")
        assert resp.status_code == 200

        current = test_client.get("/api/generations/current").json()["generation"]
        assert current["id"] == first["id"]

    def test_select_unknown(self, test_client):
        """Selecting an unknown generation returns 404."""
        assert test_client.post("/api/generations/nope/select").status_code == 404

    def test_get_image_bytes(self, test_client):
        """Image bytes are served with their MIME type."""
        generation = _generate(test_client)
        image = generation["images"][0]

        resp = test_client.get(f"/api/generations/{generation['id']}/images/{image['id']}")

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/png"
        assert resp.content == b"a cat, Style: Cyberpunk"

    def test_get_image_unknown(self, test_client):
        """Unknown images return 404."""
        generation = _generate(test_client)
        resp = test_client.get(f"/api/generations/{generation['id']}/images/nope")
        assert resp.status_code == 404


class TestRatingAndBlueprint:
    """Test POST /api/images/rate and the blueprint endpoint."""

    def test_rate_and_blueprint(self, test_client):
        """Rating the second image yields a blueprint naming its variation."""
        generation = _generate(test_client)
        image_id = generation["images"][1]["id"]

        resp = test_client.post("/api/images/rate", json={"image_id": image_id, "rating": 4})
        assert resp.json() == {"success": True, "id": image_id, "rating": 4}

        blueprint = test_client.get(f"/api/generations/{generation['id']}/blueprint").json()
        assert "Effective Variations: Ukiyo-e\n" in blueprint["blueprint"]
        assert "Parameter Tested: Style\n" in blueprint["blueprint"]

    def test_rate_twice_resets(self, test_client):
        """Rating with the same value twice resets the image."""
        generation = _generate(test_client)
        image_id = generation["images"][1]["id"]

        test_client.post("/api/images/rate", json={"image_id": image_id, "rating": 4})
        resp = test_client.post("/api/images/rate", json={"image_id": image_id, "rating": 4})

        assert resp.json()["rating"] == 0
        blueprint = test_client.get(f"/api/generations/{generation['id']}/blueprint").json()
        assert blueprint["blueprint"] is None

    def test_rate_unknown_image(self, test_client):
        """Unknown images report a null rating."""
        resp = test_client.post("/api/images/rate", json={"image_id": "nope", "rating": 2})
        assert resp.status_code == 200
        assert resp.json()["rating"] is None

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rate_out_of_range(self, test_client, rating):
        """Ratings outside 1-5 are rejected with 422."""
        resp = test_client.post("/api/images/rate", json={"image_id": "x", "rating": rating})
        assert resp.status_code == 422

    def test_blueprint_unknown_generation(self, test_client):
        """Blueprint of an unknown generation returns 404."""
        assert test_client.get("/api/generations/nope/blueprint").status_code == 404


# ---------------------------------------------------------------------------
# Preset and prompt-history tests.
# ---------------------------------------------------------------------------


class TestPresets:
    """Test preset endpoints."""

    def test_create_list_load_delete(self, test_client):
        """A preset round-trips through save, list, load and delete."""
        _fill_form(test_client)
        created = test_client.post("/api/presets", json={"name": "Cats"}).json()["preset"]

        presets = test_client.get("/api/presets").json()["presets"]
        assert [p["name"] for p in presets] == ["Cats"]

        test_client.put("/api/form", json={"parameter": "Composition", "base_prompt": "x"})
        loaded = test_client.post(
            "/api/form/load", json={"source": "preset", "id": created["id"]}
        ).json()
        assert loaded["variations"] == ["Cyberpunk", "Ukiyo-e"]

        assert test_client.delete(f"/api/presets/{created['id']}").status_code == 200
        assert test_client.delete(f"/api/presets/{created['id']}").status_code == 404

    def test_blank_name(self, test_client):
        """Blank preset names return 400."""
        resp = test_client.post("/api/presets", json={"name": "   "})
        assert resp.status_code == 400


class TestPromptHistory:
    """Test prompt-history endpoints."""

    def test_search_and_delete(self, test_client):
        """Entries can be searched case-insensitively and deleted."""
        _generate(test_client, prompt="A Cat")
        _generate(test_client, prompt="a dog", variations=())

        matches = test_client.get("/api/prompt-history", params={"search": "CAT"}).json()
        assert [e["base_prompt"] for e in matches["entries"]] == ["A Cat"]

        entry_id = matches["entries"][0]["id"]
        assert test_client.delete(f"/api/prompt-history/{entry_id}").status_code == 200
        assert test_client.delete(f"/api/prompt-history/{entry_id}").status_code == 404
        assert len(test_client.get("/api/prompt-history").json()["entries"]) == 1


class TestPersistence:
    """Test that state survives an application restart."""

    def test_restart_restores_collections(self, test_config, fake_provider):
        """Generations, ratings and presets are reloaded on start-up."""
        with patch.object(api_main, "config", test_config), patch.object(
            api_main, "GeminiImageProvider", return_value=fake_provider
        ):
            with TestClient(api_main.app) as client:
                generation = _generate(client)
                client.post(
                    "/api/images/rate",
                    json={"image_id": generation["images"][0]["id"], "rating": 5},
                )
                client.post("/api/presets", json={"name": "Cats"})

            with TestClient(api_main.app) as client:
                generations = client.get("/api/generations").json()["generations"]
                assert generations[0]["id"] == generation["id"]
                assert generations[0]["images"][0]["rating"] == 5
                assert len(client.get("/api/presets").json()["presets"]) == 1
                assert len(client.get("/api/prompt-history").json()["entries"]) == 1
