"""Aesthetic Lab: FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **Session state** lives in one :class:`~aestheticlab.ui.session.LabSession`
  created at start-up and stored on ``app.state``.  Routes translate HTTP
  requests into session operations.
- **Image generation** is delegated to the Gemini image API through
  :class:`~aestheticlab.core.generation_client.GeminiImageProvider`.
- **Persistence** uses the durable store selected by configuration; writes
  run in the session's background worker.

Endpoints
---------
========  =========================================  ===============================
Method    Path                                       Purpose
========  =========================================  ===============================
GET       ``/api/config``                            Catalog, examples, defaults
GET       ``/api/state``                             Form and session flags
PUT       ``/api/form``                              Update form fields
POST      ``/api/form/variations/toggle``            Toggle one variation
POST      ``/api/form/load``                         Load preset/history/example
POST      ``/api/generate``                          Generate a variation batch
GET       ``/api/generations``                       Generation history
GET       ``/api/generations/current``               Displayed generation
POST      ``/api/generations/{id}/select``           Select a generation
GET       ``/api/generations/{id}/blueprint``        Style blueprint text
GET       ``/api/generations/{id}/images/{img}``     Raw image bytes
POST      ``/api/images/rate``                       Toggle an image rating
GET       ``/api/presets``                           List presets
POST      ``/api/presets``                           Save the form as a preset
DELETE    ``/api/presets/{id}``                      Delete a preset
GET       ``/api/prompt-history``                    Searchable prompt history
DELETE    ``/api/prompt-history/{id}``               Delete a prompt-history entry
========  =========================================  ===============================

Usage
-----
CLI (installed entry point)::

    aestheticlab

Direct invocation::

    python -m aestheticlab.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from aestheticlab import __version__
from aestheticlab.api.models import (
    FormUpdateRequest,
    LoadConfigurationRequest,
    PresetCreateRequest,
    RateImageRequest,
    VariationToggleRequest,
)
from aestheticlab.core.catalog import AESTHETIC_OPTIONS
from aestheticlab.core.config import config
from aestheticlab.core.examples import EXAMPLE_PRESETS, find_example
from aestheticlab.core.generation_client import GeminiImageProvider, decode_data_uri
from aestheticlab.core.history import find_by_id
from aestheticlab.core.storage import create_store
from aestheticlab.ui.models import FormState, LabState
from aestheticlab.ui.session import LabSession
from aestheticlab.ui.validation import ValidationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Application lifecycle: session setup and teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Builds the durable store and image provider from configuration,
        loads the session state, and starts the persistence worker.

    On shutdown:
        Drains pending writes so no accepted change is lost.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    # --- Startup -----------------------------------------------------------
    session = LabSession(config, GeminiImageProvider(config), create_store(config))
    await session.start()
    app.state.session = session
    logger.info(f"LabSession initialised: {session.state!r}")

    yield  # Application runs here.

    # --- Shutdown ----------------------------------------------------------
    await session.stop()
    logger.info("LabSession stopped on shutdown.")


app = FastAPI(
    title="Aesthetic Lab",
    description="Vary one aesthetic parameter across a prompt and curate the results.",
    version=__version__,
    lifespan=lifespan,
)

# Allow cross-origin requests so the frontend can be served from a different
# port during development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Serialisation helpers.
# ---------------------------------------------------------------------------


def _session() -> LabSession:
    return app.state.session


def _form_dict(form: FormState) -> dict:
    return {
        "base_prompt": form.base_prompt,
        "parameter": form.parameter.value,
        "variations": list(form.variations),
        "available_variations": list(AESTHETIC_OPTIONS[form.parameter]),
        "temperature": form.temperature,
        "seed": form.seed,
    }


def _state_dict(session: LabSession) -> dict:
    state: LabState = session.state
    displayed = session.displayed_generation()
    return {
        "form": _form_dict(state.form),
        "is_loading": state.is_loading,
        "error": state.error,
        "can_submit": state.can_submit,
        "displayed_generation_id": displayed.id if displayed else None,
    }


def _require_generation(generation_id: str):
    generation = find_by_id(_session().state.generations, generation_id)
    if generation is None:
        raise HTTPException(status_code=404, detail="Generation not found")
    return generation


# ---------------------------------------------------------------------------
# Routes: configuration and form.
# ---------------------------------------------------------------------------


@app.get("/api/config")
async def get_config() -> dict:
    """Return the static configuration the frontend needs on page load.

    Returns:
        Dictionary with ``version``, ``parameters`` (parameter → variation
        labels), ``examples`` and ``default_temperature``.
    """
    return {
        "version": __version__,
        "parameters": {
            parameter.value: list(options) for parameter, options in AESTHETIC_OPTIONS.items()
        },
        "examples": [example.to_dict() for example in EXAMPLE_PRESETS],
        "default_temperature": config.default_temperature,
    }


@app.get("/api/state")
async def get_state() -> dict:
    """Return the form values and session flags."""
    return _state_dict(_session())


@app.put("/api/form")
async def update_form(req: FormUpdateRequest) -> dict:
    """Apply a partial form update.

    Fields are applied in the order parameter, base prompt, temperature,
    seed.  Only fields present in the request body are applied.

    Args:
        req: Validated :class:`FormUpdateRequest` payload.

    Returns:
        The updated form.
    """
    session = _session()
    fields = req.model_fields_set

    if "parameter" in fields and req.parameter is not None:
        session.set_parameter(req.parameter)
    if "base_prompt" in fields and req.base_prompt is not None:
        session.set_base_prompt(req.base_prompt)
    if "temperature" in fields and req.temperature is not None:
        session.set_temperature(req.temperature)
    if "seed" in fields:
        session.set_seed(req.seed)

    return _form_dict(session.state.form)


@app.post("/api/form/variations/toggle")
async def toggle_variation(req: VariationToggleRequest) -> dict:
    """Select or deselect one variation of the active parameter.

    Labels the active parameter does not offer are ignored.
    """
    session = _session()
    session.toggle_variation(req.variation)
    return _form_dict(session.state.form)


@app.post("/api/form/load")
async def load_configuration(req: LoadConfigurationRequest) -> dict:
    """Copy a saved preset, prompt-history entry or example into the form.

    Raises:
        HTTPException: 404 if no configuration with that id exists.
    """
    session = _session()
    if req.source == "preset":
        configuration = find_by_id(session.state.presets, req.id)
    elif req.source == "prompt_history":
        configuration = find_by_id(session.state.prompt_history, req.id)
    else:
        configuration = find_example(req.id)

    if configuration is None:
        raise HTTPException(status_code=404, detail=f"Unknown {req.source}: {req.id}")

    session.load_configuration(configuration)
    return _form_dict(session.state.form)


# ---------------------------------------------------------------------------
# Routes: generation and history.
# ---------------------------------------------------------------------------


@app.post("/api/generate")
async def generate_images() -> dict:
    """Generate one image per selected variation of the current form.

    This endpoint:

    1. Validates the form (non-empty base prompt, at least one variation).
    2. Records the attempt in prompt history.
    3. Sends every expanded prompt to the provider concurrently.
    4. Stores the completed batch at the head of the history and selects it.

    Returns:
        Dictionary with ``success`` and the new ``generation``.

    Raises:
        HTTPException: 400 if the form cannot be submitted, 502 if the batch
            failed.
    """
    session = _session()
    try:
        result = await session.submit()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    if result is None:
        raise HTTPException(status_code=502, detail=session.state.error)

    return {"success": True, "generation": result.to_dict()}


@app.get("/api/generations")
async def list_generations() -> dict:
    """Return every generation, newest first."""
    return {"generations": [g.to_dict() for g in _session().state.generations]}


@app.get("/api/generations/current")
async def get_current_generation() -> dict:
    """Return the generation currently shown in the results view.

    The explicit selection wins; otherwise the newest generation is shown.
    While a batch error is active no generation is shown.
    """
    generation = _session().displayed_generation()
    return {"generation": generation.to_dict() if generation else None}


@app.post("/api/generations/{generation_id}/select")
async def select_generation(generation_id: str) -> dict:
    """Select a generation from history.

    Raises:
        HTTPException: 404 if the generation is not found.
    """
    if not _session().select_generation(generation_id):
        raise HTTPException(status_code=404, detail="Generation not found")
    return {"success": True, "selected": generation_id}


@app.get("/api/generations/{generation_id}/blueprint")
async def get_blueprint(generation_id: str) -> dict:
    """Return the style blueprint for a generation.

    ``blueprint`` is null until at least one image has been rated.

    Raises:
        HTTPException: 404 if the generation is not found.
    """
    _require_generation(generation_id)
    return {"id": generation_id, "blueprint": _session().blueprint(generation_id)}


@app.get("/api/generations/{generation_id}/images/{image_id}")
async def get_image(generation_id: str, image_id: str) -> Response:
    """Return the raw bytes of one generated image.

    Raises:
        HTTPException: 404 if the generation or image is not found, 500 if
            the stored image reference cannot be decoded.
    """
    generation = _require_generation(generation_id)
    image = find_by_id(generation.images, image_id)
    if image is None:
        raise HTTPException(status_code=404, detail="Image not found")

    try:
        payload = decode_data_uri(image.src)
    except ValueError as e:
        logger.error(f"Stored image {image_id} is not decodable: {e}")
        raise HTTPException(status_code=500, detail="Stored image is corrupt") from e

    return Response(content=payload.data, media_type=payload.mime_type)


@app.post("/api/images/rate")
async def rate_image(req: RateImageRequest) -> dict:
    """Toggle the rating of an image.

    Rating with the current value resets the image to unrated.  Unknown
    image ids are ignored.

    Returns:
        Dictionary with ``success``, ``id`` and the resulting ``rating``
        (null when the image was not found).
    """
    session = _session()
    session.rate_image(req.image_id, req.rating)

    rating = None
    for generation in session.state.generations:
        image = find_by_id(generation.images, req.image_id)
        if image is not None:
            rating = image.rating
            break

    return {"success": True, "id": req.image_id, "rating": rating}


# ---------------------------------------------------------------------------
# Routes: presets and prompt history.
# ---------------------------------------------------------------------------


@app.get("/api/presets")
async def list_presets() -> dict:
    """Return saved presets, newest first."""
    return {"presets": [p.to_dict() for p in _session().state.presets]}


@app.post("/api/presets")
async def create_preset(req: PresetCreateRequest) -> dict:
    """Save the current form as a named preset.

    Raises:
        HTTPException: 400 if the name is blank.
    """
    try:
        preset = _session().save_preset(req.name)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"success": True, "preset": preset.to_dict()}


@app.delete("/api/presets/{preset_id}")
async def delete_preset(preset_id: str) -> dict:
    """Delete a preset.

    Raises:
        HTTPException: 404 if the preset is not found.
    """
    if not _session().delete_preset(preset_id):
        raise HTTPException(status_code=404, detail="Preset not found")
    return {"success": True, "deleted": preset_id}


@app.get("/api/prompt-history")
async def list_prompt_history(search: str | None = None) -> dict:
    """Return prompt history, newest first.

    Args:
        search: Optional case-insensitive substring of the base prompt.
    """
    entries = _session().search_prompt_history(search)
    return {"entries": [entry.to_dict() for entry in entries]}


@app.delete("/api/prompt-history/{entry_id}")
async def delete_prompt_history_entry(entry_id: str) -> dict:
    """Delete a prompt-history entry.

    Raises:
        HTTPException: 404 if the entry is not found.
    """
    if not _session().delete_prompt(entry_id):
        raise HTTPException(status_code=404, detail="Prompt history entry not found")
    return {"success": True, "deleted": entry_id}


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from
    :data:`~aestheticlab.core.config.config`.  Defaults to ``0.0.0.0:7860``.

    This function is registered as the ``aestheticlab`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "aestheticlab.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
