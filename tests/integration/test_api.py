"""Integration tests for moodboard.api.main — FastAPI REST API endpoints.

All tests use the FastAPI TestClient with image fetches routed through an
``httpx.MockTransport``, so no network access occurs.  Tests cover every
endpoint:

- ``GET /api/config`` — Layout settings delivery.
- ``GET /api/board`` — Surface snapshot.
- ``GET /api/board/cells/{index}/image`` — Cell image bytes.
- ``POST /api/board/regenerate`` — Manual regeneration.
- ``POST /api/board/gap/toggle`` — Spacing toggle.
- ``POST /api/viewport`` — Debounced resize.
"""

from __future__ import annotations

import time

import httpx
import pytest
from fastapi.testclient import TestClient

from moodboard.api.main import create_app

from conftest import FixedRatioRandom


def wait_for_board(client: TestClient, predicate, timeout: float = 5.0) -> dict:
    """Poll ``GET /api/board`` until *predicate* holds.

    Args:
        client: Test client.
        predicate: Callable receiving the board JSON.
        timeout: Seconds before giving up.

    Returns:
        The first board JSON satisfying *predicate*.
    """
    deadline = time.monotonic() + timeout
    while True:
        board = client.get("/api/board").json()
        if predicate(board):
            return board
        if time.monotonic() > deadline:
            raise AssertionError(f"Board never reached expected state: {board}")
        time.sleep(0.01)


def _settled(board: dict) -> bool:
    return board["generation"] >= 1 and not board["busy"]


@pytest.fixture
def test_client(test_config, image_transport):
    """TestClient whose first board has finished generating."""
    app = create_app(test_config, transport=image_transport, random_provider=FixedRatioRandom(1.0))
    with TestClient(app) as client:
        wait_for_board(client, _settled)
        yield client


@pytest.fixture
def failing_client(test_config):
    """TestClient whose image source always fails."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, content=b"unavailable")

    app = create_app(test_config, transport=httpx.MockTransport(handler))
    with TestClient(app) as client:
        wait_for_board(client, _settled)
        yield client


# ---------------------------------------------------------------------------
# Configuration endpoint tests.
# ---------------------------------------------------------------------------


class TestGetConfig:
    """Test GET /api/config."""

    def test_config_values(self, test_client):
        resp = test_client.get("/api/config")
        assert resp.status_code == 200
        data = resp.json()
        assert data["columns"] == 6
        assert data["gap_px"] == 0.0
        assert data["board_count"] == 4
        assert data["aspect_ratios"] == [0.75, 0.85, 1.0, 1.15, 1.3, 1.5, 1.65]
        assert data["resize_debounce_ms"] == 20
        assert "version" in data


# ---------------------------------------------------------------------------
# Board endpoint tests.
# ---------------------------------------------------------------------------


class TestGetBoard:
    """Test GET /api/board and the first-load generation."""

    def test_initial_board(self, test_client):
        data = test_client.get("/api/board").json()
        assert data["busy"] is False
        assert data["veil"] is False
        assert data["dimmed"] is False
        assert data["width"] == 1200.0
        assert len(data["cells"]) == 4

    def test_cells_are_sized_for_columns(self, test_client):
        """1200px over 6 columns at ratio 1.0 gives 200x200 cells."""
        cells = test_client.get("/api/board").json()["cells"]
        assert [c["index"] for c in cells] == [0, 1, 2, 3]
        for cell in cells:
            assert (cell["width"], cell["height"]) == (200, 200)
            assert cell["css_class"] == "item"
            assert cell["alt"] == ""
            assert cell["decoded"] is True
            assert cell["natural_size"] == [8, 8]
            assert cell["url"].startswith("https://images.test/seed/")
            assert cell["url"].endswith("/200/200")

    def test_seeds_are_unique(self, test_client):
        cells = test_client.get("/api/board").json()["cells"]
        assert len({c["seed"] for c in cells}) == len(cells)


class TestCellImage:
    """Test GET /api/board/cells/{index}/image."""

    def test_returns_image_bytes(self, test_client, png_bytes):
        resp = test_client.get("/api/board/cells/0/image")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/png"
        assert resp.content == png_bytes

    @pytest.mark.parametrize("index", [4, 99, -1])
    def test_unknown_cell(self, test_client, index):
        resp = test_client.get(f"/api/board/cells/{index}/image")
        assert resp.status_code == 404


class TestRegenerate:
    """Test POST /api/board/regenerate."""

    def test_regenerate_and_wait(self, test_client):
        before = test_client.get("/api/board").json()
        resp = test_client.post("/api/board/regenerate", params={"wait": True})
        assert resp.status_code == 202
        data = resp.json()
        assert data["generation"] == before["generation"] + 1
        assert data["busy"] is False
        assert len(data["cells"]) == 4
        assert {c["seed"] for c in data["cells"]}.isdisjoint(
            {c["seed"] for c in before["cells"]}
        )

    def test_regenerate_without_wait(self, test_client):
        before = test_client.get("/api/board").json()["generation"]
        resp = test_client.post("/api/board/regenerate")
        assert resp.status_code == 202
        wait_for_board(test_client, lambda b: b["generation"] > before and not b["busy"])


class TestToggleGap:
    """Test POST /api/board/gap/toggle."""

    def test_toggle_twice(self, test_client):
        first = test_client.post("/api/board/gap/toggle", params={"wait": True}).json()
        assert first["gap_px"] == 4.0

        # 1200px, 6 columns, five 4px gaps -> 196.67px columns.
        cells = test_client.get("/api/board").json()["cells"]
        assert {c["width"] for c in cells} == {197}

        second = test_client.post("/api/board/gap/toggle", params={"wait": True}).json()
        assert second["gap_px"] == 0.0
        assert test_client.get("/api/config").json()["gap_px"] == 0.0


class TestViewport:
    """Test POST /api/viewport."""

    def test_resize_regenerates_after_quiet_period(self, test_client):
        before = test_client.get("/api/board").json()["generation"]
        resp = test_client.post("/api/viewport", json={"width": 600})
        assert resp.status_code == 202

        board = wait_for_board(
            test_client, lambda b: b["generation"] > before and not b["busy"]
        )
        assert board["width"] == 600.0
        assert {c["width"] for c in board["cells"]} == {100}

    def test_resize_with_density(self, test_client):
        before = test_client.get("/api/board").json()["generation"]
        test_client.post("/api/viewport", json={"width": 600, "device_pixel_ratio": 3})

        board = wait_for_board(
            test_client, lambda b: b["generation"] > before and not b["busy"]
        )
        assert board["device_pixel_ratio"] == 3.0
        assert {(c["width"], c["height"]) for c in board["cells"]} == {(200, 200)}

    @pytest.mark.parametrize(
        "payload",
        [{"width": -1}, {}, {"width": 600, "device_pixel_ratio": 0}],
    )
    def test_invalid_payload(self, test_client, payload):
        resp = test_client.post("/api/viewport", json=payload)
        assert resp.status_code == 422


class TestFailures:
    """Image failures degrade to an empty board."""

    def test_all_images_fail(self, failing_client):
        data = failing_client.get("/api/board").json()
        assert data["cells"] == []
        assert data["failed"] == 4
        assert data["busy"] is False
        assert data["veil"] is False
