"""Tests for the HTTP API."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Iterator
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from gavel.config import Settings
from gavel.engine.engine import GameEngine
from gavel.engine.runner import GameRunner
from gavel.lib.persistence import TableStore, get_table_store
from gavel.lib.randomness import SystemRandomness
from gavel.main import app

NAMES = ["Ana", "Bruno", "Carla"]


@pytest.fixture
def store() -> TableStore:
    settings = Settings(_env_file=None, roll_steps=0)
    return TableStore(
        settings=settings,
        engine=GameEngine(rng=SystemRandomness(7), settings=settings),
    )


@pytest.fixture
def client(store: TableStore) -> Iterator[TestClient]:
    async def override_store() -> TableStore:
        return store

    app.dependency_overrides[get_table_store] = override_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_table(client: TestClient) -> str:
    response = client.post("/api/tables")
    assert response.status_code == 200
    return response.json()["table_id"]


def runner_for(store: TableStore, table_id: str) -> GameRunner:
    return asyncio.run(store.get(UUID(table_id)))


def send(client: TestClient, table_id: str, intent_type: str, **fields):
    return client.post(
        f"/api/tables/{table_id}/intents",
        json={"intent": {"type": intent_type, **fields}},
    )


class TestRootEndpoints:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_config(self, client: TestClient) -> None:
        data = client.get("/api/config").json()

        assert data["limits"]["min_players"] == 3
        assert data["limits"]["max_players"] == 8
        assert data["limits"]["victory_options"] == [3, 5, 7, 10]
        assert [c["value"] for c in data["criteria"]] == ["logic", "speed", "satire"]
        assert [t["value"] for t in data["teams"]] == ["a", "b"]

    def test_rules(self, client: TestClient) -> None:
        response = client.get("/api/rules")

        assert response.status_code == 200
        data = response.json()
        assert {"roles", "flow", "criteria", "victory", "tips"} <= set(data)
        assert any("usually 3, 5, 7, 10 points" in line for line in data["victory"])


class TestSetupCheck:
    def test_enough_names(self, client: TestClient) -> None:
        response = client.post(
            "/api/setup/check", json={"names": ["  Ana ", "", "Bruno", "Carla"]}
        )

        assert response.status_code == 200
        assert response.json() == {
            "names": NAMES,
            "count": 3,
            "can_start": True,
        }

    @pytest.mark.parametrize(
        "names",
        [[], ["Ana", "Bruno", "   "], [f"P{i}" for i in range(9)], ["Ana", "Bruno", "x" * 21]],
    )
    def test_start_disabled(self, client: TestClient, names: list[str]) -> None:
        data = client.post("/api/setup/check", json={"names": names}).json()

        assert data["can_start"] is False


class TestTables:
    def test_create_table_starts_at_menu(self, client: TestClient) -> None:
        response = client.post("/api/tables")

        snapshot = response.json()["snapshot"]
        assert snapshot["screen"] == "menu"
        assert snapshot["available_intents"] == ["start_game", "add_custom_topic"]

    def test_get_table(self, client: TestClient) -> None:
        table_id = create_table(client)

        response = client.get(f"/api/tables/{table_id}")

        assert response.status_code == 200
        assert response.json()["table_id"] == table_id

    def test_unknown_table(self, client: TestClient) -> None:
        response = client.get(f"/api/tables/{uuid4()}")

        assert response.status_code == 404

    def test_delete_table(self, client: TestClient) -> None:
        table_id = create_table(client)

        assert client.delete(f"/api/tables/{table_id}").status_code == 200
        assert client.get(f"/api/tables/{table_id}").status_code == 404
        assert client.delete(f"/api/tables/{table_id}").status_code == 404

    def test_expired_table_is_gone(
        self, client: TestClient, store: TableStore
    ) -> None:
        table_id = create_table(client)
        runner_for(store, table_id).table.created_at -= timedelta(hours=25)

        response = client.get(f"/api/tables/{table_id}")

        assert response.status_code == 410
        assert response.json()["table_id"] == table_id
        assert client.get(f"/api/tables/{table_id}").status_code == 404

    def test_stream_of_closed_table(
        self, client: TestClient, store: TableStore
    ) -> None:
        table_id = create_table(client)
        send(client, table_id, "start_game", names=NAMES)
        runner = runner_for(store, table_id)
        asyncio.run(runner.close())

        response = client.get(f"/api/tables/{table_id}/stream")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        body = response.text
        assert "event: snapshot" in body
        assert "role_assignment" in body
        assert "event: closed" in body
        assert body.index("event: snapshot") < body.index("event: closed")

    def test_stream_of_unknown_table(self, client: TestClient) -> None:
        response = client.get(f"/api/tables/{uuid4()}/stream")

        assert response.status_code == 404


class TestIntents:
    def test_full_round(self, client: TestClient) -> None:
        table_id = create_table(client)

        response = send(client, table_id, "start_game", names=NAMES, victory_threshold=3)
        assert response.status_code == 200
        snapshot = response.json()["snapshot"]
        assert snapshot["phase"] == "role_assignment"
        assert snapshot["judge_index"] == 0
        assert [p["role"] for p in snapshot["players"]][0] == "judge"

        for intent_type in ("reveal_topic", "start_debate", "pause_clock", "roll_criterion"):
            assert send(client, table_id, intent_type).status_code == 200

        snapshot = send(client, table_id, "declare_winner", team="a").json()["snapshot"]
        assert snapshot["phase"] == "verdict"
        assert snapshot["criterion"]["value"] in {"logic", "speed", "satire"}
        winners = set(snapshot["winning_indices"])
        assert [p["score"] for p in snapshot["players"]] == [
            1 if i in winners else 0 for i in range(3)
        ]

        snapshot = send(client, table_id, "continue_after_verdict").json()["snapshot"]
        assert snapshot["phase"] == "scoreboard"
        assert len(snapshot["standings"]) == 3

    def test_out_of_phase_intent_is_conflict(self, client: TestClient) -> None:
        table_id = create_table(client)
        send(client, table_id, "start_game", names=NAMES)

        response = send(client, table_id, "declare_winner", team="a")

        assert response.status_code == 409
        body = response.json()
        assert body["intent"] == "declare_winner"
        assert body["phase"] == "role_assignment"

    def test_short_roster_is_conflict(self, client: TestClient) -> None:
        table_id = create_table(client)

        response = send(client, table_id, "start_game", names=["Ana", "Bruno"])

        assert response.status_code == 409
        assert "at least 3" in response.json()["detail"]
        assert client.get(f"/api/tables/{table_id}").json()["screen"] == "menu"

    @pytest.mark.parametrize("intent_type", ["tick", "roll_step"])
    def test_timer_intents_are_server_only(
        self, client: TestClient, intent_type: str
    ) -> None:
        table_id = create_table(client)

        response = send(client, table_id, intent_type, generation=0)

        assert response.status_code == 400

    def test_unknown_intent_type(self, client: TestClient) -> None:
        table_id = create_table(client)

        response = send(client, table_id, "flip_table")

        assert response.status_code == 422

    def test_custom_topics(self, client: TestClient) -> None:
        table_id = create_table(client)

        snapshot = send(client, table_id, "add_custom_topic", text="  Cats rule ").json()[
            "snapshot"
        ]
        assert snapshot["custom_topics"] == ["Cats rule"]
        assert snapshot["topic_pool"]["custom"] == 1

        assert send(client, table_id, "add_custom_topic", text="  ").status_code == 409
        assert send(client, table_id, "remove_custom_topic", index=0).status_code == 200
