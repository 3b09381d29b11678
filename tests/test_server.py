from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from server.app import SimulationManager, create_app
from simulation import BankConfig


@pytest.fixture
def manager() -> SimulationManager:
    return SimulationManager(BankConfig(num_cars=2, start_floors=[1, 6]))


@pytest.fixture
def client(manager) -> TestClient:
    # not used as a context manager so the background loops stay off
    return TestClient(create_app(manager))


class TestHttpApi:
    def test_state(self, client):
        response = client.get("/state")

        assert response.status_code == 200
        body = response.json()
        assert body["running"] is False
        assert [car["floor"] for car in body["cars"]] == [1, 6]

    def test_car_state_includes_display_line(self, client):
        response = client.get("/cars/2")

        assert response.status_code == 200
        assert response.json()["display"].startswith("Car#2 F=6 IDLE")

    def test_unknown_car_is_404(self, client):
        assert client.get("/cars/9").status_code == 404
        assert client.post("/cars/9/destinations", json={"floor": 3}).status_code == 404

    def test_pickup_is_queued_until_dispatch(self, client, manager):
        response = client.post("/pickups", json={"floor": 5, "direction": "up"})

        assert response.status_code == 200
        assert response.json()["pending"] == [{"floor": 5, "direction": "UP"}]

        manager.simulation.dispatch()
        assert client.get("/state").json()["pending"] == []

    def test_pickup_out_of_range_is_400(self, client):
        response = client.post("/pickups", json={"floor": 10, "direction": "up"})

        assert response.status_code == 400
        assert "out of range" in response.json()["detail"]

    def test_pickup_with_bad_direction_is_422(self, client):
        response = client.post("/pickups", json={"floor": 5, "direction": "sideways"})

        assert response.status_code == 422

    def test_destination_starts_idle_car(self, client):
        response = client.post("/cars/1/destinations", json={"floor": 7})

        assert response.status_code == 200
        body = response.json()
        assert body["onboard_up"] == [7]
        assert body["state"] == "MOVING_UP"

    def test_destination_out_of_range_is_400(self, client):
        assert client.post("/cars/1/destinations", json={"floor": 42}).status_code == 400

    def test_switch_algorithm(self, client):
        response = client.post("/algorithm", json={"name": "nearest"})

        assert response.status_code == 200
        assert response.json()["scheduler"] == "nearest"
        assert client.post("/algorithm", json={"name": "lookahead"}).status_code == 400

    def test_bad_scheduler_options_are_400_and_dispatch_still_works(self, client, manager):
        response = client.post(
            "/algorithm", json={"name": "nearest_eligible", "options": {"logger": "x"}}
        )
        assert response.status_code == 400
        assert client.post("/algorithm", json={"name": "nearest", "options": {"depth": 2}}).status_code == 400

        client.post("/pickups", json={"floor": 5, "direction": "up"})
        assert len(manager.simulation.dispatch()) == 1
        assert client.get("/state").json()["pending"] == []

    def test_websocket_sends_current_state_on_connect(self, client):
        with client.websocket_connect("/ws/stream") as websocket:
            payload = websocket.receive_json()

        assert [car["id"] for car in payload["cars"]] == [1, 2]


class TestRuntime:
    def test_background_loops_serve_a_pickup_and_stop_cleanly(self):
        config = BankConfig(
            num_cars=1,
            min_floor=1,
            max_floor=5,
            seconds_per_floor=0.005,
            door_dwell_seconds=0.005,
            dispatch_interval_seconds=0.005,
            idle_poll_seconds=0.005,
        )

        async def scenario() -> SimulationManager:
            manager = SimulationManager(config, broadcast_interval=0.01)
            await manager.start()
            assert manager.running
            manager.request_pickup(4, "up")
            for _ in range(400):
                await asyncio.sleep(0.005)
                snapshot = manager.simulation.snapshot(1)
                if (
                    snapshot.floor == 4
                    and snapshot.state == "IDLE"
                    and snapshot.outstanding_stops == 0
                    and not manager.simulation.pending_pickups()
                ):
                    break
            await manager.stop()
            return manager

        manager = asyncio.run(scenario())

        snapshot = manager.simulation.snapshot(1)
        assert not manager.running
        assert snapshot.floor == 4
        assert snapshot.outstanding_stops == 0

    def test_failing_dispatch_cycle_keeps_running_and_stop_is_clean(self, caplog):
        class Broken:
            def assign(self, pending_pickups, car_snapshots):
                raise RuntimeError("scheduler exploded")

        config = BankConfig(num_cars=1, dispatch_interval_seconds=0.005, idle_poll_seconds=0.005)

        async def scenario() -> SimulationManager:
            manager = SimulationManager(config, broadcast_interval=0.01)
            manager.simulation.scheduler = Broken()
            await manager.start()
            manager.request_pickup(5, "up")
            await asyncio.sleep(0.05)
            dispatch_task = manager._tasks[0]
            assert not dispatch_task.done()
            await manager.stop()
            return manager

        with caplog.at_level("ERROR"):
            manager = asyncio.run(scenario())

        assert not manager.running
        assert manager.simulation.pending_pickups()[0].floor == 5
        assert "Dispatch cycle failed" in caplog.text

    def test_stop_collects_a_crashed_task(self, caplog):
        async def crash() -> None:
            raise RuntimeError("loop died")

        async def scenario() -> SimulationManager:
            manager = SimulationManager(BankConfig(num_cars=1))
            await manager.start()
            manager._tasks.append(asyncio.create_task(crash()))
            await asyncio.sleep(0)
            await manager.stop()
            return manager

        with caplog.at_level("ERROR"):
            manager = asyncio.run(scenario())

        assert not manager.running
        assert "loop died" in caplog.text
