from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
from pathlib import Path
from typing import Dict, List, Literal, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from simulation import BankConfig, CarController, OutOfRangeFloor, Simulation, UnknownCar, load_config

log = logging.getLogger(__name__)


class AlgorithmSelection(BaseModel):
    name: str
    options: Dict[str, object] = {}


class PickupRequest(BaseModel):
    floor: int
    direction: Literal["up", "down"]


class DestinationRequest(BaseModel):
    floor: int


class SimulationManager:
    """Runs the dispatch cycle and one motion cycle per car until stopped.

    Loops wait on the shutdown event rather than sleeping, so ``stop`` lets
    each of them finish its current step and exit on its own.
    """

    def __init__(
        self,
        config: Optional[BankConfig] = None,
        broadcast_interval: float = 0.25,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or BankConfig()
        self.logger = logger or log
        self.simulation = Simulation(self.config, logger=logger)
        self.broadcast_interval = broadcast_interval
        self.clients: Set[WebSocket] = set()
        self._tasks: List[asyncio.Task] = []
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def start(self) -> None:
        if self._tasks:
            return
        self._stopping.clear()
        self._tasks.append(asyncio.create_task(self._dispatch_loop()))
        for car in self.simulation.fleet.cars:
            self._tasks.append(asyncio.create_task(self._motion_loop(car)))
        self._tasks.append(asyncio.create_task(self._broadcast_loop()))
        self.logger.info(
            "Elevator bank started: %s cars, floors %s-%s",
            self.config.num_cars,
            self.config.min_floor,
            self.config.max_floor,
        )

    async def stop(self) -> None:
        if not self._tasks:
            return
        self._stopping.set()
        try:
            results = await asyncio.gather(*self._tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    self.logger.error("Background task ended with %r", result, exc_info=result)
        finally:
            self._tasks = []
        self.logger.info("Elevator bank stopped")

    async def _pause(self, seconds: float) -> bool:
        """Wait up to ``seconds``; True once shutdown has been requested."""

        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _dispatch_loop(self) -> None:
        while not await self._pause(self.config.dispatch_interval_seconds):
            try:
                self.simulation.dispatch()
            except Exception:
                # pickups stay pending; the next cycle retries them
                self.logger.exception("Dispatch cycle failed")

    async def _motion_loop(self, car: CarController) -> None:
        while not self._stopping.is_set():
            state = car.state
            if await self._pause(car.next_delay()):
                break
            # A destination chosen while idle may already have set the car
            # moving; the travel time then starts from that change.
            if car.state is state:
                try:
                    car.tick()
                except Exception:
                    self.logger.exception("Motion cycle for car %s failed", car.car_id)

    async def _broadcast_loop(self) -> None:
        while not await self._pause(self.broadcast_interval):
            if not self.clients:
                continue
            try:
                await self.broadcast(self.current_state())
            except Exception:
                self.logger.exception("State broadcast failed")

    async def broadcast(self, payload: dict) -> None:
        message = json.dumps(payload)
        disconnected: Set[WebSocket] = set()
        for client in set(self.clients):
            try:
                await client.send_text(message)
            except WebSocketDisconnect:
                disconnected.add(client)
        for client in disconnected:
            await self.unregister(client)

    async def register(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.clients.add(websocket)
        await websocket.send_text(json.dumps(self.current_state()))

    async def unregister(self, websocket: WebSocket) -> None:
        if websocket in self.clients:
            self.clients.remove(websocket)
        with contextlib.suppress(Exception):
            await websocket.close()

    def current_state(self) -> dict:
        state = self.simulation.state()
        state["running"] = self.running
        return state

    def car_state(self, car_id: int) -> dict:
        snapshot = self.simulation.snapshot(car_id)
        payload = snapshot.to_dict()
        payload["display"] = str(snapshot)
        return payload

    def request_pickup(self, floor: int, direction: str) -> dict:
        pickup = self.simulation.request_pickup(floor, direction)
        state = self.current_state()
        state["pickup"] = {"floor": pickup.floor, "direction": pickup.direction.name}
        return state

    def select_destination(self, car_id: int, floor: int) -> dict:
        self.simulation.select_destination(car_id, floor)
        return self.car_state(car_id)

    def set_scheduler(self, name: str, options: Dict[str, object]) -> dict:
        self.simulation.set_scheduler(name, **options)
        return self.current_state()


def create_app(manager: SimulationManager) -> FastAPI:
    app = FastAPI(title="Elevator Bank Simulation API")
    app.state.manager = manager
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        await manager.start()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await manager.stop()

    @app.get("/state")
    async def get_state() -> dict:
        return manager.current_state()

    @app.get("/cars/{car_id}")
    async def get_car(car_id: int) -> dict:
        try:
            return manager.car_state(car_id)
        except UnknownCar as exc:
            raise HTTPException(status_code=404, detail=str(exc))

    @app.post("/pickups")
    async def request_pickup(request: PickupRequest) -> dict:
        try:
            return manager.request_pickup(request.floor, request.direction)
        except OutOfRangeFloor as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @app.post("/cars/{car_id}/destinations")
    async def select_destination(car_id: int, request: DestinationRequest) -> dict:
        try:
            return manager.select_destination(car_id, request.floor)
        except UnknownCar as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        except OutOfRangeFloor as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @app.post("/algorithm")
    async def set_algorithm(selection: AlgorithmSelection) -> dict:
        try:
            return manager.set_scheduler(selection.name, selection.options)
        except (ValueError, TypeError) as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @app.websocket("/ws/stream")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await manager.register(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            await manager.unregister(websocket)

    return app


manager = SimulationManager()
app = create_app(manager)


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the elevator bank simulation")
    parser.add_argument("--config", type=Path, help="JSON file with a 'bank' section")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    import uvicorn

    config = load_config(args.config) if args.config else BankConfig()
    uvicorn.run(create_app(SimulationManager(config)), host=args.host, port=args.port, reload=False)


if __name__ == "__main__":
    main()
