from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from typing import Any, Dict, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from loguru import logger

from .config import InvalidConfiguration, SimulationConfig, load_params
from .flock import Flock

MIN_PLAYBACK_RATE = 0.1
MAX_PLAYBACK_RATE = 5.0


class SimulationController:
    """Drives a `Flock` on a wall-clock timer and pushes snapshots to websocket viewers."""

    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1):
        self.config = config
        self.flock = Flock(config)
        self.flock.initialize()
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.tick = 0
        self.playback_rate = 1.0
        self.viewers: Set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._timer: asyncio.Task | None = None

    async def start(self) -> None:
        if self._timer is None:
            self._timer = asyncio.create_task(self._run_timer())
        if not self.running:
            logger.info(f"Flock playback started at tick {self.tick}")
        self.running = True

    async def stop(self) -> None:
        if self.running:
            logger.info(f"Flock playback paused at tick {self.tick}")
        self.running = False

    async def reset(self) -> None:
        async with self._lock:
            self.flock.reset()
            self.tick = 0
        logger.info("Flock reset to its seeded initial state")
        await self.publish()

    async def advance(self) -> None:
        async with self._lock:
            self.flock.step(self.tick)
            self.tick += 1
        if self.tick % self.broadcast_interval == 0:
            await self.publish()

    async def update_params(self, changes: Dict[str, Any]) -> None:
        """Apply a partial parameter update between steps; nothing changes if validation fails."""
        async with self._lock:
            params = load_params(changes, base=self.config.params)
            self.config.params = params
        logger.info(f"Flock parameters updated: {', '.join(sorted(changes)) or 'no changes'}")

    def set_playback_rate(self, rate: float) -> float:
        self.playback_rate = min(MAX_PLAYBACK_RATE, max(MIN_PLAYBACK_RATE, rate))
        return self.playback_rate

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.config.time_step / self.playback_rate)
            if self.running:
                await self.advance()

    def status(self) -> Dict[str, Any]:
        metrics = self.flock.metrics
        return {
            "running": self.running,
            "status": self.flock.status.value,
            "tick": self.tick,
            "agents": len(self.flock.agents),
            "playback_rate": self.playback_rate,
            "metrics": asdict(metrics) if metrics is not None else None,
        }

    def payload(self) -> str:
        snapshot = self.flock.snapshot(self.tick)
        return json.dumps(
            {
                "tick": snapshot.tick,
                "metrics": asdict(snapshot.metrics) if snapshot.metrics is not None else None,
                "agents": snapshot.agents,
                "metadata": asdict(snapshot.metadata),
            }
        )

    async def publish(self) -> None:
        if not self.viewers:
            return
        payload = self.payload()
        viewers = list(self.viewers)
        results = await asyncio.gather(*(viewer.send_text(payload) for viewer in viewers), return_exceptions=True)
        gone = [viewer for viewer, result in zip(viewers, results) if isinstance(result, WebSocketDisconnect)]
        for viewer in gone:
            self.viewers.discard(viewer)
        if gone:
            logger.warning(f"Dropped {len(gone)} disconnected viewer(s)")
        for result in results:
            if isinstance(result, Exception) and not isinstance(result, WebSocketDisconnect):
                raise result


app = FastAPI(title="Murmuration Flocking Simulation")
controller = SimulationController(SimulationConfig())


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.get("/api/status")
async def get_status() -> Dict[str, Any]:
    return controller.status()


@app.get("/api/params")
async def get_params() -> Dict[str, Any]:
    return asdict(controller.config.params)


@app.patch("/api/params")
async def patch_params(changes: Dict[str, Any]) -> Dict[str, Any]:
    try:
        await controller.update_params(changes)
    except InvalidConfiguration as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return asdict(controller.config.params)


@app.post("/api/playback/{action}")
async def playback(action: str) -> Dict[str, Any]:
    if action == "start":
        await controller.start()
    elif action == "stop":
        await controller.stop()
    elif action == "reset":
        await controller.reset()
    elif action == "step":
        if controller.running:
            raise HTTPException(status_code=409, detail="pause playback before single-stepping")
        await controller.advance()
    else:
        raise HTTPException(status_code=404, detail=f"unknown playback action {action!r}")
    return controller.status()


@app.put("/api/playback/rate")
async def set_playback_rate(rate: float) -> Dict[str, Any]:
    return {"playback_rate": controller.set_playback_rate(rate)}


@app.websocket("/ws")
async def stream(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.viewers.add(websocket)
    await websocket.send_text(controller.payload())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        controller.viewers.discard(websocket)


__all__ = ["app", "controller"]
