"""Transports that physically move serialized events across the process boundary."""

from __future__ import annotations

import asyncio
import os
import shlex
from abc import ABC, abstractmethod
from typing import Callable

from loguru import logger

RawReceiver = Callable[[str], None]


class Transport(ABC):
    """Line-framed, bidirectional pipe to the agent backend."""

    @abstractmethod
    async def start(self, receiver: RawReceiver) -> None:
        """Begin delivering inbound frames to ``receiver``."""

    @abstractmethod
    def send_raw(self, data: str) -> None:
        """Queue one outbound frame. Must not block the caller."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying resources."""


class InMemoryTransport(Transport):
    """Loopback transport for tests and in-process backends."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self._receiver: RawReceiver | None = None
        self.closed = False

    async def start(self, receiver: RawReceiver) -> None:
        self._receiver = receiver

    def send_raw(self, data: str) -> None:
        if self.closed:
            logger.warning("Dropping outbound frame: transport closed")
            return
        self.sent.append(data)

    def deliver(self, raw: str) -> None:
        """Push one inbound frame as if the backend had written it."""
        if self._receiver is None:
            raise RuntimeError("Transport not started")
        self._receiver(raw)

    async def close(self) -> None:
        self.closed = True
        self._receiver = None


class SubprocessTransport(Transport):
    """Run the backend as a child process speaking JSON lines over stdio."""

    def __init__(
        self,
        command: str,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self.command = command
        self.cwd = (cwd or "").strip() or None
        self.env = env
        self._proc: asyncio.subprocess.Process | None = None
        self._reader: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    async def start(self, receiver: RawReceiver) -> None:
        if self.running:
            return
        argv = shlex.split(self.command, posix=os.name != "nt")
        if not argv:
            raise ValueError("Backend command is empty")

        env = dict(os.environ)
        if self.env:
            env.update(self.env)
        self._proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            cwd=self.cwd,
            env=env,
        )
        logger.info(f"Backend started: {argv[0]} (pid {self._proc.pid})")
        self._reader = asyncio.create_task(self._read_loop(receiver), name="agent-cowork-backend-reader")

    def send_raw(self, data: str) -> None:
        proc = self._proc
        if proc is None or proc.stdin is None or proc.returncode is not None:
            logger.warning("Dropping outbound frame: backend is not running")
            return
        if proc.stdin.is_closing():
            logger.warning("Dropping outbound frame: backend stdin closed")
            return
        proc.stdin.write(data.encode("utf-8") + b"\n")

    async def close(self) -> None:
        proc = self._proc
        if proc is None:
            return
        if proc.stdin is not None and not proc.stdin.is_closing():
            proc.stdin.close()
        if proc.returncode is None:
            try:
                await asyncio.wait_for(proc.wait(), timeout=2.0)
            except asyncio.TimeoutError:
                logger.warning("Backend did not exit, terminating")
                proc.terminate()
                await proc.wait()
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        logger.info(f"Backend exited with code {proc.returncode}")
        self._proc = None

    async def _read_loop(self, receiver: RawReceiver) -> None:
        proc = self._proc
        if proc is None or proc.stdout is None:
            return
        while True:
            line = await proc.stdout.readline()
            if not line:
                break
            text = line.decode("utf-8", errors="replace").strip()
            if text:
                receiver(text)
        logger.debug("Backend stdout closed")
