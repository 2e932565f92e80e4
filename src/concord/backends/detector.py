"""Find which configured backend CLIs are installed."""

from __future__ import annotations

import asyncio
import re
import shutil
from dataclasses import dataclass

from concord.backends.base import terminate_process
from concord.backends.catalog import BACKEND_CLASSES
from concord.logger import log
from concord.models.config import AppConfig

VERSION_PATTERN = re.compile(r"(\d+\.\d+\.\d+)")
VERSION_TIMEOUT = 10


@dataclass(frozen=True)
class DetectedBackend:
    """A configured backend whose CLI resolved to an executable."""

    name: str
    binary_path: str
    version: str = "unknown"


class BackendDetector:
    """Resolve each configured backend's binary and read its version.

    Backends are probed in config order; an explicit ``binary_path`` wins
    over a PATH lookup of the backend's own name.
    """

    def __init__(self, config: AppConfig | None = None):
        self.config = config or AppConfig()

    async def detect_all(self) -> dict[str, DetectedBackend]:
        probes = []
        for name, backend_cfg in self.config.backends.items():
            cls = BACKEND_CLASSES.get(name)
            if cls is None:
                log.warning("No backend implementation for configured '%s'", name)
                continue

            path = shutil.which(backend_cfg.binary_path or cls.name)
            if path is None:
                log.debug("%s: %s not found", name, backend_cfg.binary_path or cls.name)
                continue
            log.info("Found %s at %s", name, path)
            probes.append(self._probe(name, path, cls.version_args))

        detected = {}
        for result in await asyncio.gather(*probes, return_exceptions=True):
            if isinstance(result, DetectedBackend):
                detected[result.name] = result
            else:
                log.warning("Detection failed: %s", result)
        return detected

    async def _probe(self, name: str, path: str, version_args: tuple[str, ...]) -> DetectedBackend:
        return DetectedBackend(name=name, binary_path=path, version=await self.read_version(path, version_args))

    @staticmethod
    async def read_version(path: str, version_args: tuple[str, ...] = ("--version",)) -> str:
        """First ``x.y.z`` in the CLI's version output, or ``"unknown"``."""
        try:
            proc = await asyncio.create_subprocess_exec(
                path, *version_args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            log.warning("Could not run %s: %s", path, e)
            return "unknown"

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=VERSION_TIMEOUT)
        except asyncio.TimeoutError:
            log.warning("%s did not report a version within %ds", path, VERSION_TIMEOUT)
            await terminate_process(proc)
            return "unknown"

        match = VERSION_PATTERN.search((stdout or stderr or b"").decode("utf-8", errors="replace"))
        return match.group(1) if match else "unknown"
