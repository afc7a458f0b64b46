"""
Per-process server state.

One ``ServerContext`` is created by the application factory and injected
into every handler through the aiohttp app.  It owns the shared payload
buffer and the Prometheus counters; handlers keep no other state.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from prometheus_client import CollectorRegistry, Counter

from common.payload import generate_payload

from .config import ServerConfig


@dataclass
class ServerMetrics:
    """Prometheus counters registered on a private registry."""

    registry: CollectorRegistry = field(default_factory=CollectorRegistry)

    def __post_init__(self) -> None:
        self.ping_requests = Counter(
            "ping_requests", "Number of ping requests", registry=self.registry,
        )
        self.download_bytes = Counter(
            "download_bytes", "Total bytes served by /download", registry=self.registry,
        )
        self.download_chunks = Counter(
            "download_chunks", "Chunk writes issued by /download", registry=self.registry,
        )
        self.upload_bytes = Counter(
            "upload_bytes", "Total bytes received by /upload", registry=self.registry,
        )
        self.upload_requests = Counter(
            "upload_requests", "Completed /upload requests", registry=self.registry,
        )

    def value(self, name: str) -> float:
        """Current value of counter *name* (without the ``_total`` suffix)."""
        sample = self.registry.get_sample_value(f"{name}_total")
        return sample if sample is not None else 0.0


@dataclass
class ServerContext:
    config: ServerConfig
    payload: bytes
    metrics: ServerMetrics

    @classmethod
    def create(cls, config: ServerConfig) -> ServerContext:
        """Allocate the payload buffer once for the lifetime of the process."""
        return cls(
            config=config,
            payload=generate_payload(config.chunk_size, config.randomize),
            metrics=ServerMetrics(),
        )
