"""Application settings, fixed once the ``App`` is created."""

from dataclasses import dataclass, field
from pathlib import Path

from trill.head import HeadConfig


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Every field has a default; pass only what differs::

        config = AppConfig(
            debug=True,
            components_dir="components",
            head=HeadConfig(favicon="/favicon.png"),
        )
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Reload (development mode, requires debug=True)
    reload_dirs: tuple[str, ...] = ()

    # Components
    components_dir: str | Path | None = None
    head: HeadConfig = field(default_factory=HeadConfig)

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
