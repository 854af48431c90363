"""
Versioned list of shell resources cached for offline use.

The cache bucket name embeds the version, so bumping ``SHELL_CACHE_VERSION``
is the single change needed to make every client drop its old shell.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ShellManifest:
    prefix: str
    version: str
    paths: tuple[str, ...]
    fallback_path: str = "/index.html"

    def __post_init__(self) -> None:
        for path in self.paths:
            if not path.startswith("/"):
                raise ValueError(f"shell paths must be absolute: {path!r}")
        if self.fallback_path not in self.paths:
            raise ValueError(f"fallback {self.fallback_path!r} must be one of the shell paths")

    @property
    def cache_name(self) -> str:
        return f"{self.prefix}-{self.version}"

    def is_shell_path(self, path: str) -> bool:
        return path in self.paths

    @classmethod
    def from_settings(cls, settings) -> "ShellManifest":
        return cls(
            prefix=settings.SHELL_CACHE_PREFIX,
            version=settings.SHELL_CACHE_VERSION,
            paths=tuple(settings.SHELL_PATHS),
            fallback_path=settings.SHELL_FALLBACK_PATH,
        )
