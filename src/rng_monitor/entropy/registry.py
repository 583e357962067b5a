"""Name-to-class lookup for entropy sources.

The monitor picks its source by name (``config.entropy_source_type``).
``system`` and ``mock`` register themselves when their modules are
imported. Other installed distributions can contribute a source by
declaring an entry point in the ``rng_monitor.entropy_sources`` group,
for example a hardware RNG driver::

    [project.entry-points."rng_monitor.entropy_sources"]
    hwrng = "rng_hwrng.source:HardwareEntropySource"

Entry points are scanned once, the first time a name is looked up or the
names are listed.
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import TYPE_CHECKING, ClassVar

from rng_monitor.entropy.base import EntropySource

if TYPE_CHECKING:
    from collections.abc import Callable

    from rng_monitor.config import MonitorConfig

logger = logging.getLogger("rng_monitor")

ENTRY_POINT_GROUP = "rng_monitor.entropy_sources"


class EntropySourceRegistry:
    """Class-level table of entropy source classes keyed by name.

    A name registered in-process always wins over an entry point that
    advertises the same name.
    """

    _sources: ClassVar[dict[str, type[EntropySource]]] = {}
    _scanned: ClassVar[bool] = False

    @classmethod
    def register(cls, name: str) -> Callable[[type[EntropySource]], type[EntropySource]]:
        """Class decorator registering an EntropySource subclass as *name*.

        Raises:
            TypeError: If the decorated class is not an EntropySource.
            ValueError: If *name* already belongs to a different class.
        """

        def decorator(source_cls: type[EntropySource]) -> type[EntropySource]:
            if not (isinstance(source_cls, type) and issubclass(source_cls, EntropySource)):
                raise TypeError(f"{source_cls!r} is not an EntropySource subclass")
            existing = cls._sources.get(name)
            if existing is not None and existing is not source_cls:
                raise ValueError(
                    f"Entropy source name {name!r} is already taken by {existing.__qualname__}"
                )
            cls._sources[name] = source_cls
            return source_cls

        return decorator

    @classmethod
    def get(cls, name: str) -> type[EntropySource]:
        """Return the class registered as *name*.

        Raises:
            KeyError: If no in-process registration or entry point provides it.
        """
        if name not in cls._sources:
            cls._scan_entry_points()
        try:
            return cls._sources[name]
        except KeyError:
            known = ", ".join(cls.names()) or "(none)"
            raise KeyError(f"Unknown entropy source: {name!r}. Available: {known}") from None

    @classmethod
    def names(cls) -> list[str]:
        """Every known source name, sorted."""
        cls._scan_entry_points()
        return sorted(cls._sources)

    @classmethod
    def _scan_entry_points(cls) -> None:
        if cls._scanned:
            return
        cls._scanned = True
        try:
            entry_points = importlib.metadata.entry_points(group=ENTRY_POINT_GROUP)
        except Exception:  # Intentional: broken metadata must not stop startup
            logger.warning("Could not read entry points for %s", ENTRY_POINT_GROUP, exc_info=True)
            return

        for ep in entry_points:
            if ep.name in cls._sources:
                continue
            try:
                loaded = ep.load()
            except Exception:  # Intentional: one broken plugin must not hide the others
                logger.warning(
                    "Skipping entropy source %r (%s): import failed",
                    ep.name,
                    ep.value,
                    exc_info=True,
                )
                continue
            if not (isinstance(loaded, type) and issubclass(loaded, EntropySource)):
                logger.warning(
                    "Skipping entropy source %r (%s): not an EntropySource subclass",
                    ep.name,
                    ep.value,
                )
                continue
            cls._sources[ep.name] = loaded
            logger.debug("Registered entropy source %r from %s", ep.name, ep.value)

    @classmethod
    def clear(cls) -> None:
        """Forget every registration and allow a fresh entry-point scan. For tests."""
        cls._sources.clear()
        cls._scanned = False


register_entropy_source = EntropySourceRegistry.register


def build_entropy_source(config: MonitorConfig) -> EntropySource:
    """Instantiate the source named by ``config.entropy_source_type``.

    Sources selected by name are built without arguments.

    Raises:
        KeyError: If the name is unknown.
    """
    source = EntropySourceRegistry.get(config.entropy_source_type)()
    logger.info("Using entropy source %r", source.name)
    return source
