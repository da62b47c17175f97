"""Component discovery for a components directory.

Imports every ``.py`` file below the directory and collects the routed
``Component`` objects each module defines. A module may define one
component or several::

    components/
        hello.py        # @get("/hello") def hello(props): ...
        todos/
            list.py     # @get("/todos") ... and @post("/todos") ...
        _shared.py      # skipped: leading underscore

Files and directories starting with ``_`` or ``.`` are skipped. Import
errors propagate; a broken component module stops startup.
"""

from __future__ import annotations

import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType

from trill.components import Component

logger = logging.getLogger("trill.discovery")


def discover_components(components_dir: str | Path) -> list[Component]:
    """Load all component modules under *components_dir*.

    Returns the routed components in file order, then definition order
    within each module.
    """
    root = Path(components_dir).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Components directory not found: {root}")

    components: list[Component] = []
    for file in _component_files(root):
        module = _load_module(file, root)
        found = components_in(module)
        logger.debug("%s: %d component(s)", file.relative_to(root), len(found))
        components.extend(found)
    return components


def components_in(module: ModuleType) -> list[Component]:
    """Routed components defined in *module*.

    Honours ``__all__`` when the module sets it. Aliases of the same
    component are reported once.
    """
    names = getattr(module, "__all__", None)
    if names is None:
        candidates = list(vars(module).values())
    else:
        candidates = [getattr(module, name) for name in names]

    seen: set[int] = set()
    found: list[Component] = []
    for value in candidates:
        if not isinstance(value, Component) or value.route is None:
            continue
        if id(value) in seen:
            continue
        seen.add(id(value))
        found.append(value)
    return found


def _component_files(root: Path) -> list[Path]:
    files: list[Path] = []
    for file in sorted(root.rglob("*.py")):
        relative = file.relative_to(root)
        if any(part.startswith(("_", ".")) for part in relative.parts):
            continue
        files.append(file)
    return files


def _load_module(file: Path, root: Path) -> ModuleType:
    """Import *file* under a name derived from its path below *root*."""
    dotted = ".".join(file.relative_to(root).with_suffix("").parts)
    module_name = f"_trill_components.{root.name}.{dotted}"
    spec = importlib.util.spec_from_file_location(module_name, file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load component module: {file}")

    module = importlib.util.module_from_spec(spec)
    # Registered so dataclasses and pickling can find the module
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module
