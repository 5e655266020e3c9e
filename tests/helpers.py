from pathlib import Path
from typing import Mapping

import pytest


def _item_path(item) -> Path:
    path = getattr(item, "path", None)
    return Path(path if path is not None else str(item.fspath)).resolve()


def mark_by_layer(items, layers: Mapping[Path, pytest.MarkDecorator]) -> None:
    """Add the marker of the package layer (core, infra, app, shared) each test lives under."""
    resolved = {Path(base).resolve(): marker for base, marker in layers.items()}
    for item in items:
        path = _item_path(item)
        for base, marker in resolved.items():
            if path.is_relative_to(base):
                item.add_marker(marker)
                break
