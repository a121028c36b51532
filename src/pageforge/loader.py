# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Load page descriptors and theme configuration from disk.

Content directory layout: one descriptor per file (``*.yaml``, ``*.yml`` or
``*.json``), built in file-name order.  The theme is a single YAML file::

    name: print-shop
    tokens:
      color:
        primary: "#1f6feb"
      spacing:
        md: 1rem
      breakpoint:
        tablet: 768px
"""

from __future__ import annotations

import json
import logging
from collections.abc import Hashable
from pathlib import Path
from typing import Any

import yaml
from yaml.constructor import ConstructorError
from pydantic import ValidationError

from .descriptor import PageDescriptor
from .errors import ConfigError
from .theme import ThemeTokenRegistry

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIXES = (".yaml", ".yml", ".json")


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects a key repeated within one mapping."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _value_node in node.value:
            key = self.construct_object(key_node, deep=deep)
            if isinstance(key, Hashable):
                if key in seen:
                    raise ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key!r}",
                        key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


class _DuplicateKeyError(ValueError):
    pass


def _unique_pairs(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise _DuplicateKeyError(f"found duplicate key {key!r}")
        result[key] = value
    return result


def _read_structured(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path.name}: {e.strerror}", path=str(path)) from e
    try:
        if path.suffix == ".json":
            return json.loads(text, object_pairs_hook=_unique_pairs)
        return yaml.load(text, Loader=_UniqueKeyLoader)  # noqa: S506
    except (json.JSONDecodeError, _DuplicateKeyError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse {path.name}: {e}", path=str(path)) from e


def parse_descriptor(data: Any, *, source: str = "<memory>") -> PageDescriptor:
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: page descriptor must be a mapping", path=source)
    try:
        return PageDescriptor.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{source}: invalid page descriptor\n{e}", path=source) from e


def load_pages(content_dir: str | Path) -> list[PageDescriptor]:
    """Load every descriptor in *content_dir*.

    Raises:
        ConfigError: missing directory, unparsable file, invalid descriptor,
            or two files declaring the same page id.
    """
    root = Path(content_dir)
    if not root.is_dir():
        raise ConfigError(f"Content directory not found: {root}", path=str(root))

    pages: list[PageDescriptor] = []
    seen: dict[str, str] = {}
    for path in sorted(root.iterdir()):
        if not path.is_file() or path.suffix not in DESCRIPTOR_SUFFIXES:
            continue
        descriptor = parse_descriptor(_read_structured(path), source=path.name)
        if descriptor.id in seen:
            raise ConfigError(
                f"Page id '{descriptor.id}' declared by both {seen[descriptor.id]} and {path.name}",
                path=str(path),
            )
        seen[descriptor.id] = path.name
        pages.append(descriptor)

    logger.info("Loaded %d page descriptor(s) from %s", len(pages), root)
    return pages


def load_theme(path: str | Path) -> ThemeTokenRegistry:
    """Load *path* into a frozen ThemeTokenRegistry."""
    theme_path = Path(path)
    data = _read_structured(theme_path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{theme_path.name}: theme must be a mapping", path=str(theme_path))
    registry = ThemeTokenRegistry.from_config(data)
    logger.info("Loaded %d theme token(s) from %s", len(registry), theme_path.name)
    return registry
