"""Dataset discovery and decoding.

A dataset is named by a single parameter (the ``map`` query parameter of
the web viewer) and lives at ``<data_dir>/<name>.json`` or ``<data_dir>/<name>.xml``.
A missing or empty name falls back to the configured default. Failures are
never retried; they surface as ``DatasetLoadError``.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import orjson
from loguru import logger

from ..config.defaults import DATASET_EXTENSIONS, DEFAULT_DATASET
from .exceptions import DatasetLoadError

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")

# XML child elements that carry fields instead of child nodes
_FIELD_TAGS = {"name", "label", "description", "annotation", "link"}


@dataclass(frozen=True)
class Dataset:
    """Decoded dataset file."""

    name: str
    path: Path
    data: Any


def xml_to_records(root: ET.Element) -> dict[str, Any]:
    """Convert an XML tree into nested record mappings.

    Each element is a node. Fields come from attributes (``name``/``label``,
    ``description``, ``link``, ``id``) or from same-named child elements;
    every other child element is a child node.
    """

    def fields(element: ET.Element) -> dict[str, Any]:
        record: dict[str, Any] = {"children": []}
        label = element.get("name", element.get("label"))
        description = element.get("description", element.get("annotation"))
        link = element.get("link")
        for child in element:
            text = (child.text or "").strip()
            if child.tag in ("name", "label"):
                label = label or text
            elif child.tag in ("description", "annotation"):
                description = description or text
            elif child.tag == "link":
                link = link or text
        if label is None:
            label = (element.text or "").strip() or element.tag
        record["name"] = label
        if description:
            record["description"] = description
        if link:
            record["link"] = link
        if element.get("id") is not None:
            record["id"] = element.get("id")
        return record

    top = fields(root)
    stack = [(root, top)]
    while stack:
        element, record = stack.pop()
        for child in element:
            if child.tag in _FIELD_TAGS:
                continue
            child_record = fields(child)
            record["children"].append(child_record)
            stack.append((child, child_record))
    return top


class DatasetLoader:
    """Resolves dataset names to files and decodes them."""

    def __init__(self, data_dir: Path, default_name: str = DEFAULT_DATASET) -> None:
        self.data_dir = Path(data_dir)
        self.default_name = default_name

    def resolve_name(self, name: str | None) -> str:
        """Dataset name to load, applying the default for missing names.

        Raises:
            DatasetLoadError: If the name is not a plain file stem
        """
        name = (name or "").strip() or self.default_name
        if not _NAME_PATTERN.match(name) or ".." in name:
            raise DatasetLoadError(
                f"Invalid dataset name: {name!r}", context={"url": name}
            )
        return name

    def url_for(self, name: str) -> str:
        """Location reported in messages (mirrors ``data/<name>.json``)."""
        return f"{self.data_dir.name}/{name}{DATASET_EXTENSIONS[0]}"

    def locate(self, name: str | None) -> Path:
        """Path of the dataset file.

        Raises:
            DatasetLoadError: If no ``.json`` or ``.xml`` file exists
        """
        resolved = self.resolve_name(name)
        for extension in DATASET_EXTENSIONS:
            candidate = self.data_dir / f"{resolved}{extension}"
            if candidate.is_file():
                return candidate
        raise DatasetLoadError(
            f"Dataset not found: {resolved}",
            context={"url": self.url_for(resolved), "name": resolved},
        )

    def available(self) -> list[str]:
        """Names of the datasets present in ``data_dir``."""
        if not self.data_dir.is_dir():
            return []
        return sorted(
            {
                path.stem
                for path in self.data_dir.iterdir()
                if path.suffix in DATASET_EXTENSIONS and path.is_file()
            }
        )

    def load(self, name: str | None = None) -> Dataset:
        """Read and decode a dataset.

        Raises:
            DatasetLoadError: If the file is missing, unreadable or undecodable
        """
        path = self.locate(name)
        resolved = path.stem
        context = {"url": f"{self.data_dir.name}/{path.name}", "name": resolved}
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise DatasetLoadError(f"Cannot read {path}: {e}", context=context) from e

        try:
            if path.suffix == ".xml":
                data = xml_to_records(ET.fromstring(raw))
            else:
                data = orjson.loads(raw)
        except (ET.ParseError, orjson.JSONDecodeError) as e:
            raise DatasetLoadError(
                f"Cannot decode {path.name}: {e}", context=context
            ) from e

        logger.info(f"Loaded dataset {resolved!r} from {path}")
        return Dataset(name=resolved, path=path, data=data)
