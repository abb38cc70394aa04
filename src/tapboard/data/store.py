"""
Reading and writing learned layouts.

A layout file is a JSON object mapping each single-character key to its
descriptor in camelCase form (``mean``, ``median``, ``stdDev``,
``suggestedSize``, ``sampleCount`` ...). A character whose descriptor cannot be
parsed is skipped; the rest of the file still loads.
"""

import json
from pathlib import Path
from typing import Dict, Mapping, Optional

from loguru import logger

from ..diagnostics import DiagnosticCallback, DiagnosticKind, LayoutFormatError, report
from ..learning.statistics import KeyDescriptor


class LayoutStore:
    """JSON persistence for descriptor maps."""

    def __init__(self, on_diagnostic: Optional[DiagnosticCallback] = None):
        self.on_diagnostic = on_diagnostic

    def save(self, descriptors: Mapping[str, KeyDescriptor], output_path: str) -> None:
        """
        Write descriptors to ``output_path``.

        Raises:
            IOError: If the file cannot be written
        """
        output_file = Path(output_path)
        payload = {key: descriptor.to_dict() for key, descriptor in descriptors.items()}
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            logger.info(f"Layout with {len(payload)} keys saved to {output_path}")
        except IOError as e:
            logger.error(f"Failed to save layout: {e}")
            raise IOError(f"Failed to save layout: {e}")

    def parse(self, data: Mapping) -> Dict[str, KeyDescriptor]:
        """Parse a decoded layout object, skipping malformed characters."""
        descriptors: Dict[str, KeyDescriptor] = {}
        for key, entry in data.items():
            if not isinstance(key, str) or len(key) != 1:
                report(
                    self.on_diagnostic,
                    DiagnosticKind.PERSISTENCE_FAILURE,
                    f"Skipping layout entry {key!r}: key must be a single character",
                    level="WARNING",
                    key=key,
                )
                continue
            try:
                if not isinstance(entry, Mapping):
                    raise TypeError(f"expected an object, got {type(entry).__name__}")
                descriptors[key] = KeyDescriptor.from_dict(entry)
            except (KeyError, TypeError, ValueError) as e:
                report(
                    self.on_diagnostic,
                    DiagnosticKind.PERSISTENCE_FAILURE,
                    f"Skipping layout entry {key!r}: {e!r}",
                    level="WARNING",
                    key=key,
                )
        return descriptors

    def load(self, data_path: str) -> Dict[str, KeyDescriptor]:
        """
        Read descriptors from ``data_path``.

        Raises:
            FileNotFoundError: If the file does not exist
            LayoutFormatError: If the file cannot be read or is not a JSON object
        """
        data_file = Path(data_path)
        if not data_file.exists():
            raise FileNotFoundError(f"Layout file not found: {data_path}")

        try:
            with open(data_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse layout JSON: {e}")
            raise LayoutFormatError(f"Invalid JSON in layout file: {e}")
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.error(f"Failed to read layout file {data_path}: {e}")
            raise LayoutFormatError(f"Unreadable layout file {data_path}: {e}")

        if not isinstance(data, dict):
            raise LayoutFormatError("Layout file must contain a JSON object")

        descriptors = self.parse(data)
        logger.info(f"Loaded {len(descriptors)} of {len(data)} keys from {data_path}")
        return descriptors
