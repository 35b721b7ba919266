"""
Configuration handling for elfcopyflat.
"""

from dataclasses import dataclass, fields as dataclass_fields
from typing import Optional
import json
from pathlib import Path

from .utils.flags import parse_flags, parse_address


@dataclass
class Config:
    """Configuration options for a flat binary conversion."""

    # Segment selection, as "rwx" strings
    if_flags: Optional[str] = None
    if_not_flags: Optional[str] = None

    # Address of output offset 0 (default: lowest segment address)
    base: Optional[int] = None

    # Runtime options
    allow_overlaps: bool = False
    verbose: bool = False

    def __post_init__(self):
        for name in ('if_flags', 'if_not_flags'):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{name} must be a string of flags, got {value!r}")
        if self.base is not None:
            self.base = parse_address(self.base)

    @property
    def if_mask(self) -> Optional[int]:
        """PF_* bits a segment must have, or None."""
        return parse_flags(self.if_flags) if self.if_flags is not None else None

    @property
    def if_not_mask(self) -> Optional[int]:
        """PF_* bits a segment must not have, or None."""
        return parse_flags(self.if_not_flags) if self.if_not_flags is not None else None

    @classmethod
    def load(cls, path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from a JSON file.

        Returns the defaults if no path is given. A given path must exist.
        """
        if path is None:
            return cls()

        with open(path, 'r') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        # Convert camelCase to snake_case
        converted = {}
        for key, value in data.items():
            snake_key = ''.join(
                f'_{c.lower()}' if c.isupper() else c
                for c in key
            ).lstrip('_')
            converted[snake_key] = value

        # Filter to only include valid fields
        valid_fields = {f.name for f in dataclass_fields(cls)}
        filtered = {k: v for k, v in converted.items() if k in valid_fields}

        return cls(**filtered)

    def save(self, path: Path) -> None:
        """Save configuration to a JSON file."""
        # Convert snake_case to camelCase
        data = {}
        for key, value in self.__dict__.items():
            camel_key = ''.join(
                word.capitalize() if i > 0 else word
                for i, word in enumerate(key.split('_'))
            )
            if key == 'base' and value is not None:
                value = f'0x{value:x}'
            data[camel_key] = value

        with open(path, 'w') as f:
            json.dump(data, f, indent=2)
