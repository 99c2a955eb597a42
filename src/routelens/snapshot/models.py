"""Snapshot model: a content-derived identity of a project's routing sources."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class Snapshot:
    """Hashes of every routing source file plus the dependency manifest.

    ``taken_at`` and ``root`` are descriptive only. Two snapshots of
    identical content have the same ``fingerprint`` and ``content_key``
    regardless of when or where they were taken. ``config_hash`` identifies
    the result-shaping settings and is part of ``content_key`` but not of
    ``fingerprint``.
    """

    fingerprint: str
    file_hashes: Dict[str, str] = field(default_factory=dict)
    manifest_hash: str = ""
    taken_at: str = ""  # ISO-8601
    root: str = ""
    config_hash: str = ""

    @property
    def file_count(self) -> int:
        return len(self.file_hashes)

    def content_key(self) -> str:
        """Canonical serialization of the hashed content (no time, no location)."""
        return json.dumps(
            {
                "fingerprint": self.fingerprint,
                "manifest_hash": self.manifest_hash,
                "files": self.file_hashes,
                "config": self.config_hash,
            },
            sort_keys=True,
            separators=(",", ":"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "file_hashes": dict(sorted(self.file_hashes.items())),
            "manifest_hash": self.manifest_hash,
            "taken_at": self.taken_at,
            "root": self.root,
            "config_hash": self.config_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        return cls(
            fingerprint=data["fingerprint"],
            file_hashes=dict(data.get("file_hashes", {})),
            manifest_hash=data.get("manifest_hash", ""),
            taken_at=data.get("taken_at", ""),
            root=data.get("root", ""),
            config_hash=data.get("config_hash", ""),
        )
