"""Durable JSON persistence for the policy document.

The on-disk format is the compatibility contract between process
restarts and any external rule-editing tool::

    {
      "defaultAction": "deny",
      "rules": [
        {
          "pattern": "echo *",
          "action": "allow",
          "description": "Echo commands",
          "enabled": true
        }
      ]
    }

* UTF-8, pretty-printed (2-space indent).
* Lower-camel-case keys; enum values as lower-case strings.
* ``null``-valued optional fields (``shells``, ``description``) omitted.

Writes go to a temporary file in the target directory which then
replaces the document, so readers never observe a half-written file.
These are blocking file operations.
"""
from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from exec_gate.core.errors import PolicyLoadError, PolicySaveError
from exec_gate.core.types import PolicyDocument


def dump_document(document: PolicyDocument) -> str:
    """Serialise *document* to the persisted JSON text."""
    data = document.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def parse_document(text: str, source: str = "<string>") -> PolicyDocument:
    """Parse and validate persisted JSON *text*.

    Raises
    ------
    PolicyLoadError
        On JSON syntax errors, nesting too deep to decode, or schema
        violations.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise PolicyLoadError(
            f"Invalid JSON in {source}: {exc}",
            details={"source": source},
        ) from exc

    if not isinstance(data, dict):
        raise PolicyLoadError(
            f"Policy {source} must be a JSON object (got {type(data).__name__})",
            details={"source": source},
        )

    try:
        return PolicyDocument.model_validate(data)
    except ValidationError as exc:
        lines = [f"Policy validation failed in {source}:"]
        for err in exc.errors():
            loc = " -> ".join(str(x) for x in err["loc"]) if err["loc"] else "(root)"
            lines.append(f"  {loc}: {err['msg']}")
        raise PolicyLoadError("\n".join(lines), details={"source": source}) from exc


class JsonPolicyStore:
    """Store the policy document as a JSON file at *path*."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        """Return ``True`` if the document file is present."""
        return self._path.is_file()

    def load(self) -> PolicyDocument:
        """Read and validate the document.

        Raises
        ------
        PolicyLoadError
            If the file is missing, unreadable, or invalid.
        """
        if not self._path.exists():
            raise PolicyLoadError(
                f"Policy file not found: {self._path}",
                details={"source": str(self._path)},
            )
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PolicyLoadError(
                f"Cannot read policy file {self._path}: {exc}",
                details={"source": str(self._path)},
            ) from exc
        return parse_document(text, source=str(self._path))

    def save(self, document: PolicyDocument) -> None:
        """Atomically replace the document file with *document*.

        Raises
        ------
        PolicySaveError
            If the directory or file cannot be written.
        """
        payload = dump_document(document)
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as exc:
            raise PolicySaveError(
                f"Cannot write policy file {self._path}: {exc}",
                details={"target": str(self._path)},
            ) from exc
        finally:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
