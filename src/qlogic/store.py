"""
Structure and response persistence.

The evaluation engine never talks to storage itself. Callers fetch a
Structure from a StructureStore, run evaluation passes, and hand the
resulting responses back to the store.

Implementations:
    - InMemoryStore: dict-backed, for tests and embedding
    - YamlDirectoryStore: structures read from a directory of YAML/JSON
      documents, responses written back as YAML files

Only one structure per type may be active at a time; adding a second
active structure of the same type is a conflict.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple
from urllib.parse import quote

import yaml

from qlogic.analyzer import check_structure
from qlogic.model import Structure
from qlogic.sanitize import sanitize_responses
from qlogic.serialization import structure_from_dict, structure_to_dict

logger = logging.getLogger(__name__)


class StructureConflictError(Exception):
    """Raised when an active structure already exists for a type."""
    pass


class ResponseStatus(Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"


@dataclass
class ResponseRecord:
    """
    A user's saved answers for one structure.

    Properties:
        user_id: Owner of the answers
        structure_id: Structure the answers belong to
        form_type: Type tag of that structure (None when it is unknown)
        responses: Flat response store
        current_section: Section the user was last on
        status: ResponseStatus
        updated_at: Time of the last save (UTC)
    """

    user_id: str
    structure_id: str
    form_type: Optional[str] = None
    responses: Dict[str, Any] = field(default_factory=dict)
    current_section: int = 0
    status: ResponseStatus = ResponseStatus.DRAFT
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def record_to_dict(r: ResponseRecord) -> Dict[str, Any]:
    return {
        "userId": r.user_id,
        "structureId": r.structure_id,
        "formType": r.form_type,
        "responses": r.responses,
        "currentSection": r.current_section,
        "status": r.status.value,
        "updatedAt": r.updated_at.isoformat(),
    }


def record_from_dict(d: Dict[str, Any]) -> ResponseRecord:
    return ResponseRecord(
        user_id=d["userId"],
        structure_id=d["structureId"],
        form_type=d.get("formType"),
        responses=dict(d.get("responses") or {}),
        current_section=int(d.get("currentSection", 0)),
        status=ResponseStatus(d.get("status", ResponseStatus.DRAFT.value)),
        updated_at=datetime.fromisoformat(d["updatedAt"]),
    )


class StructureStore(ABC):
    """
    Persistence collaborator for the questionnaire engine.

    Stateless with respect to evaluation: it stores structures and
    response snapshots, nothing derived from them.
    """

    @abstractmethod
    def get_structure(self, structure_type: str) -> Optional[Structure]:
        """
        Return the active structure for a type.

        Returns:
            Structure, or None when no active structure has that type
        """

    @abstractmethod
    def list_structures(self) -> List[Structure]:
        """Return all active structures."""

    @abstractmethod
    def add_structure(self, structure: Structure) -> Structure:
        """
        Store a structure and make it the active one for its type.

        Raises:
            StructureConflictError: If another structure of that type is active
        """

    @abstractmethod
    def deactivate_structure(self, structure_id: str) -> bool:
        """Deactivate a structure; False when it is unknown."""

    @abstractmethod
    def save_responses(
        self,
        user_id: str,
        structure_id: str,
        responses: Mapping[str, Any],
        current_section: Optional[int] = None,
        status: Optional[ResponseStatus] = None,
    ) -> ResponseRecord:
        """
        Create or update the user's responses for a structure.

        String answers are sanitized before they are stored. On update,
        current_section and status keep their stored values when not given.
        """

    @abstractmethod
    def get_responses(self, user_id: str, structure_id: str) -> Optional[ResponseRecord]:
        """Return the user's saved responses for a structure, if any."""

    @abstractmethod
    def list_responses(self, user_id: str, form_type: Optional[str] = None) -> List[ResponseRecord]:
        """Return the user's saved responses, most recently updated first."""

    @abstractmethod
    def delete_responses(self, user_id: str, structure_id: str) -> bool:
        """Delete the user's responses for a structure; False when none exist."""


class InMemoryStore(StructureStore):
    """Dict-backed store. Returned objects are copies."""

    def __init__(self):
        self._structures: Dict[str, Structure] = {}
        self._active: Set[str] = set()
        self._responses: Dict[Tuple[str, str], ResponseRecord] = {}

    def get_structure(self, structure_type: str) -> Optional[Structure]:
        for structure_id in self._active:
            structure = self._structures[structure_id]
            if structure.type == structure_type:
                return deepcopy(structure)
        return None

    def list_structures(self) -> List[Structure]:
        return [deepcopy(s) for s in self._structures.values() if s.id in self._active]

    def add_structure(self, structure: Structure) -> Structure:
        existing = self.get_structure(structure.type)
        if existing is not None and existing.id != structure.id:
            raise StructureConflictError(
                f"A questionnaire with type '{structure.type}' already exists ({existing.id})"
            )
        self._structures[structure.id] = deepcopy(structure)
        self._active.add(structure.id)
        logger.info("Stored structure %s (type %s)", structure.id, structure.type)
        return deepcopy(structure)

    def deactivate_structure(self, structure_id: str) -> bool:
        if structure_id not in self._structures:
            return False
        self._active.discard(structure_id)
        logger.info("Deactivated structure %s", structure_id)
        return True

    def save_responses(
        self,
        user_id: str,
        structure_id: str,
        responses: Mapping[str, Any],
        current_section: Optional[int] = None,
        status: Optional[ResponseStatus] = None,
    ) -> ResponseRecord:
        cleaned = sanitize_responses(responses)
        existing = self._responses.get((user_id, structure_id))

        if existing is not None:
            record = ResponseRecord(
                user_id=user_id,
                structure_id=structure_id,
                form_type=existing.form_type,
                responses=cleaned,
                current_section=existing.current_section if current_section is None else current_section,
                status=existing.status if status is None else status,
            )
        else:
            structure = self._structures.get(structure_id)
            if structure is None:
                logger.warning("Saving responses for unknown structure %s", structure_id)
            record = ResponseRecord(
                user_id=user_id,
                structure_id=structure_id,
                form_type=structure.type if structure is not None else None,
                responses=cleaned,
                current_section=current_section or 0,
                status=status or ResponseStatus.DRAFT,
            )

        self._responses[(user_id, structure_id)] = record
        logger.info(
            "Saved %d responses for user %s on %s (%s)",
            len(cleaned), user_id, structure_id, record.status.value,
        )
        return deepcopy(record)

    def get_responses(self, user_id: str, structure_id: str) -> Optional[ResponseRecord]:
        record = self._responses.get((user_id, structure_id))
        return deepcopy(record) if record is not None else None

    def list_responses(self, user_id: str, form_type: Optional[str] = None) -> List[ResponseRecord]:
        records = [
            r for (owner, _), r in self._responses.items()
            if owner == user_id and (form_type is None or r.form_type == form_type)
        ]
        records.sort(key=lambda r: r.updated_at, reverse=True)
        return [deepcopy(r) for r in records]

    def delete_responses(self, user_id: str, structure_id: str) -> bool:
        return self._responses.pop((user_id, structure_id), None) is not None


def _safe_name(value: str) -> str:
    """
    Encode an identifier as a single path component.

    Percent-encoding is reversible, so distinct identifiers never share a
    file. Dots are encoded too so "." and ".." stay inside the directory.
    """
    return quote(value, safe="").replace(".", "%2E")


class YamlDirectoryStore(InMemoryStore):
    """
    File-backed store rooted at a directory.

    Layout:
        <root>/structures/*.yaml      structure documents (also .yml/.json);
                                      an optional top-level `active: false`
                                      keeps a document inactive
        <root>/responses/<user>/<structure>.yaml   saved responses

    Structures are read and checked once, when the store is opened, and
    are written back to the file they came from. New structures and
    response records use percent-encoded ids as file names.
    """

    def __init__(self, root: str | Path, strict: bool = True,
                 validators: Optional[Mapping[str, Callable]] = None):
        super().__init__()
        self.root = Path(root)
        self.strict = strict
        self.validators = validators
        self.structures_dir = self.root / "structures"
        self.responses_dir = self.root / "responses"
        # Structure id -> document it was read from or last written to
        self._structure_files: Dict[str, Path] = {}
        self._load()

    def _load(self) -> None:
        if self.structures_dir.is_dir():
            paths = sorted(
                p for p in self.structures_dir.iterdir()
                if p.suffix.lower() in (".yaml", ".yml", ".json")
            )
            for path in paths:
                text = path.read_text(encoding="utf-8")
                data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
                if not isinstance(data, dict):
                    raise ValueError(f"Structure file must contain a mapping: {path}")
                active = bool(data.pop("active", True))
                structure = structure_from_dict(data)
                check_structure(structure, strict=self.strict, validators=self.validators)
                if active:
                    super().add_structure(structure)
                else:
                    self._structures[structure.id] = structure
                self._structure_files[structure.id] = path
                logger.debug("Loaded structure %s from %s", structure.id, path)

        if self.responses_dir.is_dir():
            for path in sorted(self.responses_dir.glob("*/*.yaml")):
                record = record_from_dict(yaml.safe_load(path.read_text(encoding="utf-8")))
                self._responses[(record.user_id, record.structure_id)] = record

        logger.info(
            "Opened store at %s: %d structures, %d response records",
            self.root, len(self._structures), len(self._responses),
        )

    def _structure_path(self, structure_id: str) -> Path:
        path = self._structure_files.get(structure_id)
        if path is None:
            path = self.structures_dir / f"{_safe_name(structure_id)}.yaml"
        return path

    def _response_path(self, user_id: str, structure_id: str) -> Path:
        return self.responses_dir / _safe_name(user_id) / f"{_safe_name(structure_id)}.yaml"

    def _write_structure(self, structure: Structure, active: bool) -> None:
        data = structure_to_dict(structure)
        if not active:
            data["active"] = False
        path = self._structure_path(structure.id)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() == ".json":
            text = json.dumps(data, indent=2)
        else:
            text = yaml.safe_dump(data, sort_keys=False)
        path.write_text(text, encoding="utf-8")
        self._structure_files[structure.id] = path

    def add_structure(self, structure: Structure) -> Structure:
        check_structure(structure, strict=self.strict, validators=self.validators)
        stored = super().add_structure(structure)
        self._write_structure(structure, active=True)
        return stored

    def deactivate_structure(self, structure_id: str) -> bool:
        if not super().deactivate_structure(structure_id):
            return False
        self._write_structure(self._structures[structure_id], active=False)
        return True

    def save_responses(
        self,
        user_id: str,
        structure_id: str,
        responses: Mapping[str, Any],
        current_section: Optional[int] = None,
        status: Optional[ResponseStatus] = None,
    ) -> ResponseRecord:
        record = super().save_responses(user_id, structure_id, responses, current_section, status)
        path = self._response_path(user_id, structure_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(record_to_dict(record), sort_keys=False), encoding="utf-8")
        return record

    def delete_responses(self, user_id: str, structure_id: str) -> bool:
        if not super().delete_responses(user_id, structure_id):
            return False
        path = self._response_path(user_id, structure_id)
        if path.exists():
            path.unlink()
        return True
