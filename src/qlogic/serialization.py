"""
Serialization helpers for questionnaire structures.

Provides lossless JSON/YAML round-trip via an intermediate dict
representation that mirrors the stored questionnaire documents
(camelCase keys, optional keys omitted when unset).
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from qlogic.model import (
    HelpResource,
    Option,
    Question,
    QuestionType,
    Section,
    Structure,
    StructureMetadata,
)
from qlogic.rules import (
    Action,
    ConditionalRule,
    Operator,
    ValidationKind,
    ValidationRule,
)


def _put(d: Dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        d[key] = value


def rule_to_dict(r: ConditionalRule) -> Dict[str, Any]:
    d: Dict[str, Any] = {"field": r.field, "operator": r.operator.value}
    _put(d, "value", r.value)
    d["action"] = r.action.value
    _put(d, "targetValue", r.target_value)
    return d


def rule_from_dict(d: Dict[str, Any]) -> ConditionalRule:
    return ConditionalRule(
        field=d["field"],
        operator=Operator(d["operator"]),
        action=Action(d["action"]),
        value=d.get("value"),
        target_value=d.get("targetValue"),
    )


def validation_to_dict(v: ValidationRule) -> Dict[str, Any]:
    d: Dict[str, Any] = {"type": v.kind.value}
    _put(d, "value", v.value)
    _put(d, "message", v.message)
    return d


def validation_from_dict(d: Dict[str, Any]) -> ValidationRule:
    return ValidationRule(kind=ValidationKind(d["type"]), value=d.get("value"), message=d.get("message"))


def option_to_dict(o: Option) -> Dict[str, Any]:
    return {"label": o.label, "value": o.value}


def option_from_dict(d: Dict[str, Any]) -> Option:
    return Option(label=d["label"], value=d["value"])


def question_to_dict(q: Question) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": q.id,
        "type": q.type.value,
        "label": q.label,
        "fieldName": q.field_name,
    }
    _put(d, "description", q.description)
    _put(d, "placeholder", q.placeholder)
    _put(d, "helpText", q.help_text)
    if q.required:
        d["required"] = True
    _put(d, "defaultValue", q.default_value)
    if q.options:
        d["options"] = [option_to_dict(o) for o in q.options]
    if q.validation:
        d["validation"] = [validation_to_dict(v) for v in q.validation]
    if q.conditional_logic:
        d["conditionalLogic"] = [rule_to_dict(r) for r in q.conditional_logic]
    return d


def question_from_dict(d: Dict[str, Any]) -> Question:
    return Question(
        id=d["id"],
        type=QuestionType(d["type"]),
        label=d.get("label", ""),
        field_name=d["fieldName"],
        description=d.get("description"),
        placeholder=d.get("placeholder"),
        help_text=d.get("helpText"),
        required=bool(d.get("required", False)),
        default_value=d.get("defaultValue"),
        options=[option_from_dict(o) for o in d.get("options") or []],
        validation=[validation_from_dict(v) for v in d.get("validation") or []],
        conditional_logic=[rule_from_dict(r) for r in d.get("conditionalLogic") or []],
    )


def section_to_dict(s: Section) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": s.id, "title": s.title}
    _put(d, "description", s.description)
    d["questions"] = [question_to_dict(q) for q in s.questions]
    if s.conditional_logic:
        d["conditionalLogic"] = [rule_to_dict(r) for r in s.conditional_logic]
    return d


def section_from_dict(d: Dict[str, Any]) -> Section:
    return Section(
        id=d["id"],
        title=d.get("title", ""),
        description=d.get("description"),
        questions=[question_from_dict(q) for q in d.get("questions") or []],
        conditional_logic=[rule_from_dict(r) for r in d.get("conditionalLogic") or []],
    )


def metadata_to_dict(m: StructureMetadata) -> Dict[str, Any]:
    d: Dict[str, Any] = {}
    _put(d, "estimatedTime", m.estimated_time)
    if m.required_documents:
        d["requiredDocuments"] = list(m.required_documents)
    if m.help_resources:
        d["helpResources"] = [{"title": h.title, "url": h.url} for h in m.help_resources]
    return d


def metadata_from_dict(d: Dict[str, Any]) -> StructureMetadata:
    return StructureMetadata(
        estimated_time=d.get("estimatedTime"),
        required_documents=list(d.get("requiredDocuments") or []),
        help_resources=[HelpResource(title=h["title"], url=h["url"]) for h in d.get("helpResources") or []],
    )


def structure_to_dict(s: Structure) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": s.id, "name": s.name, "type": s.type}
    _put(d, "description", s.description)
    d["sections"] = [section_to_dict(sec) for sec in s.sections]
    if s.metadata is not None:
        d["metadata"] = metadata_to_dict(s.metadata)
    return d


def structure_from_dict(d: Dict[str, Any]) -> Structure:
    metadata = d.get("metadata")
    return Structure(
        id=d["id"],
        name=d.get("name", ""),
        type=d["type"],
        description=d.get("description"),
        sections=[section_from_dict(sec) for sec in d.get("sections") or []],
        metadata=metadata_from_dict(metadata) if metadata is not None else None,
    )


def structure_to_json(s: Structure) -> str:
    return json.dumps(structure_to_dict(s), sort_keys=True)


def structure_from_json(s: str) -> Structure:
    d = json.loads(s)
    return structure_from_dict(d)


def structure_to_yaml(s: Structure) -> str:
    return yaml.safe_dump(structure_to_dict(s), sort_keys=False)


def structure_from_yaml(s: str) -> Structure:
    d = yaml.safe_load(s)
    return structure_from_dict(d)


def load_structure_file(path: str | Path) -> Structure:
    """Read a structure from a .json, .yaml or .yml file."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return structure_from_json(text)
    return structure_from_yaml(text)


def load_responses_file(path: str | Path) -> Dict[str, Any]:
    """Read a flat response mapping from a JSON or YAML file."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Responses file must contain a mapping: {path}")
    return data
