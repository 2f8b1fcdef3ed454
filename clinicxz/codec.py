# clinicxz/codec.py
"""
Translation between stored rows and the nested records callers use.

Stored side: flat columns, JSON text for list fields, INTEGER 0/1 for flags.
Caller side: Python lists, dicts and bools.

Reads are lenient on purpose: a field that does not parse falls back to an
empty value so the rest of the record still loads.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


# ============================================================
# Field groups
# ============================================================

# previously_sought_help value -> column holding that provider's names
PROVIDERS = {
    "psychologist": "psychologist_name",
    "psychiatrist": "psychiatrist_name",
    "spiritual": "spiritual_name",
    "homeopathy": "homeopathy_name",
    "ayurveda": "ayurveda_name",
    "unani": "unani_name",
}

# checklist item -> column holding "time it takes"
NIYYATH_ITEMS = {
    "Wudu": "wudu_niyyath_time",
    "Namaz": "namaz_niyyath_time",
    "Ghusl": "ghusl_niyyath_time",
    "Fasting": "fasting_niyyath_time",
}

NAJAS_ITEMS = {
    "Urination time": "urination_time",
    "Motion time": "motion_time",
    "Ghusl time": "ghusl_najas_time",
    "Normal bath time": "normal_bath_time",
    "Hand washing time": "hand_washing_time",
    "Dress washing time": "dress_washing_time",
}

PROVIDER_NAME_FIELDS = list(PROVIDERS.values())

PATIENT_FLAG_FIELDS = ["is_married", "is_working", "has_siblings", "siblings_have_issues", "is_genetic"]

PATIENT_INT_FIELDS = ["age", "years_on_medicine"]

PATIENT_TEXT_FIELDS = [
    "full_name",
    "phone_number",
    "place",
    "father_name",
    "school_class_studied",
    "madrasa_class_studied",
    "husband_name",
    "husband_job",
    "core_reason",
    "when_it_started",
    "previously_sought_help_other",
    "medicine_status",
    "other_medications",
    "other_diseases",
    "genetic_relative_name",
    "job_field",
]

CORE_FLAG_FIELDS = [
    "is_about_belief",
    "dog_related",
    "pig_related",
    "over_soaping",
    "insects_related",
    "gas_locking_related",
    "fear_of_death",
    "fear_of_disease",
    "door_locking_related",
]

CORE_LIST_FIELDS = ["niyyath_related", "najas_related"]

CORE_TEXT_FIELDS = (
    list(NIYYATH_ITEMS.values())
    + list(NAJAS_ITEMS.values())
    + ["wudu_time", "namaz_time", "other_issues"]
)


# ============================================================
# Primitives
# ============================================================

def _plain(entry: Any) -> Any:
    # pydantic models (BeliefEntry) -> dict
    if hasattr(entry, "model_dump"):
        return entry.model_dump()
    return entry


def encode_list(values: Optional[Iterable[Any]]) -> str:
    """Serialize an ordered sequence (strings or belief dicts) to JSON text."""
    return json.dumps([_plain(v) for v in (values or [])], ensure_ascii=False)


def decode_list(raw: Any, fallback: Optional[List[Any]] = None) -> List[Any]:
    """
    Parse JSON text back into a list.
    NULL, malformed text or a non-list payload all return `fallback` (default []).
    """
    if fallback is None:
        fallback = []
    if raw is None:
        return fallback
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Undecodable list field %r, using fallback", raw)
        return fallback
    if not isinstance(value, list):
        logger.debug("List field holds %s, using fallback", type(value).__name__)
        return fallback
    return value


def to_flag(value: Any) -> int:
    return 1 if value else 0


def from_flag(value: Any) -> bool:
    return bool(value)


def decode_names(raw: Any) -> List[str]:
    """
    Provider names. Older rows hold one bare name instead of a JSON list;
    that name comes back as a one-element list.
    """
    if raw is None or str(raw).strip() == "":
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return [str(raw)]
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value if v is not None]
    if isinstance(value, str):
        return [value] if value.strip() else []
    return [str(raw)]


def encode_names(names: Optional[Iterable[str]]) -> str:
    return encode_list([n for n in (names or []) if n and str(n).strip()])


def decode_belief(entry: Any) -> Dict[str, str]:
    if isinstance(entry, dict):
        description = entry.get("description")
        if description is None:
            description = entry.get("text", "")  # older key
        return {"title": str(entry.get("title") or ""), "description": str(description or "")}
    # bare string from the first version of the checklist
    return {"title": "", "description": str(entry)}


def decode_beliefs(raw: Any) -> List[Dict[str, str]]:
    return [decode_belief(b) for b in decode_list(raw) if b is not None]


def row_to_dict(obj: Any) -> Dict[str, Any]:
    """ORM instance -> {column: value}."""
    return {c.name: getattr(obj, c.name) for c in obj.__table__.columns}


# ============================================================
# Patient
# ============================================================

def encode_patient(data: Any) -> Dict[str, Any]:
    """PatientIn -> column values for the patients table (children excluded)."""
    row: Dict[str, Any] = {}
    for f in PATIENT_TEXT_FIELDS:
        row[f] = getattr(data, f) or None
    # required columns keep their value even if blank (checked earlier)
    row["full_name"] = data.full_name
    row["phone_number"] = data.phone_number
    for f in PATIENT_INT_FIELDS:
        row[f] = getattr(data, f)
    for f in PATIENT_FLAG_FIELDS:
        row[f] = to_flag(getattr(data, f))
    row["kids_count"] = data.kids_count or 0
    row["previously_sought_help"] = encode_list(data.previously_sought_help)
    for f in PROVIDER_NAME_FIELDS:
        row[f] = encode_names(getattr(data, f))
    return row


def decode_patient(row: Dict[str, Any]) -> Dict[str, Any]:
    patient = dict(row)
    for f in PATIENT_FLAG_FIELDS:
        patient[f] = from_flag(row.get(f))
    patient["kids_count"] = row.get("kids_count") or 0
    patient["previously_sought_help"] = decode_list(row.get("previously_sought_help"))
    for f in PROVIDER_NAME_FIELDS:
        patient[f] = decode_names(row.get(f))
    return patient


def decode_kid(row: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": row.get("id"), "sex": row.get("sex") or "", "age": row.get("age")}


# ============================================================
# Core issues
# ============================================================

def encode_core_issues(data: Any) -> Dict[str, Any]:
    row: Dict[str, Any] = {}
    for f in CORE_FLAG_FIELDS:
        row[f] = to_flag(getattr(data, f))
    row["belief_types"] = encode_list(data.belief_types)
    for f in CORE_LIST_FIELDS:
        row[f] = encode_list(getattr(data, f))
    for f in CORE_TEXT_FIELDS:
        row[f] = getattr(data, f) or None
    return row


def decode_core_issues(row: Optional[Dict[str, Any]], patient_id: int) -> Dict[str, Any]:
    """
    Stored row -> checklist record. With row=None the all-empty default is
    built through the same path, so a synthesized record and a freshly
    inserted default row read back identically.
    """
    row = row or {}
    issues: Dict[str, Any] = {"patient_id": patient_id}
    for f in CORE_FLAG_FIELDS:
        issues[f] = from_flag(row.get(f))
    issues["belief_types"] = decode_beliefs(row.get("belief_types"))
    for f in CORE_LIST_FIELDS:
        issues[f] = decode_list(row.get(f))
    for f in CORE_TEXT_FIELDS:
        issues[f] = row.get(f) or ""
    return issues


def default_core_issues(patient_id: int) -> Dict[str, Any]:
    return decode_core_issues(None, patient_id)
