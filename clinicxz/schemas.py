# clinicxz/schemas.py
from __future__ import annotations

from typing import Annotated, Any, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from clinicxz.codec import decode_names
from clinicxz.errors import ValidationError


def _blank_int(value: Any) -> Any:
    # form inputs send "" for an empty number box
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None
    return value


def _as_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        # a single name, or a list that was already JSON-encoded by the form
        return decode_names(value)
    return value


BlankInt = Annotated[Optional[int], BeforeValidator(_blank_int)]
TextList = Annotated[List[str], BeforeValidator(_as_list)]


# -------------------------
# Input contracts
# -------------------------
class KidIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sex: Optional[str] = None
    age: BlankInt = None

    def is_empty(self) -> bool:
        return not self.sex and self.age is None


class PatientIn(BaseModel):
    """Everything the patient form submits. Children other than kids have their own calls."""
    model_config = ConfigDict(extra="ignore")

    full_name: str
    phone_number: str
    age: BlankInt = None
    place: Optional[str] = None
    father_name: Optional[str] = None
    school_class_studied: Optional[str] = None
    madrasa_class_studied: Optional[str] = None

    is_married: bool = False
    husband_name: Optional[str] = None
    husband_job: Optional[str] = None
    kids_count: int = 0
    kids: List[KidIn] = Field(default_factory=list)
    is_working: bool = False
    has_siblings: bool = False
    siblings_have_issues: bool = False

    core_reason: Optional[str] = None
    when_it_started: Optional[str] = None
    previously_sought_help: TextList = Field(default_factory=list)
    previously_sought_help_other: Optional[str] = None
    medicine_status: Optional[str] = None
    other_medications: Optional[str] = None
    other_diseases: Optional[str] = None
    is_genetic: bool = False
    genetic_relative_name: Optional[str] = None
    job_field: Optional[str] = None

    psychologist_name: TextList = Field(default_factory=list)
    psychiatrist_name: TextList = Field(default_factory=list)
    spiritual_name: TextList = Field(default_factory=list)
    homeopathy_name: TextList = Field(default_factory=list)
    ayurveda_name: TextList = Field(default_factory=list)
    unani_name: TextList = Field(default_factory=list)

    years_on_medicine: BlankInt = None

    @field_validator("kids_count", mode="before")
    @classmethod
    def _count(cls, value: Any) -> Any:
        value = _blank_int(value)
        return 0 if value is None else value

    @field_validator("kids", mode="before")
    @classmethod
    def _kids(cls, value: Any) -> Any:
        return value or []

    @field_validator("full_name", "phone_number")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class BeliefEntry(BaseModel):
    title: str = ""
    description: str = ""


class CoreIssuesIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    is_about_belief: bool = False
    belief_types: List[BeliefEntry] = Field(default_factory=list)

    niyyath_related: TextList = Field(default_factory=list)
    wudu_niyyath_time: Optional[str] = None
    namaz_niyyath_time: Optional[str] = None
    ghusl_niyyath_time: Optional[str] = None
    fasting_niyyath_time: Optional[str] = None

    najas_related: TextList = Field(default_factory=list)
    urination_time: Optional[str] = None
    motion_time: Optional[str] = None
    ghusl_najas_time: Optional[str] = None
    normal_bath_time: Optional[str] = None
    hand_washing_time: Optional[str] = None
    dress_washing_time: Optional[str] = None

    dog_related: bool = False
    pig_related: bool = False
    over_soaping: bool = False
    insects_related: bool = False
    gas_locking_related: bool = False
    fear_of_death: bool = False
    fear_of_disease: bool = False
    door_locking_related: bool = False

    wudu_time: Optional[str] = None
    namaz_time: Optional[str] = None
    other_issues: Optional[str] = None

    @field_validator("belief_types", mode="before")
    @classmethod
    def _beliefs(cls, value: Any) -> Any:
        # accept bare strings and the older {"title", "text"} shape
        out = []
        for b in value or []:
            if isinstance(b, str):
                out.append({"title": "", "description": b})
            elif isinstance(b, dict) and "description" not in b and "text" in b:
                out.append({"title": b.get("title") or "", "description": b.get("text") or ""})
            else:
                out.append(b)
        return out


class SessionIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    date: Optional[str] = None
    log: Optional[str] = None
    progress_note: Optional[str] = None


class TrackedIssueIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    percentage_cured: int = 0

    @field_validator("percentage_cured", mode="before")
    @classmethod
    def _pct(cls, value: Any) -> Any:
        value = _blank_int(value)
        return 0 if value is None else value


class ScheduleEventIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    time: str


# -------------------------
# Helpers
# -------------------------
M = TypeVar("M", bound=BaseModel)


def parse(model: Type[M], data: Union[M, Mapping[str, Any], None]) -> M:
    """Coerce a mapping (or an already-built model) into `model`."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(dict(data or {}))
    except PydanticValidationError as exc:
        fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        raise ValidationError(f"Invalid {model.__name__}: {', '.join(fields)}", fields=fields) from exc


def check_session_fields(data: Union[SessionIn, Mapping[str, Any]]) -> SessionIn:
    """The check the session form runs before saving: title and date are required."""
    session = parse(SessionIn, data)
    missing = [f for f in ["title", "date"] if not (getattr(session, f) or "").strip()]
    if missing:
        raise ValidationError("Title and date are required.", fields=missing)
    return session
