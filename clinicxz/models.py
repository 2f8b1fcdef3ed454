"""
clinicxz/models.py

Table definitions. Every class that inherits from Base is one table.

Column names are kept stable so an existing clinicxz.db keeps working.
List-typed fields (previously_sought_help, the *_name provider columns,
belief_types, niyyath_related, najas_related) are TEXT columns holding JSON;
booleans are INTEGER 0/1. Translation to Python values lives in codec.py.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, unique=True, nullable=False)
    # plaintext, the column name is historical
    hashed_password = Column(String, nullable=False)


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # identity / demographics
    full_name = Column(String, nullable=False)
    phone_number = Column(String, nullable=False)
    age = Column(Integer)
    place = Column(String)
    father_name = Column(String)
    school_class_studied = Column(String)
    madrasa_class_studied = Column(String)

    # family
    is_married = Column(Integer, server_default=text("0"))
    husband_name = Column(String)
    husband_job = Column(String)
    kids_count = Column(Integer, server_default=text("0"))
    is_working = Column(Integer, server_default=text("0"))
    has_siblings = Column(Integer, server_default=text("0"))
    siblings_have_issues = Column(Integer, server_default=text("0"))

    # intake
    core_reason = Column(Text)
    when_it_started = Column(Text)
    previously_sought_help = Column(Text, server_default=text("'[]'"))
    previously_sought_help_other = Column(Text)
    medicine_status = Column(String)
    other_medications = Column(Text)
    other_diseases = Column(Text)
    is_genetic = Column(Integer, server_default=text("0"))
    genetic_relative_name = Column(String)
    job_field = Column(String)

    # JSON lists of practitioner names, one column per provider category
    psychologist_name = Column(Text)
    psychiatrist_name = Column(Text)
    spiritual_name = Column(Text)
    homeopathy_name = Column(Text)
    ayurveda_name = Column(Text)
    unani_name = Column(Text)

    years_on_medicine = Column(Integer)
    created_at = Column(String, server_default=text("(datetime('now'))"))


class Kid(Base):
    __tablename__ = "kids"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sex = Column(String)
    age = Column(Integer)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)


class CoreIssues(Base):
    __tablename__ = "core_issues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(
        Integer, ForeignKey("patients.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    is_about_belief = Column(Integer, server_default=text("0"))
    belief_types = Column(Text, server_default=text("'[]'"))

    niyyath_related = Column(Text, server_default=text("'[]'"))
    wudu_niyyath_time = Column(String)
    namaz_niyyath_time = Column(String)
    ghusl_niyyath_time = Column(String)
    fasting_niyyath_time = Column(String)

    najas_related = Column(Text, server_default=text("'[]'"))
    urination_time = Column(String)
    motion_time = Column(String)
    ghusl_najas_time = Column(String)
    normal_bath_time = Column(String)
    hand_washing_time = Column(String)
    dress_washing_time = Column(String)

    dog_related = Column(Integer, server_default=text("0"))
    pig_related = Column(Integer, server_default=text("0"))
    over_soaping = Column(Integer, server_default=text("0"))
    insects_related = Column(Integer, server_default=text("0"))
    gas_locking_related = Column(Integer, server_default=text("0"))
    fear_of_death = Column(Integer, server_default=text("0"))
    fear_of_disease = Column(Integer, server_default=text("0"))
    door_locking_related = Column(Integer, server_default=text("0"))

    wudu_time = Column(String)
    namaz_time = Column(String)
    other_issues = Column(Text)


class TherapySession(Base):
    """One row of the `sessions` table (named to stay clear of orm.Session)."""
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    date = Column(String, nullable=False)  # YYYY-MM-DD
    log = Column(Text)
    progress_note = Column(Text)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)


class TrackedIssue(Base):
    __tablename__ = "tracked_issues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    percentage_cured = Column(Integer, server_default=text("0"))
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)


class ScheduleEvent(Base):
    __tablename__ = "schedule_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    time = Column(String, nullable=False)
    status = Column(String, server_default=text("'Scheduled'"))
