"""Extraction record schema for supported clinical form templates.

The record always carries every template sub-record so its shape stays
stable for consumers; only the sub-record matching ``template`` is filled.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PAGE_DELIMITER = "\n\n--- Page Break ---\n\n"


class TemplateId(StrEnum):
    """Known form templates."""

    HANDOVER_SHEET_OT = "handover_sheet_ot"
    GENERAL_ADMISSION = "general_admission_treatment_consent_obstetric"
    UNKNOWN = "unknown"


class TemplateHint(StrEnum):
    """Caller-supplied classification hint."""

    AUTO = "auto"
    HANDOVER_SHEET_OT = "handover_sheet_ot"
    GENERAL_ADMISSION = "general_admission_treatment_consent_obstetric"


class TriState(StrEnum):
    """Checkbox value that keeps "not found" apart from "explicitly no"."""

    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"


class RecordModel(BaseModel):
    """Base for record groups, serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CommonFields(RecordModel):
    patient_name: str = ""
    uhid_no: str = ""
    age: str = ""
    gender: str = ""
    date_of_admission: str = ""
    ward_or_room: str = ""
    bed_no: str = ""


# --- Handover sheet (OT) ---


class Allergies(RecordModel):
    has_allergies: TriState = TriState.UNKNOWN
    allergy_details: str = ""


class Diabetes(RecordModel):
    is_diabetic: TriState = TriState.UNKNOWN
    details: str = ""


class Hypertension(RecordModel):
    has_hypertension: TriState = TriState.UNKNOWN
    details: str = ""


class Situation(RecordModel):
    patient_condition: str = ""
    other_issues: str = ""
    allergies: Allergies = Field(default_factory=Allergies)
    diabetes: Diabetes = Field(default_factory=Diabetes)
    hypertension: Hypertension = Field(default_factory=Hypertension)


class LinesAndTubes(RecordModel):
    iv_line: TriState = TriState.UNKNOWN
    cvp_line: TriState = TriState.UNKNOWN
    art_line: TriState = TriState.UNKNOWN
    foley_catheter: TriState = TriState.UNKNOWN
    rt_tube: TriState = TriState.UNKNOWN
    wound_drain: TriState = TriState.UNKNOWN
    jp_drain: TriState = TriState.UNKNOWN
    other_lines: str = ""


class Infusions(RecordModel):
    ns: str = ""
    rl: str = ""
    dns: str = ""
    blood_products: str = ""
    others: str = ""


class Assessment(RecordModel):
    vitals_stable: TriState = TriState.UNKNOWN
    vitals_details: str = ""
    bp: str = ""
    pulse: str = ""
    resp_rate: str = ""
    temperature: str = ""
    spo2: str = ""
    grbs: str = ""
    pain_score: str = ""
    lines_and_tubes: LinesAndTubes = Field(default_factory=LinesAndTubes)
    infusions: Infusions = Field(default_factory=Infusions)


class Recommendation(RecordModel):
    anesthetist_rounds_done: TriState = TriState.UNKNOWN
    changes_in_treatment_plan: str = ""
    discharge_plan: str = ""
    time_of_shift_out_from_ot: str = Field(default="", alias="timeOfShiftOutFromOT")
    remarks: str = ""


class HandoverSignatures(RecordModel):
    handed_over_by: str = ""
    handed_over_to: str = ""
    time_of_handover: str = ""


class HandoverSheetOT(RecordModel):
    """Operation theatre handover sheet in SBAR layout."""

    date_of_surgery: str = ""
    time_of_surgery: str = ""
    surgery_name: str = ""
    shift: str = ""
    situation: Situation = Field(default_factory=Situation)
    assessment: Assessment = Field(default_factory=Assessment)
    recommendation: Recommendation = Field(default_factory=Recommendation)
    signatures: HandoverSignatures = Field(default_factory=HandoverSignatures)


# --- General admission, treatment consent and obstetric exam ---


class GeneralExam(RecordModel):
    bp: str = ""
    pulse: str = ""
    resp_rate: str = ""
    temperature: str = ""
    spo2: str = ""
    built: str = ""
    nutrition: str = ""
    pallor: str = ""
    icterus: str = ""
    cyanosis: str = ""
    clubbing: str = ""
    lymph_nodes: str = ""
    edema: str = ""


class ObstetricExam(RecordModel):
    lmp: str = ""
    edd: str = ""
    gestational_age_weeks: str = ""
    presentation: str = ""
    lie: str = ""
    fetal_heart_rate: str = ""
    uterus_size: str = ""
    contractions: str = ""
    membranes: str = ""
    per_vaginal_findings: str = ""
    per_speculum_findings: str = ""


class Consent(RecordModel):
    procedure_name: str = ""
    risk_explained: str = ""
    consenting_person_name: str = ""
    relationship_to_patient: str = ""
    date_of_consent: str = ""
    time_of_consent: str = ""
    witness_name: str = ""


class AdmissionSignatures(RecordModel):
    patient_or_relative: str = ""
    doctor_name: str = ""
    doctor_reg_no: str = ""
    date: str = ""
    time: str = ""


class GeneralAdmissionTreatmentConsentObstetric(RecordModel):
    """Combined general admission, obstetric exam and consent form."""

    general_exam: GeneralExam = Field(default_factory=GeneralExam)
    obstetric_exam: ObstetricExam = Field(default_factory=ObstetricExam)
    clinical_findings: str = ""
    provisional_diagnosis: str = ""
    treatment_advised: str = ""
    plan_of_management: str = ""
    consent: Consent = Field(default_factory=Consent)
    signatures: AdmissionSignatures = Field(default_factory=AdmissionSignatures)


class Meta(RecordModel):
    ocr_issues: list[str] = Field(default_factory=list)
    low_confidence_fields: list[str] = Field(default_factory=list)


class ExtractionRecord(RecordModel):
    """Top-level result of one extraction call."""

    template: TemplateId = TemplateId.UNKNOWN
    common: CommonFields = Field(default_factory=CommonFields)
    handover_sheet_ot: HandoverSheetOT = Field(
        default_factory=HandoverSheetOT, alias="handoverSheetOT"
    )
    general_admission_treatment_consent_obstetric: (
        GeneralAdmissionTreatmentConsentObstetric
    ) = Field(default_factory=GeneralAdmissionTreatmentConsentObstetric)
    meta: Meta = Field(default_factory=Meta)
