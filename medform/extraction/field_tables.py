"""Per-template field rule tables.

Each table maps a dotted attribute path inside its record group to the
rule that fills it. Candidate patterns are listed in priority order: the
first pattern that matches anywhere in the document wins.
"""

import re
from dataclasses import dataclass

from .models import TemplateId
from .rules import BooleanRule, FieldRule, GenderRule, TextRule, label_pattern

# Accepted value characters. None of them cross a line break.
_WORDS = r"[\w.]+(?:[ \t][\w.]+)*"
_NAME = r"[A-Za-z.]+(?:[ \t][A-Za-z.]+)*"
_PHRASE = r"[\w.,/()'%+&-]+(?:[ \t][\w.,/()'%+&-]+)*"
_TOKEN = r"[\w+\-]+"
_ID = r"[\w/\-]+"
_DATE = r"\d[\d/\-.]*"
_TIME = r"\d{1,2}(?:[:.]?\d{2})?(?:[ \t]*(?:[ap]\.?m\.?|hrs?)(?![a-z]))?"
_INTEGER = r"\d+"
_NUMBER = r"\d+(?:\.\d+)?"
_BP = r"\d+(?:[ \t]*/[ \t]*\d+)?"
_VOLUME = r"\d+(?:\.\d+)?(?:[ \t]*(?:ml|cc|l|units?|pints?)\b)?"
_AGE = r"\d+(?:[ \t]*(?:years?|yrs?|y|months?|days?)\b)?"
_WEEKS = r"\d+(?:[ \t]*\+[ \t]*\d+)?(?:[ \t]*(?:weeks?|wks?)\b)?"
_RATE = r"\d+(?:[ \t]*(?:bpm|/min))?"
_PAIN = r"\d+(?:[ \t]*/[ \t]*10)?"


def _text(*candidates: tuple[str, str] | tuple[str, str, bool]) -> TextRule:
    """Build a text rule from ``(label, value[, separator_required])`` tuples."""
    patterns = []
    for candidate in candidates:
        label, value, *strict = candidate
        patterns.append(
            label_pattern(label, value, separator_required=bool(strict and strict[0]))
        )
    return TextRule(tuple(patterns))


def _flag(*keywords: str) -> BooleanRule:
    return BooleanRule(keywords)


COMMON_RULES: dict[str, FieldRule] = {
    "patient_name": _text(
        (r"\bPatient(?:'s)?\s*Name", _NAME),
        (r"\bName\s*of\s*(?:the\s*)?Patient", _NAME),
        (r"(?m)^[ \t]*Name", _NAME, True),
    ),
    "uhid_no": _text(
        (r"\bUHID\s*(?:No\.?|Number)?", _ID),
        (r"\bHospital\s*(?:No\.?|Number)", _ID),
        (r"\b(?:MRN|IP\s*No\.?)", _ID),
    ),
    "age": TextRule(
        (
            label_pattern(r"(?<!gestational )\bAge", _AGE),
            re.compile(r"\b(\d+)[ \t]*(?:years?|yrs?)\b", re.IGNORECASE),
        )
    ),
    "gender": GenderRule(
        _text(
            (r"\bSex", r"[A-Za-z]+"),
            (r"\bGender", r"[A-Za-z]+"),
        )
    ),
    "date_of_admission": _text(
        (r"\bDate\s*of\s*Admission", _DATE),
        (r"\bDOA", _DATE),
        (r"\bAdmission\s*Date", _DATE),
    ),
    "ward_or_room": _text(
        (r"\bWard(?:\s*No\.?)?", _WORDS),
        (r"\bRoom(?:\s*No\.?)?", _WORDS),
    ),
    "bed_no": _text(
        (r"\bBed\s*(?:No\.?|Number)?", _ID),
    ),
}


HANDOVER_SHEET_OT_RULES: dict[str, FieldRule] = {
    "date_of_surgery": _text(
        (r"\bDate\s*of\s*Surgery", _DATE),
        (r"\bSurgery\s*Date", _DATE),
    ),
    "time_of_surgery": _text(
        (r"\bTime\s*of\s*Surgery", _TIME),
        (r"\bSurgery\s*Time", _TIME),
    ),
    "surgery_name": _text(
        (r"\bName\s*of\s*(?:the\s*)?Surgery", _PHRASE),
        (r"\bSurgery\s*Name", _PHRASE),
        (r"\bProcedure(?:\s*(?:Done|Name))?", _PHRASE, True),
        (r"(?<!of )\bSurgery", _PHRASE, True),
    ),
    "shift": _text(
        (r"\bShift", _WORDS, True),
    ),
    # Situation
    "situation.patient_condition": _text(
        (r"\bPatient(?:'s)?\s*Condition", _PHRASE),
        (r"\bGeneral\s*Condition", _PHRASE),
    ),
    "situation.other_issues": _text(
        (r"\bOther\s*(?:Issues|Problems)", _PHRASE),
    ),
    "situation.allergies.has_allergies": _flag("allergy", "allergies", "allergic"),
    "situation.allergies.allergy_details": _text(
        (r"\bAllerg(?:y|ies)[^\n]*?specify", _PHRASE),
        (r"\bAllergy\s*Details", _PHRASE),
        (r"\bAllergic\s*to", _PHRASE),
    ),
    "situation.diabetes.is_diabetic": _flag("diabetes", "diabetic"),
    "situation.diabetes.details": _text(
        (r"\bDiabet(?:es|ic)[^\n]*?(?:details|specify)", _PHRASE),
    ),
    "situation.hypertension.has_hypertension": _flag(
        "hypertension", "hypertensive", "htn"
    ),
    "situation.hypertension.details": _text(
        (r"\b(?:Hypertension|HTN)[^\n]*?(?:details|specify)", _PHRASE),
    ),
    # Assessment
    "assessment.vitals_stable": _flag(
        "vitals stable",
        "vitals are stable",
        "hemodynamically stable",
        "haemodynamically stable",
    ),
    "assessment.vitals_details": _text(
        (r"\bVitals?(?:\s*Details)?", _PHRASE, True),
    ),
    "assessment.bp": _text(
        (r"\bBP", _BP),
        (r"\bBlood\s*Pressure", _BP),
    ),
    "assessment.pulse": _text(
        (r"\bPulse(?:\s*Rate)?", _INTEGER),
        (r"\bPR\b", _INTEGER),
        (r"\bHeart\s*Rate", _INTEGER),
    ),
    "assessment.resp_rate": _text(
        (r"\bRR\b", _INTEGER),
        (r"\bResp(?:iratory)?\.?\s*Rate", _INTEGER),
    ),
    "assessment.temperature": _text(
        (r"\bTemp(?:erature)?\.?", _NUMBER),
    ),
    "assessment.spo2": _text(
        (r"\bSp\s*O\s*2", _INTEGER),
        (r"\bSaturation", _INTEGER),
    ),
    "assessment.grbs": _text(
        (r"\bG?RBS", _NUMBER),
        (r"\bBlood\s*Sugar", _NUMBER),
    ),
    "assessment.pain_score": _text(
        (r"\bPain\s*Score", _PAIN),
        (r"\bVAS\b", _PAIN),
    ),
    "assessment.lines_and_tubes.iv_line": _flag(
        "iv line", "iv cannula", "peripheral line"
    ),
    "assessment.lines_and_tubes.cvp_line": _flag("cvp", "central line"),
    "assessment.lines_and_tubes.art_line": _flag(
        "arterial line", "art line", "a-line"
    ),
    "assessment.lines_and_tubes.foley_catheter": _flag("foley", "urinary catheter"),
    "assessment.lines_and_tubes.rt_tube": _flag(
        "rt tube", "ryle", "nasogastric", "ng tube"
    ),
    "assessment.lines_and_tubes.wound_drain": _flag("wound drain"),
    "assessment.lines_and_tubes.jp_drain": _flag("jp drain", "jackson pratt"),
    "assessment.lines_and_tubes.other_lines": _text(
        (r"\bOther\s*Lines?(?:\s*/\s*Tubes)?", _PHRASE),
    ),
    "assessment.infusions.ns": _text(
        (r"\bNS\b", _VOLUME),
        (r"(?<!dextrose )\bNormal\s*Saline", _VOLUME),
    ),
    "assessment.infusions.rl": _text(
        (r"\bRL\b", _VOLUME),
        (r"\bRinger'?s?\s*Lactate", _VOLUME),
    ),
    "assessment.infusions.dns": _text(
        (r"\bDNS\b", _VOLUME),
        (r"\bDextrose\s*Normal\s*Saline", _VOLUME),
    ),
    "assessment.infusions.blood_products": _text(
        (r"\bBlood\s*Products?", _PHRASE),
        (r"\bBlood\s*Transfusion", _PHRASE),
        (r"\bPRBC", _PHRASE),
    ),
    "assessment.infusions.others": _text(
        (r"\bOther\s*(?:Infusions?|Fluids)", _PHRASE),
    ),
    # Recommendation
    "recommendation.anesthetist_rounds_done": _flag(
        "anesthetist round",
        "anaesthetist round",
        "anesthesia round",
        "anaesthesia round",
    ),
    "recommendation.changes_in_treatment_plan": _text(
        (r"\bChanges?\s*in\s*(?:the\s*)?Treatment(?:\s*Plan)?", _PHRASE),
    ),
    "recommendation.discharge_plan": _text(
        (r"\bDischarge\s*Plan", _PHRASE),
    ),
    "recommendation.time_of_shift_out_from_ot": _text(
        (r"\bTime\s*of\s*Shift(?:ing)?\s*out(?:\s*from\s*(?:the\s*)?OT)?", _TIME),
        (r"\bShifted\s*out(?:\s*from\s*(?:the\s*)?OT)?\s*at", _TIME),
    ),
    "recommendation.remarks": _text(
        (r"\bRemarks?", _PHRASE, True),
    ),
    # Signatures
    "signatures.handed_over_by": _text(
        (r"\bHanded\s*over\s*by", _WORDS),
    ),
    "signatures.handed_over_to": _text(
        (r"\bHanded\s*over\s*to", _WORDS),
        (r"\bTaken\s*over\s*by", _WORDS),
        (r"\bReceived\s*by", _WORDS),
    ),
    "signatures.time_of_handover": _text(
        (r"\bTime\s*of\s*Hand(?:ing)?\s*over", _TIME),
        (r"\bHandover\s*Time", _TIME),
    ),
}


GENERAL_ADMISSION_RULES: dict[str, FieldRule] = {
    # General examination
    "general_exam.bp": _text(
        (r"\bBP", _BP),
        (r"\bBlood\s*Pressure", _BP),
    ),
    "general_exam.pulse": _text(
        (r"\bPulse(?:\s*Rate)?", _INTEGER),
        (r"\bPR\b", _INTEGER, True),
    ),
    "general_exam.resp_rate": _text(
        (r"\bRR\b", _INTEGER),
        (r"\bResp(?:iratory)?\.?\s*Rate", _INTEGER),
    ),
    "general_exam.temperature": _text(
        (r"\bTemp(?:erature)?\.?", _NUMBER),
    ),
    "general_exam.spo2": _text(
        (r"\bSp\s*O\s*2", _INTEGER),
        (r"\bSaturation", _INTEGER),
    ),
    "general_exam.built": _text((r"\bBuil[td]", _WORDS)),
    "general_exam.nutrition": _text((r"\bNutrition(?:al\s*Status)?", _WORDS)),
    "general_exam.pallor": _text((r"\bPallor", _TOKEN)),
    "general_exam.icterus": _text((r"\bIcterus", _TOKEN)),
    "general_exam.cyanosis": _text((r"\bCyanosis", _TOKEN)),
    "general_exam.clubbing": _text((r"\bClubbing", _TOKEN)),
    "general_exam.lymph_nodes": _text(
        (r"\bLymph\s*Nodes?", _WORDS),
        (r"\bLymphadenopathy", _WORDS),
    ),
    "general_exam.edema": _text((r"\bO?edema", _TOKEN)),
    # Obstetric examination
    "obstetric_exam.lmp": _text((r"\bLMP", _DATE)),
    "obstetric_exam.edd": _text(
        (r"\bEDD", _DATE),
        (r"\bExpected\s*Date\s*of\s*Delivery", _DATE),
    ),
    "obstetric_exam.gestational_age_weeks": _text(
        (r"\bGestational\s*Age", _WEEKS),
        (r"\bPOG", _WEEKS),
        (r"\bGA\b", _WEEKS, True),
    ),
    "obstetric_exam.presentation": _text((r"\bPresentation", _WORDS)),
    "obstetric_exam.lie": _text((r"\bLie\b", _WORDS)),
    "obstetric_exam.fetal_heart_rate": _text(
        (r"\bFetal\s*Heart\s*(?:Rate|Sounds?)", _RATE),
        (r"\bFH[RS]\b", _RATE),
    ),
    "obstetric_exam.uterus_size": _text(
        (r"\bUter(?:us|ine)\s*Size", _WORDS),
        (r"\bFundal\s*Height", _WORDS),
        (r"\bUterus", _WORDS, True),
    ),
    "obstetric_exam.contractions": _text((r"\bContractions?", _WORDS)),
    "obstetric_exam.membranes": _text((r"\bMembranes?", _WORDS)),
    "obstetric_exam.per_vaginal_findings": _text(
        (r"\bPer\s*Vaginal(?:\s*(?:Exam(?:ination)?|Findings))?", _PHRASE),
        (r"\bP\s*/\s*V\b", _PHRASE, True),
    ),
    "obstetric_exam.per_speculum_findings": _text(
        (r"\bPer\s*Speculum(?:\s*(?:Exam(?:ination)?|Findings))?", _PHRASE),
        (r"\bP\s*/\s*S\b", _PHRASE, True),
    ),
    # Clinical plan
    "clinical_findings": _text((r"\bClinical\s*Findings", _PHRASE)),
    "provisional_diagnosis": _text(
        (r"\bProvisional\s*Diagnosis", _PHRASE),
        (r"\bDiagnosis", _PHRASE, True),
    ),
    "treatment_advised": _text(
        (r"\bTreatment\s*Advised", _PHRASE),
        (r"\bAdvice", _PHRASE, True),
    ),
    "plan_of_management": _text(
        (r"\bPlan\s*of\s*Management", _PHRASE),
        (r"\bManagement\s*Plan", _PHRASE),
    ),
    # Consent
    "consent.procedure_name": _text(
        (r"\bConsent\s*for\b", _PHRASE),
        (r"\bName\s*of\s*(?:the\s*)?(?:Procedure|Operation)", _PHRASE),
        (r"\bProposed\s*(?:Procedure|Operation)", _PHRASE),
    ),
    "consent.risk_explained": _text(
        (r"\bRisks?\s*(?:Explained|Involved)", _PHRASE),
    ),
    "consent.consenting_person_name": _text(
        (r"\bName\s*of\s*(?:the\s*)?Consenting\s*Person", _NAME),
        (r"\bConsent(?:ing|ed)\s*(?:Person|By)", _NAME),
    ),
    "consent.relationship_to_patient": _text(
        (r"\bRelation(?:ship)?\s*(?:to|with)\s*(?:the\s*)?Patient", _WORDS),
        (r"\bRelationship", _WORDS, True),
    ),
    "consent.date_of_consent": _text((r"\bDate\s*of\s*Consent", _DATE)),
    "consent.time_of_consent": _text((r"\bTime\s*of\s*Consent", _TIME)),
    "consent.witness_name": _text(
        (r"\bName\s*of\s*(?:the\s*)?Witness", _NAME),
        (r"\bWitness(?:\s*Name)?", _NAME, True),
    ),
    # Signatures
    "signatures.patient_or_relative": _text(
        (r"\bSignature\s*of\s*(?:the\s*)?(?:Patient|Relative)(?:\s*/\s*\w+)?", _NAME),
        (r"\bPatient\s*/\s*Relative", _NAME),
    ),
    "signatures.doctor_name": _text(
        (r"\bDoctor(?:'s)?\s*Name", _NAME),
        (r"\bName\s*of\s*(?:the\s*)?Doctor", _NAME),
        (r"\bConsultant", _NAME, True),
    ),
    "signatures.doctor_reg_no": _text(
        (r"\bReg(?:istration)?\.?\s*No\.?", _ID),
    ),
    "signatures.date": _text((r"\bDate", _DATE, True)),
    "signatures.time": _text((r"\bTime", _TIME, True)),
}


@dataclass(frozen=True)
class TemplateVariant:
    """Binds a template to its record attribute and rule table."""

    attribute: str
    rules: dict[str, FieldRule]
    description: str


TEMPLATE_VARIANTS: dict[TemplateId, TemplateVariant] = {
    TemplateId.HANDOVER_SHEET_OT: TemplateVariant(
        attribute="handover_sheet_ot",
        rules=HANDOVER_SHEET_OT_RULES,
        description="Operation theatre handover sheet (SBAR)",
    ),
    TemplateId.GENERAL_ADMISSION: TemplateVariant(
        attribute="general_admission_treatment_consent_obstetric",
        rules=GENERAL_ADMISSION_RULES,
        description="General admission, obstetric exam and treatment consent",
    ),
}
