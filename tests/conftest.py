"""Shared test fixtures for the clinical form extraction test suite."""

from pathlib import Path

import numpy as np
import pytest

HANDOVER_SHEET_TEXT = """\
CITY HOSPITAL
OT HANDOVER SHEET
Patient Name: Ramesh Kumar
UHID No: AB12345
Age: 54 years
Sex: Male
Date of Admission: 12/03/2024
Ward: Surgical 2
Bed No: 14
Date of Surgery: 14/03/2024
Time of Surgery: 10:30 AM
Name of Surgery: Laparoscopic Cholecystectomy
Shift: Morning

SITUATION
Patient Condition: Conscious and oriented
Allergies: Yes  If yes, specify: Penicillin
Diabetes: No
Hypertension: [x]

ASSESSMENT
Vitals stable: Yes
BP: 130/80
Pulse: 88
RR: 18
Temperature: 98.6
SpO2: 99%
GRBS: 142
Pain Score: 3/10
IV line: [x]
CVP line: No
Foley catheter: Yes
Wound drain: [ ]
NS: 500 ml
RL: 1000 ml
DNS: 500ml

RECOMMENDATION
Anesthetist rounds done: Yes
Discharge Plan: Review after 24 hours
Time of Shift out from OT: 12:45
Remarks: Monitor drain output

Handed over by: Dr. Smith
Handed over to: Sister Mary
Time of Handover: 13:00
"""

GENERAL_ADMISSION_TEXT = """\
GENERAL ADMISSION AND TREATMENT CONSENT FORM
Name of the patient: Lakshmi Devi
Hospital No: HN-7788
Age: 28 yrs
Gender: Female
DOA: 02-05-2024
Room: 204
Bed: 3

GENERAL EXAMINATION
BP: 110/70
Pulse: 92
Temp: 98.4
Pallor: Absent
Icterus: Nil
Edema: Pedal

OBSTETRIC EXAM
LMP: 10/08/2023
EDD: 17/05/2024
Gestational Age: 38 weeks
Presentation: Cephalic
Fetal Heart Rate: 142 bpm
Membranes: Intact
Per Vaginal Findings: Os closed, cervix uneffaced

Provisional Diagnosis: Primigravida at term
Plan of Management: Induction of labour

CONSENT
Consent for: Caesarean Section
Name of consenting person: Suresh Kumar
Relationship to patient: Husband
Date of Consent: 02-05-2024
Witness Name: Anita Rao

Doctor Name: Dr. Priya Nair
Reg No: KMC-45678
"""


@pytest.fixture
def handover_text() -> str:
    """OCR text of a filled-in OT handover sheet."""
    return HANDOVER_SHEET_TEXT


@pytest.fixture
def admission_text() -> str:
    """OCR text of a general admission, obstetric exam and consent form."""
    return GENERAL_ADMISSION_TEXT


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic RGB page image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
