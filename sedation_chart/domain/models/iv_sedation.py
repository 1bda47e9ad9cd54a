from __future__ import annotations

from dataclasses import dataclass, field, fields

IV_SEDATION_STATUS_DRAFT = "draft"
IV_SEDATION_STATUS_COMPLETED = "completed"

IV_SEDATION_STEP_COUNT = 5
IV_SEDATION_STEP_TITLES: tuple[str, ...] = (
    "Basic Info",
    "Pre-Assessment",
    "Sedation Plan",
    "Flow / Monitoring",
    "Recovery",
)

NO_TREATMENT = "NO TREATMENT"
OTHER_OPTION = "Other"
YES = "yes"
NO = "no"
YES_NO_OPTIONS: tuple[str, ...] = (YES, NO)

TREATMENT_OPTIONS: tuple[str, ...] = (
    NO_TREATMENT,
    "FULL ARCH FIXED",
    "DENTURE",
    "IMPLANT REMOVABLE DENTURE",
    "SINGLE IMPLANT",
    "MULTIPLE IMPLANTS",
    "EXTRACTION",
    "EXTRACTION AND GRAFT",
)
SURGERY_TYPE_OPTIONS: tuple[str, ...] = (
    "Extraction Only",
    "Extraction + Immediate Implants",
    "Implants Only",
    "Bone Graft",
    "Sinus Lift",
    "Revision",
)

NPO_STATUS_OPTIONS: tuple[str, ...] = (
    "NPO After Midnight",
    "NPO 6-8 Hours",
    "NPO Less Than 6 Hours",
    "Not NPO",
)
PREGNANCY_RISK_OPTIONS: tuple[str, ...] = ("Not Pregnant", "Possibly Pregnant", "Pregnant")
ANESTHESIA_HISTORY_OPTIONS: tuple[str, ...] = (
    "No Previous Anesthetic History",
    "Previous Anesthetic without any problems or complications",
    "Family Hx of Anesthetic Complications",
    "Malignant Hyperthermia",
    OTHER_OPTION,
)

ALLERGY_OPTIONS: tuple[str, ...] = (
    "NKDA",
    "Penicillin",
    "Sulfa",
    "Ibuprofen",
    "Codeine",
    "Aspirin",
    "Shellfish",
    "Dairy",
    "Latex",
    "Iodine",
    "Nuts",
    "Eggs",
    "Environmental",
    "Seasonal",
    OTHER_OPTION,
)
RESPIRATORY_OPTIONS: tuple[str, ...] = (
    "NONE",
    "Asthma",
    "Anemia",
    "Reactive Airway",
    "Bronchitis",
    "COPD",
    "Dyspnea",
    "Orthopnea",
    "Recent URI",
    "SOB",
    "Tuberculosis",
    OTHER_OPTION,
)
CARDIOVASCULAR_OPTIONS: tuple[str, ...] = (
    "NONE",
    "Anemia",
    "Congestive Heart Failure (CHF)",
    "Dysrhythmia",
    "Murmur",
    "Hypertension (HTN)",
    "Myocardial Infarction (MI)",
    "Valvular DX",
    "Rheumatic Fever",
    "Sickle Cell Disease",
    "Congenital Heart DX",
    "Pacemaker",
    OTHER_OPTION,
)
GASTROINTESTINAL_OPTIONS: tuple[str, ...] = (
    "NONE",
    "Cirrhosis",
    "Hepatitis",
    "Reflux",
    "Ulcers",
    "Oesophageal Issues",
    OTHER_OPTION,
)
NEUROLOGIC_OPTIONS: tuple[str, ...] = (
    "NONE",
    "Transient Ischemic Attack (TIA)",
    "Headaches",
    "Syncope",
    "Seizures",
    "Cerebral Vascular Accident (CVA)",
    OTHER_OPTION,
)
DIABETES = "Diabetes"
ENDOCRINE_RENAL_OPTIONS: tuple[str, ...] = (
    "NONE",
    DIABETES,
    "Thyroid DX",
    "Renal Failure",
    "Dialysis",
    OTHER_OPTION,
)
MISCELLANEOUS_OPTIONS: tuple[str, ...] = (
    "NONE",
    "Bypass",
    "Seizures",
    "Rheumatoid Arthritis",
    "Artificial Valve",
    "Parkinson's Disease",
    "Dementia (Alzheimer's)",
    "Eating Disorder",
    "HIV",
    "Anxiety",
    "Stroke",
    "Heart Birth Defect",
    "Lupus",
    "Prolonged Bleeding",
    "Hemophilia",
    OTHER_OPTION,
)
SOCIAL_HISTORY_OPTIONS: tuple[str, ...] = (
    "None",
    "ETOH Consumption",
    "Recreational Drugs",
    "Tobacco",
    OTHER_OPTION,
)
AIRWAY_EVALUATION_OPTIONS: tuple[str, ...] = (
    "Good range of motion of neck and jaw",
    "Missing, Loose or Chipped Teeth",
    "Edentulous",
    OTHER_OPTION,
)
HEART_LUNG_EVALUATION_OPTIONS: tuple[str, ...] = (
    "Heart Regular Rate and Rhythm",
    "Lung is Clear to Auscultation (CTA)",
    "Murmur",
    OTHER_OPTION,
)
ASA_CLASSIFICATION_OPTIONS: tuple[str, ...] = ("1", "2", "3", "4", "5")
MALLAMPATI_OPTIONS: tuple[str, ...] = ("Class I", "Class II", "Class III", "Class IV")

SEDATION_TYPE_OPTIONS: tuple[str, ...] = (
    "Minimal Sedation",
    "Moderate Sedation",
    "Deep Sedation",
    "General Anesthesia",
)
MEDICATIONS_PLANNED_OPTIONS: tuple[str, ...] = (
    "Midazolam",
    "Propofol",
    "Fentanyl",
    "Ketamine",
    "Nitrous Oxide",
    OTHER_OPTION,
)
ADMINISTRATION_ROUTE_OPTIONS: tuple[str, ...] = ("IV", "Oral", "Intranasal", "Inhalation")
INSTRUMENTS_CHECKLIST_OPTIONS: tuple[str, ...] = (
    "ECG",
    "BP",
    "Pulse OX",
    "ETCO2",
    "Supplemental O2",
    "PPV Available",
    "Suction Available",
)
EMERGENCY_PROTOCOL_OPTIONS: tuple[str, ...] = (
    "Reversal Agents Available",
    "Emergency Cart Ready",
    "Crash Cart Accessible",
    "Emergency Contact List",
)
LEVEL_OF_SEDATION_OPTIONS: tuple[str, ...] = ("Minimal", "Moderate", "Deep", "General Anesthesia")

MULTI_SELECT_OPTIONS: dict[str, tuple[str, ...]] = {
    "allergies": ALLERGY_OPTIONS,
    "respiratory_problems": RESPIRATORY_OPTIONS,
    "cardiovascular_problems": CARDIOVASCULAR_OPTIONS,
    "gastrointestinal_problems": GASTROINTESTINAL_OPTIONS,
    "neurologic_problems": NEUROLOGIC_OPTIONS,
    "endocrine_renal_problems": ENDOCRINE_RENAL_OPTIONS,
    "miscellaneous": MISCELLANEOUS_OPTIONS,
    "social_history": SOCIAL_HISTORY_OPTIONS,
    "airway_evaluation": AIRWAY_EVALUATION_OPTIONS,
    "heart_lung_evaluation": HEART_LUNG_EVALUATION_OPTIONS,
    "medications_planned": MEDICATIONS_PLANNED_OPTIONS,
    "instruments_checklist": INSTRUMENTS_CHECKLIST_OPTIONS,
    "administration_route": ADMINISTRATION_ROUTE_OPTIONS,
    "emergency_protocols": EMERGENCY_PROTOCOL_OPTIONS,
}

NEGATING_OPTIONS: dict[str, str] = {
    "allergies": "NKDA",
    "respiratory_problems": "NONE",
    "cardiovascular_problems": "NONE",
    "gastrointestinal_problems": "NONE",
    "neurologic_problems": "NONE",
    "endocrine_renal_problems": "NONE",
    "miscellaneous": "NONE",
    "social_history": "None",
}

# Free-text companions, only meaningful while the group holds "Other".
OTHER_TEXT_FIELDS: dict[str, str] = {
    "allergies": "allergies_other",
    "anesthesia_history": "anesthesia_history_other",
    "respiratory_problems": "respiratory_problems_other",
    "cardiovascular_problems": "cardiovascular_problems_other",
    "gastrointestinal_problems": "gastrointestinal_problems_other",
    "neurologic_problems": "neurologic_problems_other",
    "endocrine_renal_problems": "endocrine_renal_problems_other",
    "miscellaneous": "miscellaneous_other",
    "social_history": "social_history_other",
    "airway_evaluation": "airway_evaluation_other",
    "heart_lung_evaluation": "heart_lung_evaluation_other",
    "medications_planned": "medications_other",
}

RECOVERY_CRITERIA: tuple[tuple[str, str], ...] = (
    ("alert_oriented", "Alert and Oriented"),
    ("protective_reflexes", "Protective Reflexes Intact"),
    ("breathing_spontaneously", "Breathing Spontaneously"),
    ("post_op_nausea", "Post-Op Nausea/Vomiting"),
    ("caregiver_present", "Patient Caregiver Present"),
    ("baseline_mental_status", "Return to Baseline Mental Status"),
    ("responsive_verbal_commands", "Responsive to Verbal Commands"),
    ("saturating_room_air", "Saturating Appropriately on Room Air"),
    ("vital_signs_baseline", "Vital Signs Returned to Baseline"),
    ("pain_during_recovery", "Pain During Recovery"),
)
# For these criteria a "no" answer is the favourable one.
REVERSED_RECOVERY_CRITERIA = frozenset({"post_op_nausea", "pain_during_recovery"})

DISCHARGE_DESTINATIONS: tuple[str, ...] = ("Home", "Hospital", "Other Facility")


@dataclass(slots=True)
class MorningMedications:
    taken: bool | None = None
    detail: str = ""


@dataclass(slots=True)
class FlowEntry:
    id: str
    time: str
    bp: str = ""
    heart_rate: str = ""
    rr: str = ""
    spo2: str = ""
    medications: list[str] = field(default_factory=list)


@dataclass(slots=True)
class PatientContext:
    id: str
    first_name: str = ""
    last_name: str = ""
    gender: str = ""
    date_of_birth: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(slots=True)
class SedationFieldRegistry:
    # Step 1: basic info
    patient_name: str = ""
    patient_gender: str = ""
    sedation_date: str = ""
    upper_treatment: str = ""
    lower_treatment: str = ""
    upper_surgery_type: str = ""
    lower_surgery_type: str = ""
    height_feet: str = ""
    height_inches: str = ""
    weight: str = ""

    # Step 2: pre-assessment
    npo_status: str = ""
    morning_medications: MorningMedications = field(default_factory=MorningMedications)
    allergies: list[str] = field(default_factory=list)
    allergies_other: str = ""
    pregnancy_risk: str = ""
    last_menstrual_cycle: str = ""
    anesthesia_history: str = ""
    anesthesia_history_other: str = ""
    respiratory_problems: list[str] = field(default_factory=list)
    respiratory_problems_other: str = ""
    cardiovascular_problems: list[str] = field(default_factory=list)
    cardiovascular_problems_other: str = ""
    gastrointestinal_problems: list[str] = field(default_factory=list)
    gastrointestinal_problems_other: str = ""
    neurologic_problems: list[str] = field(default_factory=list)
    neurologic_problems_other: str = ""
    endocrine_renal_problems: list[str] = field(default_factory=list)
    endocrine_renal_problems_other: str = ""
    last_a1c_level: str = ""
    miscellaneous: list[str] = field(default_factory=list)
    miscellaneous_other: str = ""
    social_history: list[str] = field(default_factory=list)
    social_history_other: str = ""
    well_developed_nourished: str = ""
    patient_anxious: str = ""
    asa_classification: str = ""
    airway_evaluation: list[str] = field(default_factory=list)
    airway_evaluation_other: str = ""
    mallampati_score: str = ""
    heart_lung_evaluation: list[str] = field(default_factory=list)
    heart_lung_evaluation_other: str = ""

    # Step 3: sedation plan
    sedation_type: str = ""
    medications_planned: list[str] = field(default_factory=list)
    medications_other: str = ""
    instruments_checklist: list[str] = field(default_factory=list)
    administration_route: list[str] = field(default_factory=list)
    emergency_protocols: list[str] = field(default_factory=list)

    # Step 4: flow / monitoring
    time_in_room: str = ""
    sedation_start_time: str = ""
    sedation_end_time: str = ""
    out_of_room_time: str = ""
    level_of_sedation: str = ""
    flow_entries: list[FlowEntry] = field(default_factory=list)

    # Step 5: recovery
    alert_oriented: str = ""
    protective_reflexes: str = ""
    breathing_spontaneously: str = ""
    post_op_nausea: str = ""
    caregiver_present: str = ""
    baseline_mental_status: str = ""
    responsive_verbal_commands: str = ""
    saturating_room_air: str = ""
    vital_signs_baseline: str = ""
    pain_during_recovery: str = ""
    post_op_instructions_given_to: str = ""
    follow_up_instructions_given_to: str = ""
    discharged_to: str = ""
    pain_level_discharge: str = ""
    other_remarks: str = ""


REGISTRY_FIELD_NAMES: frozenset[str] = frozenset(item.name for item in fields(SedationFieldRegistry))
# Derived from the patient context; never edited on the form.
READ_ONLY_FIELDS: frozenset[str] = frozenset({"patient_name", "patient_gender"})
