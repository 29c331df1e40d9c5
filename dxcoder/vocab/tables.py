"""Static vocabulary tables: keyword -> attribute and attribute -> code maps.

Everything here is a process-lifetime constant. Mappings are wrapped in
``MappingProxyType`` so a caller cannot mutate shared state by accident.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

__all__ = [
    "ADMINISTRATIVE_CODES",
    "ADMINISTRATIVE_PRECEDENCE",
    "ADVANCED_CKD_STAGES",
    "CKD_STAGE_CODES",
    "CKD_UNSPECIFIED",
    "DEPTH_DIGITS",
    "DEPTH_LADDER",
    "EXTERNAL_CAUSE_CODES",
    "FALLBACK_CONDITIONS",
    "FALLBACK_CONTEXT_PATHS",
    "FOOT_ULCER_SITES",
    "HEART_FAILURE_CODES",
    "INFECTION_SOURCE_CODES",
    "INJURY_CODES",
    "INSULIN_PUMP_BREAKDOWN",
    "METASTASIS_CODES",
    "NEOPLASM_HISTORY_CODES",
    "NEOPLASM_PRIMARY_CODES",
    "ORGANISM_B_CODES",
    "ORGANISM_SYNONYMS",
    "PNEUMONIA_BY_ORGANISM",
    "POISONING_AGENT_LADDER",
    "POISONING_INTENT_DIGITS",
    "POISONING_STEMS",
    "PRESSURE_STAGE_DIGITS",
    "PRESSURE_STAGE_LADDER",
    "PRESSURE_ULCER_SITES",
    "SEPSIS_BY_ORGANISM",
    "SEPSIS_UNSPECIFIED",
    "SEVENTH_CHARACTER",
]


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(mapping)


# =============================================================================
# ORGANISMS
# =============================================================================

# Canonical organism -> surface forms. Longer forms win over shorter ones when
# spans overlap ("staph aureus" inside "methicillin-resistant staph aureus").
ORGANISM_SYNONYMS: Mapping[str, tuple[str, ...]] = _frozen({
    "mrsa": (
        "mrsa",
        "methicillin-resistant staphylococcus aureus",
        "methicillin resistant staphylococcus aureus",
        "methicillin resistant staph aureus",
    ),
    "mssa": (
        "mssa",
        "methicillin-susceptible staphylococcus aureus",
        "methicillin susceptible staphylococcus aureus",
        "methicillin sensitive staphylococcus aureus",
        "methicillin sensitive staph aureus",
    ),
    "staph": ("staphylococcus aureus", "staph aureus", "staphylococcus", "staphylococcal", "staph"),
    "strep_pneumoniae": (
        "streptococcus pneumoniae",
        "strep pneumoniae",
        "s. pneumoniae",
        "pneumococcal",
        "pneumococcus",
    ),
    "strep": ("streptococcus", "streptococcal", "strep"),
    "e_coli": ("escherichia coli", "e. coli", "e.coli", "e coli", "ecoli"),
    "pseudomonas": ("pseudomonas aeruginosa", "pseudomonas"),
    "klebsiella": ("klebsiella pneumoniae", "klebsiella"),
    "h_influenzae": (
        "haemophilus influenzae",
        "hemophilus influenzae",
        "h. influenzae",
        "h influenzae",
        "h. flu",
    ),
    "enterococcus": ("enterococcus faecalis", "enterococcus", "enterococcal"),
    "proteus": ("proteus mirabilis", "proteus"),
    "enterobacter": ("enterobacter",),
    "serratia": ("serratia marcescens", "serratia"),
    "bacteroides": ("bacteroides", "anaerobic bacteria", "anaerobes"),
    "candida": ("candida albicans", "candida"),
    "mycoplasma": ("mycoplasma pneumoniae", "mycoplasma"),
    "viral": ("viral",),
})

SEPSIS_UNSPECIFIED = "A41.9"

SEPSIS_BY_ORGANISM: Mapping[str, str] = _frozen({
    "e_coli": "A41.51",
    "pseudomonas": "A41.52",
    "serratia": "A41.53",
    "klebsiella": "A41.59",
    "proteus": "A41.59",
    "enterobacter": "A41.59",
    "mrsa": "A41.02",
    "mssa": "A41.01",
    "staph": "A41.2",
    "strep_pneumoniae": "A40.3",
    "strep": "A40.9",
    "h_influenzae": "A41.3",
    "enterococcus": "A41.81",
    "bacteroides": "A41.4",
    "candida": "B37.7",
    "viral": "A41.89",
    "mycoplasma": "A41.89",
})

PNEUMONIA_BY_ORGANISM: Mapping[str, str] = _frozen({
    "strep_pneumoniae": "J13",
    "h_influenzae": "J14",
    "klebsiella": "J15.0",
    "pseudomonas": "J15.1",
    "mssa": "J15.211",
    "mrsa": "J15.212",
    "staph": "J15.20",
    "strep": "J15.4",
    "e_coli": "J15.5",
    "proteus": "J15.6",
    "enterobacter": "J15.6",
    "serratia": "J15.6",
    "mycoplasma": "J15.7",
    "enterococcus": "J15.8",
    "bacteroides": "J15.8",
    "viral": "J12.9",
    "candida": "B37.1",
})

# Organism codes added to a localized infection; redundant once sepsis or
# pneumonia names the organism.
ORGANISM_B_CODES: Mapping[str, str] = _frozen({
    "e_coli": "B96.20",
    "pseudomonas": "B96.5",
    "klebsiella": "B96.1",
    "proteus": "B96.4",
    "h_influenzae": "B96.3",
    "mycoplasma": "B96.0",
    "bacteroides": "B96.6",
    "enterobacter": "B96.89",
    "serratia": "B96.89",
    "mrsa": "B95.62",
    "mssa": "B95.61",
    "staph": "B95.8",
    "strep_pneumoniae": "B95.3",
    "strep": "B95.5",
    "enterococcus": "B95.2",
    "viral": "B97.89",
})

INFECTION_SOURCE_CODES: Mapping[str, str] = _frozen({
    "urinary": "N39.0",
    "skin": "L03.90",
    "abdominal": "K65.9",
    "lung": "J22",
    "blood": "R78.81",
})

# =============================================================================
# RENAL / CARDIOVASCULAR
# =============================================================================

CKD_UNSPECIFIED = "N18.9"

CKD_STAGE_CODES: Mapping[str, str] = _frozen({
    "1": "N18.1",
    "2": "N18.2",
    "3": "N18.30",
    "3a": "N18.31",
    "3b": "N18.32",
    "4": "N18.4",
    "5": "N18.5",
    "esrd": "N18.6",
})

ADVANCED_CKD_STAGES = frozenset({"5", "esrd"})

# (type, acuity) -> I50 code; a missing type always resolves to I50.9.
HEART_FAILURE_CODES: Mapping[tuple[str, str | None], str] = _frozen({
    ("systolic", "acute"): "I50.21",
    ("systolic", "chronic"): "I50.22",
    ("systolic", "acute_on_chronic"): "I50.23",
    ("systolic", None): "I50.20",
    ("diastolic", "acute"): "I50.31",
    ("diastolic", "chronic"): "I50.32",
    ("diastolic", "acute_on_chronic"): "I50.33",
    ("diastolic", None): "I50.30",
    ("combined", "acute"): "I50.41",
    ("combined", "chronic"): "I50.42",
    ("combined", "acute_on_chronic"): "I50.43",
    ("combined", None): "I50.40",
})

# =============================================================================
# WOUNDS AND ULCERS
# =============================================================================

DEPTH_LADDER: tuple[str, ...] = ("skin", "fat", "muscle", "bone")
PRESSURE_STAGE_LADDER: tuple[str, ...] = ("1", "2", "3", "4")

DEPTH_DIGITS: Mapping[str, str] = _frozen({"skin": "1", "fat": "2", "muscle": "3", "bone": "4"})

# Non-pressure chronic ulcer of lower limb, site -> L97 stem (depth digit appended)
FOOT_ULCER_SITES: Mapping[str, str] = _frozen({
    "right_foot": "L97.51",
    "left_foot": "L97.52",
    "right_heel": "L97.41",
    "left_heel": "L97.42",
    "right_ankle": "L97.31",
    "left_ankle": "L97.32",
})

PRESSURE_ULCER_SITES: Mapping[str, str] = _frozen({
    "right_elbow": "L89.01",
    "left_elbow": "L89.02",
    "sacral": "L89.15",
    "right_hip": "L89.21",
    "left_hip": "L89.22",
    "right_buttock": "L89.31",
    "left_buttock": "L89.32",
    "right_ankle": "L89.51",
    "left_ankle": "L89.52",
    "right_heel": "L89.61",
    "left_heel": "L89.62",
})

PRESSURE_STAGE_DIGITS: Mapping[str, str] = _frozen({
    "1": "1",
    "2": "2",
    "3": "3",
    "4": "4",
    "unstageable": "0",
    "deep_tissue": "6",
})

# =============================================================================
# INJURY
# =============================================================================

SEVENTH_CHARACTER: Mapping[str, str] = _frozen({
    "initial": "A",
    "subsequent": "D",
    "sequela": "S",
})

# (kind, region) -> {laterality: stem}; None laterality is the unspecified-side code.
INJURY_CODES: Mapping[tuple[str, str], Mapping[str | None, str]] = _frozen({
    ("fracture", "femur"): {"right": "S72.301", "left": "S72.302", None: "S72.309"},
    ("fracture", "hip"): {"right": "S72.001", "left": "S72.002", None: "S72.009"},
    ("fracture", "tibia"): {"right": "S82.201", "left": "S82.202", None: "S82.209"},
    ("fracture", "humerus"): {"right": "S42.301", "left": "S42.302", None: "S42.309"},
    ("fracture", "radius"): {"right": "S52.501", "left": "S52.502", None: "S52.509"},
    ("fracture", "colles"): {"right": "S52.531", "left": "S52.532", None: "S52.539"},
    ("open_wound", "forearm"): {"right": "S51.801", "left": "S51.802", None: "S51.809"},
    ("open_wound", "lower_leg"): {"right": "S81.801", "left": "S81.802", None: "S81.809"},
})

# Mechanism -> (code stem, takes a 7th character)
EXTERNAL_CAUSE_CODES: Mapping[str, tuple[str, bool]] = _frozen({
    "fall": ("W19.XXX", True),
    "mvc": ("V89.2XX", True),
    "assault": ("Y09", False),
})

# =============================================================================
# ONCOLOGY
# =============================================================================

NEOPLASM_PRIMARY_CODES: Mapping[str, str] = _frozen({
    "lung": "C34.90",
    "breast": "C50.919",
    "colon": "C18.9",
    "prostate": "C61",
    "pancreas": "C25.9",
    "bladder": "C67.9",
})

NEOPLASM_HISTORY_CODES: Mapping[str, str] = _frozen({
    "lung": "Z85.118",
    "breast": "Z85.3",
    "colon": "Z85.038",
    "prostate": "Z85.46",
    "pancreas": "Z85.07",
    "bladder": "Z85.51",
})

METASTASIS_CODES: Mapping[str, str] = _frozen({
    "bone": "C79.51",
    "brain": "C79.31",
    "liver": "C78.7",
    "lung": "C78.00",
    "lymph_nodes": "C77.9",
})

# =============================================================================
# ENCOUNTER
# =============================================================================

ADMINISTRATIVE_CODES: Mapping[str, str] = _frozen({
    "dialysis": "Z49.31",
    "chemotherapy": "Z51.11",
    "routine_followup": "Z09",
})

ADMINISTRATIVE_PRECEDENCE: tuple[str, ...] = ("dialysis", "chemotherapy", "routine_followup")

# =============================================================================
# POISONING, ADVERSE EFFECTS AND UNDERDOSING
# =============================================================================

POISONING_AGENT_LADDER: tuple[str, ...] = ("drug", "insulin")

# Intent -> 6th character of a T36-T50 code
POISONING_INTENT_DIGITS: Mapping[str, str] = _frozen({
    "accidental": "1",
    "self_harm": "2",
    "assault": "3",
    "undetermined": "4",
    "adverse_effect": "5",
    "underdosing": "6",
})

# Agent -> code stem; the intent digit and 7th character complete it
POISONING_STEMS: Mapping[str, str] = _frozen({
    "insulin": "T38.3X",
    "drug": "T50.90",
})

# Breakdown (mechanical failure) of an insulin pump; 7th character appended
INSULIN_PUMP_BREAKDOWN = "T85.614"

# =============================================================================
# FALLBACK
# =============================================================================

# condition -> (best-known code, surface forms) for the catch-all pass
FALLBACK_CONDITIONS: Mapping[str, tuple[str, tuple[str, ...]]] = _frozen({
    "hypertension": ("I10", ("hypertension", "htn", "high blood pressure")),
    "heart_failure": ("I50.9", ("heart failure", "chf", "hfref", "hfpef")),
    "diabetes": ("E11.9", ("diabetes mellitus", "diabetes", "t2dm", "dm2")),
    "ckd": ("N18.9", ("chronic kidney disease", "ckd")),
    "aki": ("N17.9", ("acute kidney injury", "aki", "acute renal failure")),
    "pneumonia": ("J18.9", ("pneumonia",)),
    "sepsis": ("A41.9", ("sepsis", "septicemia")),
    "copd": ("J44.9", ("copd", "chronic obstructive pulmonary disease")),
    "asthma": ("J45.909", ("asthma",)),
    "uti": ("N39.0", ("urinary tract infection", "uti")),
    "atrial_fibrillation": ("I48.91", ("atrial fibrillation", "afib", "a-fib")),
    "cad": ("I25.10", ("coronary artery disease", "cad")),
    "anemia": ("D64.9", ("anemia", "anaemia")),
    "dementia": ("F03.90", ("dementia",)),
    "depression": ("F32.A", ("depression",)),
    "cellulitis": ("L03.90", ("cellulitis",)),
    "gi_bleed": ("K92.2", ("gi bleed", "gastrointestinal bleed", "gastrointestinal hemorrhage")),
    "pressure_ulcer": ("L89.90", ("pressure ulcer", "pressure injury", "decubitus ulcer")),
    "stroke": ("I63.9", ("stroke", "cerebral infarction")),
    "seizure": ("R56.9", ("seizure", "seizures")),
})

# Fallback condition -> context path; an explicit "No" for the path, or for an
# ancestor, rules the condition out of the fallback.
FALLBACK_CONTEXT_PATHS: Mapping[str, str] = _frozen({
    "hypertension": "cardiovascular.hypertension",
    "heart_failure": "cardiovascular.heart_failure",
    "diabetes": "diabetes",
    "ckd": "renal.ckd",
    "aki": "renal.aki",
    "pneumonia": "respiratory.pneumonia",
    "sepsis": "infection.sepsis",
    "copd": "respiratory.copd",
    "asthma": "respiratory.asthma",
    "uti": "infection.site",
    "atrial_fibrillation": "cardiovascular.atrial_fibrillation",
    "cad": "cardiovascular.cad",
    "anemia": "hematology.anemia",
    "dementia": "neurology.dementia",
    "depression": "behavioral.depression",
    "cellulitis": "infection.site",
    "gi_bleed": "gastro.gi_bleed",
    "pressure_ulcer": "wounds.kind",
    "stroke": "neurology.stroke",
    "seizure": "neurology.seizure",
})
