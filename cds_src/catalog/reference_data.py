"""Bundled reference dataset.

Loaded when the backing store is unavailable or empty so lookups degrade
instead of failing. Documents use the same shape as the store.
"""

from ..models import MedicationRecord, TreatmentGuideline


MEDICATIONS = [
    {
        "id": "1",
        "name": "Lisinopril",
        "generic_name": "lisinopril",
        "brand_names": ["Prinivil", "Zestril"],
        "rxnorm_code": "29046",
        "atc_code": "C09AA03",
        "drug_classes": ["Antihypertensive", "ACE Inhibitor"],
        "indications": ["Hypertension", "Heart Failure", "Post-Myocardial Infarction"],
        "contraindications": ["Pregnancy", "History of angioedema", "Bilateral renal artery stenosis"],
        "warnings": ["May cause cough", "May increase potassium levels", "Risk of hypotension"],
        "side_effects": ["Cough", "Dizziness", "Headache", "Fatigue", "Hyperkalemia"],
        "interactions": [
            {"medication": "Spironolactone", "severity": "moderate",
             "description": "May increase risk of hyperkalemia", "evidence_level": "strong"},
            {"medication": "NSAIDs", "severity": "moderate",
             "description": "May reduce antihypertensive effect", "evidence_level": "strong"},
            {"medication": "Lithium", "severity": "moderate",
             "description": "May increase lithium levels", "evidence_level": "moderate"},
        ],
        "dosage_guidelines": [
            {"condition": "Hypertension", "route": "Oral", "dosage": "10 mg",
             "frequency": "Once daily", "max_daily_dose": "40 mg",
             "notes": "Start with 5 mg in patients on diuretics"},
            {"condition": "Heart Failure", "route": "Oral", "dosage": "5 mg",
             "frequency": "Once daily", "max_daily_dose": "40 mg",
             "notes": "Titrate up to target dose as tolerated"},
        ],
        "standard_dosages": [
            {"min": 5, "max": 40, "unit": "mg", "frequency": "once daily", "route": "oral",
             "age_group": "adult", "condition": "Hypertension"},
            {"min": 2.5, "max": 40, "unit": "mg", "frequency": "once daily", "route": "oral",
             "age_group": "adult", "condition": "Heart Failure"},
            {"min": 2.5, "max": 20, "unit": "mg", "frequency": "once daily", "route": "oral",
             "age_group": "geriatric"},
        ],
        "half_life_hours": 12,
        "pregnancy_category": "D",
        "beers_criteria": {"is_inappropriate": False, "reason": "", "recommendation": ""},
        "renal_dosing": {"requires_adjustment": True,
                         "guidelines": "For CrCl < 30 mL/min, start with 5 mg daily"},
        "hepatic_dosing": {"requires_adjustment": False, "guidelines": ""},
        "geriatric_precautions": ["Orthostatic hypotension", "Hyperkalemia"],
        "references": ["American Heart Association Guidelines", "JNC 8 Guidelines for Hypertension"],
    },
    {
        "id": "2",
        "name": "Metformin",
        "generic_name": "metformin",
        "brand_names": ["Glucophage", "Fortamet", "Glumetza", "Riomet"],
        "rxnorm_code": "6809",
        "atc_code": "A10BA02",
        "drug_classes": ["Antidiabetic", "Biguanide"],
        "indications": ["Type 2 Diabetes Mellitus", "Insulin Resistance", "PCOS"],
        "contraindications": [
            "Renal impairment (eGFR < 30 mL/min)",
            "Metabolic acidosis",
            "Severe heart failure",
        ],
        "warnings": [
            "Risk of lactic acidosis",
            "Temporarily discontinue in patients undergoing radiologic studies with iodinated contrast",
            "May impair vitamin B12 absorption",
        ],
        "side_effects": ["Diarrhea", "Nausea", "Abdominal pain", "Metallic taste", "Vitamin B12 deficiency"],
        "interactions": [
            {"medication": "Cimetidine", "severity": "moderate",
             "description": "May increase metformin levels", "evidence_level": "moderate"},
            {"medication": "Furosemide", "severity": "low",
             "description": "May reduce metformin clearance", "evidence_level": "moderate"},
            {"medication": "Contrast media", "severity": "high",
             "description": "Increases risk of lactic acidosis", "evidence_level": "strong"},
        ],
        "dosage_guidelines": [
            {"condition": "Type 2 Diabetes", "route": "Oral", "dosage": "500 mg",
             "frequency": "Twice daily", "max_daily_dose": "2550 mg",
             "notes": "Take with meals to reduce GI side effects"},
            {"condition": "Type 2 Diabetes - Extended Release", "route": "Oral", "dosage": "500-1000 mg",
             "frequency": "Once daily", "max_daily_dose": "2000 mg", "notes": "Take with evening meal"},
        ],
        "standard_dosages": [
            {"min": 500, "max": 1000, "unit": "mg", "frequency": "twice daily", "route": "oral",
             "age_group": "adult"},
        ],
        "half_life_hours": 6.2,
        "pregnancy_category": "B",
        "beers_criteria": {"is_inappropriate": False, "reason": "", "recommendation": ""},
        "renal_dosing": {
            "requires_adjustment": True,
            "guidelines": "Contraindicated if eGFR < 30 mL/min. For eGFR 30-45 mL/min, maximum 1000 mg/day.",
        },
        "hepatic_dosing": {
            "requires_adjustment": True,
            "guidelines": "Avoid in severe hepatic impairment due to increased risk of lactic acidosis",
        },
        "references": ["American Diabetes Association Standards of Care", "NICE Guidelines for Type 2 Diabetes"],
    },
    {
        "id": "3",
        "name": "Ibuprofen",
        "generic_name": "ibuprofen",
        "brand_names": ["Advil", "Motrin", "Nurofen"],
        "rxnorm_code": "5640",
        "atc_code": "M01AE01",
        "drug_classes": ["NSAID", "Anti-inflammatory", "Analgesic", "Antipyretic"],
        "indications": ["Pain", "Inflammation", "Fever", "Arthritis"],
        "contraindications": [
            "Active peptic ulcer disease",
            "Severe heart failure",
            "Third trimester of pregnancy",
            "History of NSAID-induced asthma",
        ],
        "warnings": [
            "Increased risk of cardiovascular events",
            "Increased risk of GI bleeding",
            "May cause renal impairment",
            "May worsen hypertension",
        ],
        "side_effects": ["Nausea", "Dyspepsia", "GI bleeding", "Dizziness", "Edema", "Hypertension"],
        "interactions": [
            {"medication": "Aspirin", "severity": "moderate",
             "description": "Increased risk of GI bleeding", "evidence_level": "strong"},
            {"medication": "Warfarin", "severity": "high",
             "description": "Increased risk of bleeding", "evidence_level": "strong"},
            {"medication": "ACE inhibitors", "severity": "moderate",
             "description": "May reduce antihypertensive effect", "evidence_level": "strong"},
            {"medication": "Lithium", "severity": "moderate",
             "description": "May increase lithium levels", "evidence_level": "moderate"},
        ],
        "dosage_guidelines": [
            {"condition": "Pain/Fever", "route": "Oral", "dosage": "200-400 mg",
             "frequency": "Every 4-6 hours", "max_daily_dose": "1200 mg",
             "notes": "Take with food to reduce GI side effects"},
            {"condition": "Arthritis", "route": "Oral", "dosage": "400-800 mg",
             "frequency": "Three times daily", "max_daily_dose": "3200 mg"},
            {"age_group": "pediatric", "condition": "Pain/Fever", "route": "Oral", "dosage": "5-10 mg/kg",
             "frequency": "Every 6-8 hours", "max_daily_dose": "40 mg/kg/day",
             "notes": "Not for children under 6 months"},
        ],
        "standard_dosages": [
            {"min": 200, "max": 800, "unit": "mg", "frequency": "every 6-8 hours", "route": "oral",
             "age_group": "adult"},
            {"min": 5, "max": 10, "unit": "mg", "frequency": "every 6-8 hours", "route": "oral",
             "age_group": "pediatric", "weight_based": True},
        ],
        "half_life_hours": 2,
        "pediatric_use": {
            "is_safe": True,
            "minimum_age": 0.5,
            "dosage_adjustment": "Weight-based dosing required",
            "warnings": ["Risk of Reye syndrome if given during viral infections"],
        },
        "pregnancy_category": "C",
        "beers_criteria": {
            "is_inappropriate": True,
            "reason": "Increased risk of GI bleeding and peptic ulcer disease in older adults",
            "recommendation": "Avoid chronic use unless other alternatives are not effective",
        },
        "renal_dosing": {"requires_adjustment": True,
                         "guidelines": "Avoid in severe renal impairment (CrCl < 30 mL/min)"},
        "hepatic_dosing": {"requires_adjustment": True,
                           "guidelines": "Use with caution in hepatic impairment; reduce dosage"},
        "geriatric_precautions": ["GI bleeding", "Acute kidney injury"],
        "references": ["FDA prescribing information", "American College of Rheumatology Guidelines"],
    },
    {
        "id": "4",
        "name": "Diphenhydramine",
        "generic_name": "diphenhydramine",
        "brand_names": ["Benadryl", "Nytol", "Sominex"],
        "rxnorm_code": "3627",
        "atc_code": "R06AA02",
        "drug_classes": ["Antihistamine", "Anticholinergic", "Sedative"],
        "indications": ["Allergic reactions", "Insomnia", "Motion sickness", "Cough suppression"],
        "contraindications": ["Narrow-angle glaucoma", "Prostatic hyperplasia", "Bladder neck obstruction", "Asthma"],
        "warnings": [
            "May cause sedation",
            "Anticholinergic effects",
            "May worsen urinary retention",
            "May worsen glaucoma",
        ],
        "side_effects": [
            "Drowsiness",
            "Dry mouth",
            "Blurred vision",
            "Constipation",
            "Urinary retention",
            "Confusion (especially in elderly)",
        ],
        "interactions": [
            {"medication": "Alcohol", "severity": "high",
             "description": "Enhanced CNS depression", "evidence_level": "strong"},
            {"medication": "MAO inhibitors", "severity": "moderate",
             "description": "May prolong and intensify anticholinergic effects", "evidence_level": "moderate"},
            {"medication": "Other anticholinergics", "severity": "moderate",
             "description": "Additive anticholinergic effects", "evidence_level": "strong"},
        ],
        "dosage_guidelines": [
            {"condition": "Allergic reactions", "route": "Oral", "dosage": "25-50 mg",
             "frequency": "Every 4-6 hours", "max_daily_dose": "300 mg"},
            {"condition": "Insomnia", "route": "Oral", "dosage": "50 mg",
             "frequency": "At bedtime", "max_daily_dose": "50 mg"},
            {"age_group": "pediatric", "condition": "Allergic reactions", "weight_range": {"min": 10, "max": 20},
             "route": "Oral", "dosage": "12.5-25 mg", "frequency": "Every 4-6 hours",
             "max_daily_dose": "150 mg", "notes": "Not for children under 2 years"},
        ],
        "standard_dosages": [
            {"min": 25, "max": 50, "unit": "mg", "frequency": "every 4-6 hours", "route": "oral",
             "age_group": "adult"},
            {"min": 12.5, "max": 25, "unit": "mg", "frequency": "every 4-6 hours", "route": "oral",
             "age_group": "pediatric"},
        ],
        "half_life_hours": 9,
        "pediatric_use": {
            "is_safe": True,
            "minimum_age": 2,
            "dosage_adjustment": "Weight-based dosing required",
            "warnings": ["May cause paradoxical excitation in young children"],
        },
        "pregnancy_category": "B",
        "beers_criteria": {
            "is_inappropriate": True,
            "reason": "Highly anticholinergic; increased risk of confusion, dry mouth, constipation, "
                      "and other anticholinergic effects",
            "recommendation": "Avoid use in older adults",
        },
        "renal_dosing": {"requires_adjustment": True,
                         "guidelines": "Consider reduced dosage in renal impairment"},
        "hepatic_dosing": {"requires_adjustment": True,
                           "guidelines": "Consider reduced dosage in hepatic impairment"},
        "geriatric_precautions": ["Confusion", "Falls", "Urinary retention"],
        "references": ["FDA prescribing information", "American Geriatrics Society Beers Criteria"],
    },
    {
        "id": "5",
        "name": "Spironolactone",
        "generic_name": "spironolactone",
        "brand_names": ["Aldactone", "CaroSpir"],
        "rxnorm_code": "9997",
        "atc_code": "C03DA01",
        "drug_classes": ["Diuretic", "Potassium-sparing diuretic"],
        "indications": ["Heart Failure", "Hypertension", "Edema", "Primary hyperaldosteronism"],
        "contraindications": ["Hyperkalemia", "Addison's disease", "Anuria"],
        "warnings": ["Monitor potassium and renal function"],
        "side_effects": ["Hyperkalemia", "Gynecomastia", "Dizziness"],
        "interactions": [
            {"medication": "ACE inhibitors", "severity": "moderate",
             "description": "May increase risk of hyperkalemia", "evidence_level": "strong"},
            {"medication": "Potassium supplements", "severity": "high",
             "description": "Severe hyperkalemia", "evidence_level": "strong"},
        ],
        "dosage_guidelines": [
            {"condition": "Heart Failure", "route": "Oral", "dosage": "25 mg",
             "frequency": "Once daily", "max_daily_dose": "50 mg"},
        ],
        "standard_dosages": [
            {"min": 12.5, "max": 100, "unit": "mg", "frequency": "once daily", "route": "oral",
             "age_group": "adult"},
        ],
        "half_life_hours": 1.4,
        "pregnancy_category": "C",
        "renal_dosing": {"requires_adjustment": True,
                         "guidelines": "Avoid if eGFR < 30 mL/min"},
        "hepatic_dosing": {"requires_adjustment": False, "guidelines": ""},
        "geriatric_precautions": ["Hyperkalemia"],
        "gender_specific_risks": {"male": ["Gynecomastia"], "female": ["Menstrual irregularities"]},
        "references": ["ACC/AHA Heart Failure Guidelines"],
    },
    {
        "id": "6",
        "name": "Warfarin",
        "generic_name": "warfarin",
        "brand_names": ["Coumadin", "Jantoven"],
        "rxnorm_code": "11289",
        "atc_code": "B01AA03",
        "drug_classes": ["Anticoagulant", "Vitamin K antagonist"],
        "indications": ["Atrial fibrillation", "Deep vein thrombosis", "Pulmonary embolism"],
        "contraindications": ["Active bleeding", "Pregnancy", "Severe hepatic disease"],
        "warnings": ["Risk of major bleeding", "Requires INR monitoring"],
        "side_effects": ["Bleeding", "Bruising"],
        "interactions": [
            {"medication": "NSAIDs", "severity": "high",
             "description": "Increased risk of bleeding", "evidence_level": "strong"},
            {"medication": "Aspirin", "severity": "high",
             "description": "Increased risk of bleeding", "evidence_level": "strong"},
            {"medication": "Amiodarone", "severity": "high",
             "description": "Increases INR", "evidence_level": "strong"},
        ],
        "standard_dosages": [
            {"min": 1, "max": 10, "unit": "mg", "frequency": "once daily", "route": "oral",
             "age_group": "adult"},
        ],
        "half_life_hours": 40,
        "pregnancy_category": "X",
        "renal_dosing": {"requires_adjustment": False, "guidelines": ""},
        "hepatic_dosing": {"requires_adjustment": True,
                           "guidelines": "Reduce initial dose in hepatic impairment"},
        "geriatric_precautions": ["Increased bleeding risk"],
        "references": ["CHEST Antithrombotic Guidelines"],
    },
    {
        "id": "7",
        "name": "Vancomycin",
        "generic_name": "vancomycin",
        "brand_names": ["Vancocin", "Firvanq"],
        "rxnorm_code": "11124",
        "atc_code": "J01XA01",
        "drug_classes": ["Antibiotic", "Glycopeptide"],
        "indications": ["MRSA infection", "Clostridioides difficile infection", "Endocarditis"],
        "contraindications": ["Hypersensitivity to vancomycin"],
        "warnings": ["Nephrotoxicity", "Ototoxicity", "Infusion reaction"],
        "side_effects": ["Infusion reaction", "Nephrotoxicity", "Ototoxicity"],
        "interactions": [
            {"medication": "Aminoglycosides", "severity": "high",
             "description": "Additive nephrotoxicity", "evidence_level": "strong"},
            {"medication": "Piperacillin-tazobactam", "severity": "moderate",
             "description": "Increased risk of acute kidney injury", "evidence_level": "moderate"},
        ],
        "standard_dosages": [
            {"min": 15, "max": 20, "unit": "mg", "frequency": "every 8-12 hours", "route": "iv",
             "weight_based": True},
            {"min": 125, "max": 500, "unit": "mg", "frequency": "four times daily", "route": "oral",
             "condition": "Clostridioides difficile infection"},
        ],
        "therapeutic_levels": [
            {"min": 10, "max": 20, "unit": "mcg/mL", "timing": "trough"},
            {"min": 20, "max": 40, "unit": "mcg/mL", "timing": "peak"},
        ],
        "half_life_hours": 6,
        "pediatric_use": {"is_safe": True, "minimum_age": 0,
                          "dosage_adjustment": "Weight-based dosing required"},
        "pregnancy_category": "C",
        "renal_dosing": {"requires_adjustment": True,
                         "guidelines": "Adjust interval by CrCl and trough levels"},
        "hepatic_dosing": {"requires_adjustment": False, "guidelines": ""},
        "references": ["IDSA/ASHP Vancomycin Therapeutic Monitoring Guidelines"],
    },
    {
        "id": "8",
        "name": "Digoxin",
        "generic_name": "digoxin",
        "brand_names": ["Lanoxin"],
        "rxnorm_code": "3407",
        "atc_code": "C01AA05",
        "drug_classes": ["Cardiac glycoside", "Antiarrhythmic"],
        "indications": ["Heart Failure", "Atrial fibrillation"],
        "contraindications": ["Ventricular fibrillation"],
        "warnings": ["Narrow therapeutic index"],
        "side_effects": ["Nausea", "Visual disturbances", "Arrhythmia"],
        "interactions": [
            {"medication": "Amiodarone", "severity": "high",
             "description": "Increases digoxin levels", "evidence_level": "strong"},
            {"medication": "Verapamil", "severity": "moderate",
             "description": "Increases digoxin levels", "evidence_level": "moderate"},
        ],
        "standard_dosages": [
            {"min": 0.0625, "max": 0.25, "unit": "mg", "frequency": "once daily", "route": "oral"},
        ],
        "therapeutic_levels": [
            {"min": 0.5, "max": 2.0, "unit": "ng/mL", "timing": "steady-state"},
        ],
        "half_life_hours": 36,
        "pregnancy_category": "C",
        "beers_criteria": {
            "is_inappropriate": True,
            "reason": "Decreased renal clearance may increase risk of toxicity",
            "recommendation": "Avoid doses above 0.125 mg/day",
        },
        "renal_dosing": {"requires_adjustment": True,
                         "guidelines": "Reduce dose in renal impairment"},
        "hepatic_dosing": {"requires_adjustment": False, "guidelines": ""},
        "geriatric_precautions": ["Digoxin toxicity"],
        "references": ["AGS Beers Criteria"],
    },
]

GUIDELINES = [
    {
        "id": "1",
        "condition": "Hypertension",
        "icd10_codes": ["I10", "I11", "I12", "I13"],
        "first_line_options": [
            {"medications": ["Lisinopril", "Hydrochlorothiazide", "Amlodipine", "Losartan"],
             "notes": "Choice depends on comorbidities and patient characteristics"},
        ],
        "second_line_options": [
            {"medications": ["Metoprolol", "Chlorthalidone", "Valsartan", "Diltiazem"],
             "notes": "Consider if inadequate response to first-line options"},
        ],
        "special_populations": [
            {"population": "pregnant", "recommendations": ["Avoid ACE inhibitors and ARBs"],
             "medications": ["Methyldopa", "Labetalol", "Nifedipine"]},
            {"population": "renal-impairment",
             "recommendations": ["Avoid thiazide diuretics if eGFR < 30 mL/min"],
             "medications": ["Amlodipine", "Hydralazine"]},
        ],
        "source": "JNC 8 Guidelines",
        "evidence_level": "high",
    },
    {
        "id": "2",
        "condition": "Type 2 Diabetes Mellitus",
        "icd10_codes": ["E11"],
        "first_line_options": [
            {"medications": ["Metformin"],
             "notes": "Start with low dose and titrate up to reduce GI side effects"},
        ],
        "second_line_options": [
            {"medications": ["Sulfonylureas", "DPP-4 inhibitors", "SGLT2 inhibitors", "GLP-1 receptor agonists"],
             "notes": "Add second agent if HbA1c target not achieved after 3 months of metformin"},
        ],
        "special_populations": [
            {"population": "renal-impairment", "recommendations": ["Avoid metformin if eGFR < 30 mL/min"],
             "medications": ["DPP-4 inhibitors", "Insulin"]},
            {"population": "geriatric", "recommendations": ["Avoid sulfonylureas due to hypoglycemia risk"],
             "medications": ["DPP-4 inhibitors", "Metformin"]},
        ],
        "source": "American Diabetes Association Standards of Care",
        "evidence_level": "high",
    },
    {
        "id": "3",
        "condition": "Acute Pain",
        "icd10_codes": ["R52", "G89.0", "G89.1"],
        "first_line_options": [
            {"medications": ["Acetaminophen", "Ibuprofen", "Naproxen"],
             "notes": "Start with non-opioid analgesics"},
        ],
        "second_line_options": [
            {"medications": ["Tramadol", "Codeine", "Hydrocodone", "Oxycodone"],
             "notes": "Consider weak opioids if inadequate pain relief with non-opioids"},
        ],
        "special_populations": [
            {"population": "geriatric",
             "recommendations": ["Start with lower doses", "Avoid NSAIDs if possible"],
             "medications": ["Acetaminophen", "Tramadol (reduced dose)"]},
            {"population": "hepatic-impairment", "recommendations": ["Avoid acetaminophen or reduce dosage"],
             "medications": ["Tramadol (reduced dose)", "Hydromorphone (reduced dose)"]},
        ],
        "source": "WHO Pain Ladder Guidelines",
        "evidence_level": "high",
    },
]


def load_reference_data() -> tuple[list[MedicationRecord], list[TreatmentGuideline]]:
    """Build validated records from the bundled dataset."""
    medications = [MedicationRecord.from_dict(doc) for doc in MEDICATIONS]
    guidelines = [TreatmentGuideline.from_dict(doc) for doc in GUIDELINES]
    return medications, guidelines
