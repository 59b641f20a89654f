from lab_results.schemas.fields import (
    NumericField,
    SelectField,
    TestSchema,
    TextField,
    TimestampField,
)
from lab_results.schemas.records import TestInfo

_NEG_POS = ("Negative", "Positive")
_NIL_PRESENT = ("Nil", "Present")
_TITERS = ("NR", "1:20", "1:40", "1:80", "1:160", "1:320")
_BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


TEST_CATALOG = {
    info.test_id: info
    for info in [
        # Hematology
        TestInfo(test_id="cbc", name="Complete Blood Count (CBC)", category="Hematology", specimen_type="Blood", container="Lavender Top", instructions="Fasting not required"),
        TestInfo(test_id="dlc", name="Differential Leukocyte Count (DLC)", category="Hematology", specimen_type="Blood", container="Lavender Top", instructions="Fasting not required"),
        TestInfo(test_id="esr", name="Erythrocyte Sedimentation Rate (ESR)", category="Hematology", specimen_type="Blood", container="Lavender Top", instructions="Fasting not required"),
        TestInfo(test_id="blood_group", name="Blood Group Test", category="Hematology", specimen_type="Blood", container="Lavender Top", instructions="Fasting not required"),
        # Biochemistry
        TestInfo(test_id="lft", name="Liver Function Test (LFT)", category="Biochemistry", specimen_type="Blood", container="Red Top", instructions="Fasting required (8-12 hours)"),
        TestInfo(test_id="kft", name="KFT/RFT (Kidney Function Test)", category="Biochemistry", specimen_type="Blood", container="Red Top", instructions="Fasting preferred"),
        TestInfo(test_id="bilirubin", name="Bilirubin Total, Direct & Indirect", category="Biochemistry", specimen_type="Blood", container="Red Top", instructions="Fasting not required"),
        TestInfo(test_id="lipid", name="Lipid Profile", category="Biochemistry", specimen_type="Blood", container="Red Top", instructions="Fasting 9-12 hours preferred"),
        TestInfo(test_id="electrolytes", name="Serum Electrolyte", category="Biochemistry", specimen_type="Blood", container="Red Top", instructions="Fasting not required"),
        TestInfo(test_id="crp", name="C-Reactive Protein (Quantitative)", category="Biochemistry", specimen_type="Blood", container="Red Top", instructions="Fasting not required"),
        TestInfo(test_id="hba1c", name="HbA1c (Glycosylated Hemoglobin) - HPLC", category="Biochemistry", specimen_type="Blood", container="Lavender Top", instructions="Fasting not required"),
        TestInfo(test_id="amylase", name="Amylase, Serum", category="Biochemistry", specimen_type="Blood", container="Red Top", instructions="Fasting not required"),
        # Hormone
        TestInfo(test_id="thyroid", name="Thyroid Profile (TSH, FT3, FT4)", category="Hormone", specimen_type="Blood", container="Red Top", instructions="Morning sample preferred"),
        # Serology
        TestInfo(test_id="widal", name="Widal Test (Typhoid)", category="Serology", specimen_type="Blood", container="Red Top", instructions="Fasting not required"),
        TestInfo(test_id="dengue", name="Dengue Panel (NS1, IgM, IgG)", category="Serology", specimen_type="Blood", container="Red Top", instructions="Fasting not required"),
        TestInfo(test_id="h_pylori", name="H Pylori", category="Serology", specimen_type="Stool", container="Stool Container", instructions="Fresh stool sample required"),
        # Clinical pathology
        TestInfo(test_id="urine_routine", name="Urine Routine Examination", category="Urology", specimen_type="Urine", container="Sterile Urine Container", instructions="Midstream clean-catch sample preferred"),
        TestInfo(test_id="stool_routine", name="Stool Routine Examination", category="Stool", specimen_type="Stool", container="Stool Container", instructions="Fresh stool sample preferred"),
    ]
}


BUILTIN_SCHEMAS = {
    schema.test_id: schema
    for schema in [
        TestSchema(
            test_id="cbc",
            fields=(
                NumericField(id="hb", label="Haemoglobin", unit="g/dL", ref_range="11.0-16.0", required=True),
                NumericField(id="tlc", label="TLC (Total Leucocyte Count)", unit="10^3/uL", ref_range="4.0-11.0", required=True),
                NumericField(id="neutrophils_pct", label="Neutrophil", unit="%", ref_range="45-75", required=True),
                NumericField(id="lymphocytes_pct", label="Lymphocyte", unit="%", ref_range="20-45", required=True),
                NumericField(id="eosinophils_pct", label="Eosinophil", unit="%", ref_range="1-6", required=True),
                NumericField(id="monocytes_pct", label="Monocyte", unit="%", ref_range="1-10", required=True),
                NumericField(id="basophils_pct", label="Basophil", unit="%", ref_range="0.00-1.0", required=True),
                NumericField(id="rbc", label="RBC (Red Blood Cell Count)", unit="10^6/uL", ref_range="3.5-5.5", required=True),
                NumericField(id="hct", label="Hct (Hematocrit)", unit="%", ref_range="36-48", required=True),
                NumericField(id="mcv", label="MCV (Mean Corp Volume)", unit="fL", ref_range="80.0-99.9", required=True),
                NumericField(id="mch", label="MCH (Mean Corp Hb)", unit="pg", ref_range="27.0-31.0", required=True),
                NumericField(id="mchc", label="MCHC (Mean Corp Hb Conc)", unit="g/dL", ref_range="32.0-36.0", required=True),
                NumericField(id="platelet_count", label="Platelet Count", unit="10^3/uL", ref_range="150-450", required=True),
                NumericField(id="rdw_cv", label="RDW (Red Cell Dis. Width)", unit="%", ref_range="35-56", required=True),
                NumericField(id="mpv", label="MPV (Mean Platelet Volume)", unit="fL", ref_range="7.0-11.0", required=True),
            ),
        ),
        TestSchema(
            test_id="dlc",
            fields=(
                NumericField(id="neutrophils_pct", label="Neutrophils %", unit="%", ref_range="40 - 70", required=True),
                NumericField(id="lymphocytes_pct", label="Lymphocytes %", unit="%", ref_range="20 - 40", required=True),
                NumericField(id="monocytes_pct", label="Monocytes %", unit="%", ref_range="2 - 10", required=True),
                NumericField(id="eosinophils_pct", label="Eosinophils %", unit="%", ref_range="1 - 6", required=True),
                NumericField(id="basophils_pct", label="Basophils %", unit="%", ref_range="0 - 1"),
                SelectField(id="remarks", label="Morphology Remarks", options=("Normal", "Atypical lymphocytes", "Left shift", "Eosinophilia", "Monocytosis", "Basophilia")),
            ),
        ),
        TestSchema(
            test_id="esr",
            fields=(
                NumericField(id="esr_value", label="ESR", unit="mm/hr", ref_range="M: 0-15, F: 0-20", required=True),
                SelectField(id="method", label="Method", options=("Westergren", "Wintrobe"), required=True),
                TimestampField(id="sample_time", label="Sample Collection Time"),
            ),
        ),
        TestSchema(
            test_id="blood_group",
            fields=(
                SelectField(id="blood_group", label="Blood Group", options=_BLOOD_GROUPS, required=True),
                SelectField(id="rh_type", label="Rh Type", options=("Positive", "Negative"), required=True),
            ),
        ),
        TestSchema(
            test_id="lft",
            fields=(
                NumericField(id="bilirubin_total", label="TOTAL BILIRUBIN", unit="mg/dL", ref_range="0.2 - 1.2", required=True),
                NumericField(id="bilirubin_direct", label="DIRECT BILIRUBIN", unit="mg/dL", ref_range="0.1 - 0.4"),
                NumericField(id="bilirubin_indirect", label="INDIRECT BILIRUBIN", unit="mg/dL", ref_range="0.2 - 0.8"),
                NumericField(id="sgpt_alt", label="S.G.P.T (ALT)", unit="U/L", ref_range="0 - 40", required=True),
                NumericField(id="sgot_ast", label="S.G.O.T (AST)", unit="U/L", ref_range="0 - 40", required=True),
                NumericField(id="alk_phos", label="ALKALINE PHOSPHATASE (ALP)", unit="U/L", ref_range="40 - 120"),
                NumericField(id="total_protein", label="TOTAL PROTEIN", unit="g/dL", ref_range="5.5 - 8.5"),
                NumericField(id="albumin", label="ALBUMIN", unit="g/dL", ref_range="3.5 - 5.5"),
                NumericField(id="globulin", label="GLOBULIN", unit="g/dL", ref_range="2.3 - 4.5"),
                NumericField(id="ag_ratio", label="ALBUMIN/GLOBULIN RATIO", unit="Ratio", ref_range="0 - 2"),
                NumericField(id="ggt", label="GAMMA GLUTAMYL TRANSFERASE (GGT)", unit="U/L", ref_range="6 - 42"),
            ),
        ),
        TestSchema(
            test_id="kft",
            fields=(
                NumericField(id="blood_urea", label="Blood Urea", unit="mg/dL", ref_range="21-40", required=True),
                NumericField(id="serum_creatinine", label="Serum Creatinine", unit="mg/dL", ref_range="0.6-1.1", required=True),
                NumericField(id="uric_acid", label="Uric Acid", unit="mg/dL", ref_range="2.4-5.7", required=True),
                NumericField(id="sodium", label="Sodium (Na+)", unit="mmol/L", ref_range="136-150", required=True),
                NumericField(id="potassium", label="Potassium", unit="mmol/L", ref_range="3.7-5.5", required=True),
                NumericField(id="chloride", label="Chloride (Cl-)", unit="mmol/L", ref_range="98-107", required=True),
                NumericField(id="bun", label="Blood Urea Nitrogen (BUN)", unit="mg/dL", ref_range="6-20", required=True),
                NumericField(id="bun_creatinine_ratio", label="BUN/Creatinine Ratio", unit="Ratio", ref_range="10-20", required=True),
                NumericField(id="calcium", label="Calcium", unit="mg/dL", ref_range="8.6-10.3", required=True),
            ),
        ),
        TestSchema(
            test_id="bilirubin",
            fields=(
                NumericField(id="bilirubin_total", label="BILIRUBIN TOTAL", unit="mg/dL", ref_range="0.2-1.1", required=True),
                NumericField(id="bilirubin_direct", label="BILIRUBIN DIRECT", unit="mg/dL", ref_range="0-0.4", required=True),
                NumericField(id="bilirubin_indirect", label="BILIRUBIN INDIRECT", unit="mg/dL", ref_range="0.2-0.7", required=True),
            ),
        ),
        TestSchema(
            test_id="lipid",
            fields=(
                NumericField(id="total_cholesterol", label="Total Cholesterol", unit="mg/dL", ref_range="< 200", required=True),
                NumericField(id="triglycerides", label="Triglycerides", unit="mg/dL", ref_range="< 150", required=True),
                NumericField(id="hdl", label="H.D.L Cholesterol", unit="mg/dL", ref_range="40-60 Normal; >60 High Risk", required=True),
                NumericField(id="ldl", label="L.D.L Cholesterol", unit="mg/dL", ref_range="< 100 (Optimal)", required=True),
                NumericField(id="vldl", label="V.L.D.L Cholesterol", unit="mg/dL", ref_range="<30 mg/dL"),
                SelectField(id="fasting", label="Fasting Status", options=("Fasting", "Non-Fasting"), required=True),
            ),
        ),
        TestSchema(
            test_id="electrolytes",
            fields=(
                NumericField(id="sodium", label="Sodium (Na+)", unit="mmol/L", ref_range="136-150", required=True),
                NumericField(id="potassium", label="Potassium (K+)", unit="mmol/L", ref_range="3.5-5.1", required=True),
                NumericField(id="chloride", label="Chloride (Cl-)", unit="mmol/L", ref_range="98-107", required=True),
            ),
        ),
        TestSchema(
            test_id="crp",
            fields=(
                NumericField(id="crp_value", label="C-Reactive Protein", unit="mg/L", ref_range="0-6", required=True),
            ),
        ),
        TestSchema(
            test_id="hba1c",
            fields=(
                NumericField(id="hba1c", label="HbA1c", unit="%", ref_range="Normal: 4.3-6.1\nNon-Diabetic: <6.0\nGood Control (Diabetic): <7.0", required=True),
                TextField(
                    id="hba1c_comment",
                    label="Comment",
                    default_value=(
                        "HbA1c reflects average glycaemia over the past 6-8 weeks. "
                        "5.8-7.2%: good control of diabetes. 7.3-8.0%: fair control. "
                        ">8.0%: suboptimal control, intervention is advised."
                    ),
                ),
            ),
        ),
        TestSchema(
            test_id="amylase",
            fields=(
                NumericField(id="amylase_value", label="AMYLASE, SERUM", unit="IU/L", ref_range="25-110", required=True),
                TextField(
                    id="amylase_comment",
                    label="Comment",
                    default_value=(
                        "Serum amylase rises within 6 to 48 hours of onset of acute pancreatitis "
                        "in ~80% of patients, but is not proportional to disease severity."
                    ),
                ),
            ),
        ),
        TestSchema(
            test_id="thyroid",
            fields=(
                NumericField(id="tsh", label="TSH", unit="uIU/mL", ref_range="0.4 - 4.0", step=0.01, required=True),
                NumericField(id="free_t3", label="Free T3", unit="pg/mL", ref_range="2.3 - 4.2", step=0.01),
                NumericField(id="free_t4", label="Free T4", unit="ng/dL", ref_range="0.8 - 1.8", step=0.01),
                TimestampField(id="sample_time", label="Sample Collection Time", required=True),
            ),
        ),
        TestSchema(
            test_id="widal",
            fields=(
                SelectField(id="s_typhi_o", label="S. Typhi O", unit="Titer", ref_range="<1:80", options=_TITERS, required=True),
                SelectField(id="s_typhi_h", label="S. Typhi H", unit="Titer", ref_range="<1:160", options=_TITERS, required=True),
                SelectField(id="s_paratyphi_ah", label="S. Paratyphi AH", unit="Titer", ref_range="<1:80", options=_TITERS, required=True),
                SelectField(id="s_paratyphi_bh", label="S. Paratyphi BH", unit="Titer", ref_range="<1:80", options=_TITERS, required=True),
            ),
        ),
        TestSchema(
            test_id="dengue",
            fields=(
                SelectField(id="dengue_ns1", label="DENGUE NS1 ANTIGEN", ref_range="Negative", options=_NEG_POS, required=True),
                SelectField(id="dengue_igm", label="DENGUE ANTIBODIES IgM", ref_range="Negative", options=_NEG_POS, required=True),
                SelectField(id="dengue_igg", label="DENGUE ANTIBODIES IgG", ref_range="Negative", options=_NEG_POS, required=True),
            ),
        ),
        TestSchema(
            test_id="h_pylori",
            fields=(
                SelectField(id="h_pylori_antigen", label="Helicobacter Pylori Antigen", ref_range="NEGATIVE", options=("NEGATIVE", "POSITIVE"), required=True),
            ),
        ),
        TestSchema(
            test_id="urine_routine",
            fields=(
                NumericField(id="quantity", label="Quantity", unit="mL"),
                SelectField(id="colour", label="Colour", options=("Straw", "Pale Yellow", "Yellow", "Amber", "Dark")),
                SelectField(id="appearance", label="Appearance", options=("Clear", "Slightly Turbid", "Turbid")),
                NumericField(id="specific_gravity", label="Specific Gravity", ref_range="1.005-1.030", min=1.0, max=1.05, step=0.001),
                NumericField(id="ph", label="pH", ref_range="4.5-8.0", min=4.5, max=8.0, step=0.1),
                SelectField(id="albumin", label="Albumin", options=("Nil", "Trace", "1+", "2+", "3+")),
                SelectField(id="glucose", label="Glucose", options=("Nil", "Trace", "1+", "2+", "3+")),
                SelectField(id="ketone", label="Ketone", options=("Nil", "Trace", "Present")),
                NumericField(id="pus_cells", label="Pus cells", unit="/HPF", ref_range="0-5"),
                NumericField(id="epithelial_cells", label="Epithelial cells", unit="/HPF", ref_range="0-1"),
                NumericField(id="rbcs", label="RBCs", unit="/HPF", ref_range="0-2"),
                SelectField(id="crystals", label="Crystals", options=_NIL_PRESENT),
                SelectField(id="casts", label="Casts", options=_NIL_PRESENT),
                TextField(id="other", label="Other"),
            ),
        ),
        TestSchema(
            test_id="stool_routine",
            fields=(
                SelectField(id="colour", label="Colour", options=("Brown", "Yellow", "Clay", "Black (Melena)", "Red")),
                SelectField(id="consistency", label="Consistency", options=("Formed", "Semi-Solid", "Loose", "Watery")),
                SelectField(id="mucus", label="Mucus", options=("Absent", "Present(+)", "Present(++)")),
                SelectField(id="blood", label="Blood", options=_NIL_PRESENT),
                SelectField(id="occult_blood", label="Occult Blood", options=_NEG_POS),
                SelectField(id="ova_hookworm", label="Ova of Hookworm", options=_NIL_PRESENT),
                SelectField(id="ova_roundworm", label="Ova of Roundworm", options=_NIL_PRESENT),
                NumericField(id="deg_leucocytes", label="Degenerated Leucocytes", unit="/hpf", ref_range="0-5 /hpf"),
                SelectField(id="bacterial_flora", label="Bacterial Flora", options=("Not Found", "Found")),
            ),
        ),
    ]
}


# Used for any test id without a registered schema
GENERIC_FIELDS = (
    TextField(id="result", label="Result"),
    NumericField(id="value", label="Value"),
    TimestampField(id="sample_time", label="Sample Collection Time"),
)
