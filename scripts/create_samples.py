#!/usr/bin/env python3
"""Generate sample result-entry session files for the replay CLI."""

import argparse
import json
from pathlib import Path

# (test_id, {field_id: value}) entered per session
LAB_VALUES = [
    [
        ("cbc", {"hb": "14.2", "tlc": "7.2", "platelet_count": "245", "rbc": "4.8"}),
        ("esr", {"esr_value": "12", "method": "Westergren"}),
    ],
    [
        ("lft", {"bilirubin_total": "0.9", "sgpt_alt": "28", "sgot_ast": "55"}),
        ("kft", {}),
    ],
    [
        ("lipid", {}),
        ("thyroid", {}),
    ],
    [
        ("dengue", {}),
        ("widal", {}),
    ],
    [
        ("cbc", {"hb": "9.1", "tlc": "13.5"}),
        ("crp", {}),
    ],
]

PATIENT_INFO = [
    ("John Doe", "45", "M", "Dr. Rahman"),
    ("Jane Smith", "38", "F", None),
    ("Robert Johnson", "52", "M", "Dr. Ahmed"),
    ("Maria Garcia", "41", "F", None),
    ("Ahmed Hassan", "48", "M", "Dr. Karim"),
]


def build_session(sample_num: int) -> dict:
    """Build one session: add each test, enter values, collect, then compile."""
    patient_idx = (sample_num - 1) % len(PATIENT_INFO)
    name, age, gender, referred_by = PATIENT_INFO[patient_idx]
    lab_tests = LAB_VALUES[(sample_num - 1) % len(LAB_VALUES)]

    actions = []
    for test_id, values in lab_tests:
        actions.append({"action": "add", "test": test_id})
        for field_id, value in values.items():
            actions.append({"action": "set", "field": field_id, "value": value})
        actions.append({"action": "advance", "seconds": 1.5})

    # Tests with no entered values are collected but left for a later session
    for test_id, values in lab_tests:
        actions.append({"action": "select", "test": test_id})
        actions.append({"action": "toggle"})
        if values:
            actions.append({"action": "compile"})
    actions.append({"action": "print"})

    return {
        "patient": {
            "patient_id": f"P{sample_num:04d}",
            "name": name,
            "age": age,
            "gender": gender,
            "referred_by": referred_by,
        },
        "technician": "tech-01",
        "tests": [],
        "actions": actions,
    }


def main() -> None:
    """Generate sample session files."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--out", default="data/sessions", help="Output directory")
    parser.add_argument("--count", type=int, default=5)
    args = parser.parse_args()

    sessions_dir = Path(args.out)
    sessions_dir.mkdir(parents=True, exist_ok=True)

    for i in range(1, args.count + 1):
        output_path = sessions_dir / f"session_{i:03d}.json"
        output_path.write_text(json.dumps(build_session(i), indent=2))
        print(f"Created {output_path}")

    print(f"\nSuccessfully created {args.count} sample sessions in {sessions_dir}")


if __name__ == "__main__":
    main()
