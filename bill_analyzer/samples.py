"""
Sample medical bills for demos and testing.

Each sample exercises a different group of detection rules.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SampleBill:
    """A named sample bill text."""

    name: str
    description: str
    content: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "content": self.content,
        }


ER_VISIT = SampleBill(
    name="ER VISIT",
    description="Emergency room visit with duplicate charges",
    content="""HOSPITAL BILLING STATEMENT
===============================
Patient ID: #8829-X
Date of Service: October 12, 2024
Provider: Metro General Hospital

ITEMIZED CHARGES:
-----------------
99285 EMERGENCY DEPT VISIT ....... $1,420.00
85025 COMPLETE BLOOD COUNT ....... $125.00
85025 COMPLETE BLOOD COUNT ....... $125.00
70450 CT HEAD/BRAIN .............. $2,840.00
36415 VENIPUNCTURE ............... $45.00
99285 EMERGENCY DEPT VISIT ....... $1,420.00
96360 IV INFUSION ................ $380.00
J0170 ADRENALIN INJECTION ........ $89.00

SUBTOTAL: $6,444.00
FACILITY FEE: $850.00
PROCESSING FEE: $12.00
-----------------
TOTAL CHARGES: $7,306.00

Insurance Adjustment: -$2,100.00
AMOUNT DUE: $5,206.00""",
)

LAB_TESTS = SampleBill(
    name="LAB TESTS",
    description="Laboratory tests with math errors",
    content="""PATHOLOGY LABORATORY INVOICE
============================
Patient ID: #4421-B
Date: November 3, 2024
Lab: CityPath Diagnostics

TEST RESULTS BILLING:
---------------------
80053 COMPREHENSIVE METABOLIC ..... $245.00
81001 URINALYSIS .................. $35.00
85610 PROTHROMBIN TIME ............ $78.00
86900 BLOOD TYPING ................ $120.00
87070 CULTURE BACTERIAL ........... $165.00
88305 TISSUE PATHOLOGY ............ $425.00

SUBTOTAL: $1,068.00
Specimen Handling: $45.00
Administrative Fee: $25.00
---------------------
TOTAL DUE: $1,238.00

Note: Total shown includes $100 calculation error""",
)

OUTPATIENT_SURGERY = SampleBill(
    name="OUTPATIENT SURGERY",
    description="Outpatient procedure with excessive charges",
    content="""SURGICAL CENTER STATEMENT
=========================
Patient ID: #7756-C
Procedure Date: September 28, 2024
Facility: Premier Surgical Center

PROCEDURE CHARGES:
------------------
29881 KNEE ARTHROSCOPY ........... $4,500.00
99144 MODERATE SEDATION .......... $890.00
J1100 DEXAMETHASONE INJECTION .... $45.00
A4550 SURGICAL SUPPLIES .......... $3,200.00
97110 PHYSICAL THERAPY EVAL ...... $175.00
'PREMIUM CARE' SURCHARGE ......... $1,500.00

FACILITY FEE: $2,800.00
RECOVERY ROOM: $650.00
------------------
TOTAL: $13,760.00

Payment Plan Available
Contact Billing: 1-800-555-0123""",
)

SAMPLE_BILLS: tuple[SampleBill, ...] = (ER_VISIT, LAB_TESTS, OUTPATIENT_SURGERY)


def get_sample(name: str) -> Optional[SampleBill]:
    """
    Look up a sample bill by name, ignoring case.

    Args:
        name: Sample name such as "er visit".

    Returns:
        Optional[SampleBill]: The sample, or None if unknown.
    """
    wanted = name.strip().upper()
    for sample in SAMPLE_BILLS:
        if sample.name == wanted:
            return sample
    return None
