"""
medtriage/responder/ehr.py
Appends EHR context to a composed reply.

Medication and allergy lists are added only when the reply already talks
about medication / allergies; an active condition adds a one-line note.
"""

from typing import Optional

from medtriage.models.record import EHRSummary

MEDICATIONS_HEADER = "\n\nBased on your records, I can see you're currently taking: "
ALLERGIES_HEADER   = "\n\nI notice from your records that you have the following allergies: "
CONDITIONS_NOTE    = "\n\nI'm taking into account your current health conditions in this response."


def enhance_with_ehr(response: str, ehr: Optional[EHRSummary]) -> str:
    if ehr is None:
        return response

    lowered  = response.lower()
    enhanced = response

    if 'medication' in lowered and ehr.medications:
        enhanced += MEDICATIONS_HEADER
        for med in ehr.medications:
            enhanced += f"\n- {med.get('name')} ({med.get('dosage')}, {med.get('frequency')})"

    if 'allerg' in lowered and ehr.allergies:
        enhanced += ALLERGIES_HEADER
        for allergy in ehr.allergies:
            enhanced += (
                f"\n- {allergy.get('substance')} "
                f"({allergy.get('severity')} - {allergy.get('reaction')})"
            )

    if any(c.get('status') == 'active' for c in ehr.conditions):
        enhanced += CONDITIONS_NOTE

    return enhanced
