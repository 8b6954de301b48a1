"""
sections — Document section definitions.

    board        — Board Report sections and their fixed order
    contingency  — Contingency Plan single-section and bundle documents
    exercise     — Exercise Package facilitator documents
"""
