"""
resilience-report — Source package.

Modules:
    config       — YAML configuration with built-in defaults
    errors       — Exception hierarchy for generation failures
    models       — Report input dataclasses + input validation
    report_data  — Collects a ReportData snapshot from the dashboard data source
    blocks       — Light-markup block classifier (heading / bullets / numbered / paragraph)
    canvas       — Recording page canvas, text measurement, ReportLab serialization
    layout       — Vertical cursor and page-break policy
    tables       — Paginated table renderer with repeated headers
    composer     — Shared section drawing primitives
    decorator    — Second-pass headers/footers with "Page i of N"
    progress     — Progress reporter and cancellation token
    assembler    — Board Report, Contingency Plan and Exercise Package assembly
    sections     — Board, contingency and exercise section definitions
"""
