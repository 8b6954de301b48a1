"""
config.py — Configuration loader.

Reads config.yaml and deep-merges it over the built-in defaults below, so the
engine can run without a file (tests, library use) while deployments override
branding, page geometry and boilerplate text.

The returned dict is passed explicitly to every generator call; nothing here
is cached at module level.
"""

import copy
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: dict[str, Any] = {
    "organisation": {
        "name": "St. Mary's NHS Foundation Trust",
        "file_prefix": "ResilienC",
    },
    "report": {
        "title": "Resilience Board Report",
        "confidentiality": "Confidential - Board Use Only",
        "attribution": "Powered by ResilienC Framework",
        "disclaimer_title": "DEMONSTRATION REPORT",
        "disclaimer": (
            "This report uses illustrative data for St. Mary's NHS Foundation Trust "
            "as a demonstration of the ResilienC platform capabilities. Real "
            "implementation would use actual trust data integrated from source systems."
        ),
        "brand": {
            "primary": "005EB8",
            "dark": "003087",
            "text": "212B32",
            "grey": "646464",
            "light": "E3F2FD",
            "panel": "F0F4F5",
            "border": "C8C8C8",
            "green": "007F3B",
            "amber": "FFB81C",
            "red": "DA291C",
        },
        # All geometry in millimetres on an A4 portrait page.
        "page": {
            "margin": 20,
            "first_page_top": 52,
            "content_top": 40,
            "bottom_reserve": 30,
        },
        "citations": [
            "[1] NHS England Monthly Statistics (Winter 2024/25)",
            "[2] CQC Public Ratings Database (Last updated: July 2024)",
            "[3] NHS Digital Workforce Statistics",
            "[4] PHE Healthcare-Associated Infection Reports",
            "[5] ResilienC Five Capitals Assessment Framework",
            "[6] Trust internal operational dashboards",
            "[7] ESR (Electronic Staff Record) System",
            "[8] Finance Ledger and PMO Tracker",
        ],
        "citations_note": (
            "Note: This demonstration report uses illustrative data representative "
            "of a large acute NHS trust."
        ),
        "forward_look": {
            "upcoming_tests": [
                "15 Mar 2026: Cyber-attack desktop exercise",
                "22 Apr 2026: Major incident live drill",
                "10 Jun 2026: Heatwave preparedness table-top",
            ],
            "emerging_risks": [
                "Winter pressures may extend into Q2 due to flu season",
                "Cyber threat level remains elevated nationally",
                "Energy costs forecast to increase 8% in 2026/27",
            ],
            "board_actions": [
                "APPROVE: Workforce resilience improvement programme (£750K)",
                "APPROVE: HVAC replacement programme Phase 1 (£1.2M)",
                "NOTE: Progress on resilience investment delivery",
                "NOTE: Outcomes from Q1 scenario testing exercises",
            ],
        },
    },
    "contingency": {
        "page": {
            "margin": 20,
            "content_top": 20,
            "bottom_reserve": 30,
        },
    },
    "exercise": {
        "title": "Resilience Exercise Package",
        "page": {
            "margin": 20,
            "content_top": 20,
            "bottom_reserve": 27,
        },
        "facilitator_tasks": [
            "Brief all participants before exercise start",
            "Deliver injects at specified times",
            "Observe and note decisions made",
            "Manage exercise pace and time",
            "Lead debrief session",
        ],
    },
    "paths": {
        "output_dir": "data/output",
        "log_dir": "logs",
        "source_data": "data/sample_trust.yaml",
    },
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base (lists are replaced)."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration, falling back to defaults for anything unset.

    Args:
        config_path: Path to a YAML file, or None for pure defaults.

    Returns:
        Fully populated configuration dictionary.

    Raises:
        FileNotFoundError: If config_path is given but does not exist.
    """
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, "r", encoding="utf-8") as fh:
        cfg = yaml.safe_load(fh) or {}
    logger.debug("Loaded configuration from %s", config_path)
    return _deep_merge(DEFAULT_CONFIG, cfg)


def hex_colour(h: str) -> tuple[int, int, int]:
    """Convert a hex colour string ('005EB8' or '#005EB8') to an RGB tuple."""
    h = h.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
