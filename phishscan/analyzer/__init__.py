"""Analyzer modules for PhishScan."""

from .detector import PhishingDetector
from .links import analyze_link, analyze_links
from .models import DetectionResult, DetectionRule, LinkFinding, ReputationVerdict, SenderStats
from .reputation import analyze_sender_reputation, apply_scan_outcome
from .rules import RuleSet, RuleStore

__all__ = [
    "PhishingDetector",
    "analyze_link",
    "analyze_links",
    "DetectionResult",
    "DetectionRule",
    "LinkFinding",
    "ReputationVerdict",
    "SenderStats",
    "analyze_sender_reputation",
    "apply_scan_outcome",
    "RuleSet",
    "RuleStore",
]
