"""
Governance helpers.

Contract:
- ComplianceGate.validate(config) scans the canonical configuration and returns a report.
  A ``blocked`` report is a deployment gate: callers must refuse to proceed (enforce()).
- SafetyInterrupt.scan(message, module) flags aggressive input. It only emits an event;
  tone correction is left to the instructions in the canonical configuration.
"""

import logging
from typing import List, Optional

from .analytics import EventSink, emit, log_event
from .errors import ConfigurationBlockedError
from .registry import CANONICAL_ROOT_TOKEN
from .schemas import AIModule, ComplianceCheck, ComplianceReport, FeatureFlags
from .settings import settings as set

FORBIDDEN_TERMS = (
    "diagnose",
    "prescribe",
    "legal advice",
    "guarantee",
    "fault",
    "liability decision",
)
NEGATIONS = ("do not ", "not ", "no ")

AGGRESSIVE_KEYWORDS = ("useless", "corrupt", "lazy", "liar", "malpractice", "negligence", "fire them")

logger = logging.getLogger(__name__)


def _passed(ok: bool) -> str:
    return "passed" if ok else "failed"


def find_unsafe_terms(config: str) -> List[str]:
    """Forbidden terms that occur in config without a negated form anywhere in it.

    The negation test is document-wide, not per occurrence: a text holding both
    "do not diagnose" and a bare "diagnose" reports nothing for "diagnose".
    """
    text = config.lower()
    unsafe = []
    for term in FORBIDDEN_TERMS:
        if any(f"{neg}{term}" in text for neg in NEGATIONS):
            continue
        if term in text:
            unsafe.append(term)
    return unsafe


class ComplianceGate:
    def __init__(self, flags: FeatureFlags = FeatureFlags()):
        self.flags = flags

    def validate(self, config: str) -> ComplianceReport:
        has_root = CANONICAL_ROOT_TOKEN in config
        unsafe = find_unsafe_terms(config)
        interrupt_on = self.flags.complaints_safety_interrupt is True

        checks = (
            ComplianceCheck(
                id="schema_validation",
                name="Canonical Schema Validation",
                status=_passed(has_root),
                details="kenya_ai root key detected." if has_root else "Missing canonical schema root.",
            ),
            ComplianceCheck(
                id="forbidden_language",
                name="Forbidden Language Scan",
                status=_passed(not unsafe),
                details=(
                    "No unsafe assertions detected. Instructional boundaries are correctly defined."
                    if not unsafe
                    else f"Unsafe language detected (non-negated): {', '.join(unsafe)}"
                ),
            ),
            ComplianceCheck(
                id="feature_flag_safety",
                name="Feature Flag Safety Check",
                status=_passed(interrupt_on),
                details=(
                    "safety_interrupt is enabled via feature flag."
                    if interrupt_on
                    else "safety_interrupt must always be enabled"
                ),
            ),
        )
        overall = "valid" if all(c.status == "passed" for c in checks) else "blocked"
        return ComplianceReport(overall_status=overall, checks=checks)


def enforce(report: ComplianceReport, sink: Optional[EventSink] = None) -> None:
    """Raise ConfigurationBlockedError if report is blocked."""
    if report.overall_status == "valid":
        return
    failed = [c.model_dump() for c in report.failed_checks]
    logger.error("Deployment gate failed: %s", [c["id"] for c in failed])
    emit(sink, "deployment_gate_failed", {"details": failed})
    raise ConfigurationBlockedError(report=report)


class SafetyInterrupt:
    def __init__(self, sink: Optional[EventSink] = log_event, excerpt_chars: int = set.trigger_excerpt_chars):
        self.sink = sink
        self.excerpt_chars = excerpt_chars

    def scan(self, message: str, module: AIModule = AIModule.GENERAL) -> bool:
        lowered = message.lower()
        triggered = any(k in lowered for k in AGGRESSIVE_KEYWORDS)
        if triggered:
            sector = AIModule(module).value
            logger.warning("Safety interrupt triggered in %s", sector)
            emit(self.sink, "safety_interrupt_triggered", {
                "sector": sector,
                "severity_level": "High",
                "trigger_phrase": message[: self.excerpt_chars] + "...",
            })
        return triggered
