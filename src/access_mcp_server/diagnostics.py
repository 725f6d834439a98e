"""Remediation diagnostics for database failures.

Turns exceptions raised by the database backend into an actionable error
message plus a structured ``preflight`` block. Two problems account for most
failures on Windows hosts: the ACE OLE DB provider missing for the process
bitness, and the Access Trust Center blocking active content.
"""

from __future__ import annotations

import struct
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

ACE_PROVIDER = "Microsoft.ACE.OLEDB.12.0"

# REGDB_E_CLASSNOTREG
CLASS_NOT_REGISTERED_HRESULT = 0x80040154

PROVIDER_MISSING_PHRASES = (
    "provider cannot be found",
    "class not registered",
)

TRUST_CENTER_PHRASES = (
    "disabled mode",
    "active content",
    "trust center",
    "blocked by your security settings",
    "macros in this project are disabled",
    "not a trusted location",
    "this content has been blocked",
    "programmatic access to visual basic project is not trusted",
)


def process_bitness() -> str:
    """Return the pointer width of the running interpreter, e.g. "64-bit"."""
    return f"{struct.calcsize('P') * 8}-bit"


def probe_ace_provider() -> bool:
    """Check whether the ACE OLE DB provider is registered for this process.

    Only meaningful on Windows; the registry view follows the process
    bitness. Always False elsewhere.
    """
    if sys.platform != "win32":
        return False

    import winreg

    try:
        with winreg.OpenKey(winreg.HKEY_CLASSES_ROOT, f"{ACE_PROVIDER}\\CLSID"):
            return True
    except OSError:
        return False


@dataclass(frozen=True)
class EnvironmentFacts:
    """Failure-independent facts gathered once at startup."""

    process_bitness: str
    ace_oledb_provider_registered: bool


def probe_environment() -> EnvironmentFacts:
    """Collect the boot-time environment facts."""
    return EnvironmentFacts(
        process_bitness=process_bitness(),
        ace_oledb_provider_registered=probe_ace_provider(),
    )


@dataclass
class Diagnosis:
    """Result of classifying one failure."""

    message: str
    ace_oledb_issue_detected: bool
    trust_center_active_content_indicator: bool
    remediation_hints: list[str] = field(default_factory=list)
    facts: EnvironmentFacts | None = None

    @property
    def preflight(self) -> dict[str, Any]:
        """Structured facts attached to the failed tool result."""
        facts = self.facts or probe_environment()
        return {
            "process_bitness": facts.process_bitness,
            "ace_oledb_provider_registered": facts.ace_oledb_provider_registered,
            "ace_oledb_issue_detected": self.ace_oledb_issue_detected,
            "trust_center_active_content_indicator": self.trust_center_active_content_indicator,
            "remediation_hints": list(self.remediation_hints),
        }


def iter_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield an exception followed by its causes, outermost first.

    Follows ``__cause__``, falling back to ``__context__``; stops on cycles.
    """
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _error_code(exc: BaseException) -> int | None:
    code = getattr(exc, "hresult", None)
    if code is None and exc.args and isinstance(exc.args[0], int):
        code = exc.args[0]
    if isinstance(code, int) and not isinstance(code, bool):
        return code & 0xFFFFFFFF
    return None


def _message(exc: BaseException) -> str:
    return str(exc).lower()


def is_provider_issue(exc: BaseException) -> bool:
    """Check the chain for the "ACE provider not registered" signature."""
    for link in iter_exception_chain(exc):
        if _error_code(link) == CLASS_NOT_REGISTERED_HRESULT:
            return True
        message = _message(link)
        if "microsoft.ace.oledb" in message and "not registered" in message:
            return True
        if any(phrase in message for phrase in PROVIDER_MISSING_PHRASES):
            return True
    return False


def is_trust_center_block(exc: BaseException) -> bool:
    """Check the chain for a Trust Center / active content block."""
    for link in iter_exception_chain(exc):
        message = _message(link)
        if any(phrase in message for phrase in TRUST_CENTER_PHRASES):
            return True
    return False


def _provider_hints(bitness: str) -> list[str]:
    architecture = "x64" if bitness == "64-bit" else "x86"
    return [
        f"Install the Microsoft Access Database Engine ({ACE_PROVIDER}) redistributable "
        f"for {architecture}; it must match this {bitness} server process.",
        "If Office is installed with the other bitness, run the server with an interpreter "
        "of that bitness instead, or install the matching engine with /quiet.",
    ]


def _trust_center_hints() -> list[str]:
    return [
        "Add the database folder to Access Trust Center > Trusted Locations.",
        "If the file was downloaded or received by email, open its Properties and "
        "select Unblock, then reconnect.",
    ]


def diagnose_failure(exc: BaseException, facts: EnvironmentFacts | None = None) -> Diagnosis:
    """Classify a backend failure and build remediation guidance.

    Args:
        exc: The raised exception, possibly wrapping others.
        facts: Boot-time environment facts (probed now if omitted).

    Returns:
        Diagnosis with the user-facing message and preflight data.
    """
    facts = facts or probe_environment()
    original = str(exc) or type(exc).__name__

    provider_issue = is_provider_issue(exc)
    trust_block = is_trust_center_block(exc)

    hints: list[str] = []
    summaries: list[str] = []
    if provider_issue:
        hints.extend(_provider_hints(facts.process_bitness))
        summaries.append(
            f"The {ACE_PROVIDER} provider is not registered for this "
            f"{facts.process_bitness} process; install the matching Access Database Engine."
        )
    if trust_block:
        hints.extend(_trust_center_hints())
        summaries.append(
            "Access blocked active content for this database; trust its folder in the "
            "Trust Center or unblock the file."
        )

    message = original
    if summaries:
        message = " ".join(summaries) + f" Original error: {original}"

    return Diagnosis(
        message=message,
        ace_oledb_issue_detected=provider_issue,
        trust_center_active_content_indicator=trust_block,
        remediation_hints=hints,
        facts=facts,
    )
