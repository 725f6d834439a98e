"""Tests for failure classification and remediation guidance."""

from access_mcp_server.diagnostics import (
    CLASS_NOT_REGISTERED_HRESULT,
    EnvironmentFacts,
    diagnose_failure,
    is_provider_issue,
    is_trust_center_block,
    iter_exception_chain,
    process_bitness,
)

FACTS = EnvironmentFacts(process_bitness="64-bit", ace_oledb_provider_registered=False)


class HResultError(Exception):
    def __init__(self, message, hresult):
        super().__init__(message)
        self.hresult = hresult


class TestExceptionChain:
    """Tests for walking wrapped exceptions."""

    def test_follows_cause(self):
        """Should yield outer then inner exceptions."""
        inner = ValueError("inner")
        try:
            raise RuntimeError("outer") from inner
        except RuntimeError as e:
            chain = list(iter_exception_chain(e))

        assert [str(link) for link in chain] == ["outer", "inner"]

    def test_stops_on_cycles(self):
        """Should not loop forever on self-referencing chains."""
        error = ValueError("loop")
        error.__cause__ = error

        assert list(iter_exception_chain(error)) == [error]


class TestClassification:
    """Tests for the two known failure signatures."""

    def test_provider_missing_by_message(self):
        """Should detect the provider message."""
        error = RuntimeError("Provider cannot be found. It may not be properly installed.")

        assert is_provider_issue(error)
        assert not is_trust_center_block(error)

    def test_provider_missing_by_hresult(self):
        """Should detect REGDB_E_CLASSNOTREG, including negative HRESULTs."""
        assert is_provider_issue(HResultError("COM failure", CLASS_NOT_REGISTERED_HRESULT))
        assert is_provider_issue(HResultError("COM failure", CLASS_NOT_REGISTERED_HRESULT - 2**32))

    def test_provider_missing_in_inner_exception(self):
        """Should look through wrapping exceptions."""
        try:
            raise RuntimeError("connect failed") from OSError(
                "The 'Microsoft.ACE.OLEDB.12.0' provider is not registered on the local machine."
            )
        except RuntimeError as e:
            assert is_provider_issue(e)

    def test_trust_center_block(self):
        """Should detect active content blocks."""
        error = RuntimeError("The database is opened in Disabled Mode.")

        assert is_trust_center_block(error)
        assert not is_provider_issue(error)

    def test_ordinary_error(self):
        """Should flag nothing for unrelated failures."""
        error = RuntimeError("Table not found: Foo")

        assert not is_provider_issue(error)
        assert not is_trust_center_block(error)


class TestDiagnoseFailure:
    """Tests for the diagnosis and preflight block."""

    def test_plain_failure_keeps_message(self):
        """Should pass ordinary messages through untouched."""
        diagnosis = diagnose_failure(RuntimeError("Table not found: Foo"), FACTS)

        assert diagnosis.message == "Table not found: Foo"
        assert diagnosis.preflight == {
            "process_bitness": "64-bit",
            "ace_oledb_provider_registered": False,
            "ace_oledb_issue_detected": False,
            "trust_center_active_content_indicator": False,
            "remediation_hints": [],
        }

    def test_provider_failure_gets_hints(self):
        """Should prefix a summary and suggest the matching engine."""
        diagnosis = diagnose_failure(RuntimeError("Class not registered"), FACTS)

        assert diagnosis.ace_oledb_issue_detected
        assert diagnosis.message.endswith("Original error: Class not registered")
        assert any("x64" in hint for hint in diagnosis.remediation_hints)

    def test_trust_center_failure_gets_hints(self):
        """Should suggest trusted locations."""
        diagnosis = diagnose_failure(RuntimeError("blocked by your security settings"), FACTS)

        assert diagnosis.preflight["trust_center_active_content_indicator"] is True
        assert any("Trusted Locations" in hint for hint in diagnosis.remediation_hints)

    def test_empty_message_uses_type_name(self):
        """Should never produce an empty message."""
        assert diagnose_failure(KeyError(), FACTS).message == "KeyError"

    def test_process_bitness_format(self):
        """Should report the pointer width."""
        assert process_bitness() in ("32-bit", "64-bit")
