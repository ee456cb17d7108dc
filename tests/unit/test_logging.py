"""Unit tests for logging helpers."""

import asyncio
import logging
import time

import pytest

from acmeflow._logging import (
    Timer,
    domain_context,
    get_domain_extra,
    get_logger,
)


class TestGetLogger:
    """Tests for get_logger."""

    def test_module_logger_is_child_of_package(self) -> None:
        """Module loggers propagate to the acmeflow logger."""
        logger = get_logger("acmeflow.issuance")

        assert logger.name == "acmeflow.issuance"
        assert logger.parent is logging.getLogger("acmeflow")

    def test_foreign_name_nested_under_package(self) -> None:
        """Names outside the namespace are placed under it."""
        assert get_logger("plugins.dns").name == "acmeflow.plugins.dns"
        assert get_logger("acmeflow").name == "acmeflow"

    def test_package_logger_has_null_handler(self) -> None:
        """The package logger carries a NullHandler."""
        handlers = logging.getLogger("acmeflow").handlers

        assert any(isinstance(h, logging.NullHandler) for h in handlers)

    def test_silent_without_configuration(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Nothing reaches stdout or stderr unless the application configures logging."""
        get_logger("acmeflow.observer").info("Selected challenge")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""


class TestTimer:
    """Tests for Timer."""

    def test_measures_milliseconds(self) -> None:
        with Timer() as timer:
            time.sleep(0.01)

        assert 9 <= timer.elapsed_ms < 1000

    def test_zero_before_exit(self) -> None:
        assert Timer().elapsed_ms == 0


class TestDomainExtra:
    """Tests for the domain logging context."""

    def test_empty_without_context(self) -> None:
        assert get_domain_extra() == {}

    def test_single_domain(self) -> None:
        """One domain is reported under 'domain'."""
        with domain_context(["example.com"]):
            assert get_domain_extra() == {"domain": "example.com"}

    def test_multiple_domains(self) -> None:
        """Several domains are reported under 'domains'."""
        with domain_context(["a.com", "b.com"]):
            assert get_domain_extra() == {"domains": ["a.com", "b.com"]}

    def test_empty_domains_clear(self) -> None:
        """An empty context hides the outer domains."""
        with domain_context(["a.com"]):
            with domain_context([]):
                assert get_domain_extra() == {}

    def test_accepts_any_iterable(self) -> None:
        """The domains are copied, later changes to the source do not leak in."""
        domains = ["a.com", "b.com"]
        with domain_context(iter(domains)):
            domains.append("c.com")
            assert get_domain_extra() == {"domains": ["a.com", "b.com"]}

    def test_domain_context_nests(self) -> None:
        """An inner block overrides the outer one until it exits."""
        with domain_context(["a.com", "b.com"]):
            with domain_context(["a.com"]):
                assert get_domain_extra() == {"domain": "a.com"}
            assert get_domain_extra() == {"domains": ["a.com", "b.com"]}

        assert get_domain_extra() == {}

    def test_domain_context_resets_on_error(self) -> None:
        """The previous context is restored when the block raises."""
        with pytest.raises(RuntimeError):
            with domain_context(["a.com"]):
                raise RuntimeError("boom")

        assert get_domain_extra() == {}

    @pytest.mark.asyncio
    async def test_tasks_have_separate_context(self) -> None:
        """Concurrent tasks each see only their own domain."""
        seen: dict[str, dict] = {}

        async def work(domain: str) -> None:
            with domain_context([domain]):
                await asyncio.sleep(0)
                seen[domain] = get_domain_extra()

        with domain_context(["a.com", "b.com"]):
            await asyncio.gather(work("a.com"), work("b.com"))
            assert get_domain_extra() == {"domains": ["a.com", "b.com"]}

        assert seen == {"a.com": {"domain": "a.com"}, "b.com": {"domain": "b.com"}}

    def test_extra_reaches_log_record(self, log_capture) -> None:
        """Domain fields merge with other extra fields on the record."""
        logger = get_logger("acmeflow.test")
        with domain_context(["merge.example.com"]):
            logger.info("Creating record", extra={"challenge_type": "dns-01", **get_domain_extra()})

        records = log_capture.get_records(logging.INFO)
        assert len(records) == 1
        assert records[0].domain == "merge.example.com"
        assert records[0].challenge_type == "dns-01"


class TestLogCapture:
    """Tests for the log_capture fixture."""

    def test_filter_by_level(self, log_capture) -> None:
        logger = get_logger("acmeflow.test")
        logger.debug("Debug message")
        logger.warning("Warning message")

        assert log_capture.get_messages(logging.WARNING) == ["Warning message"]
        assert "Debug message" in log_capture.get_messages(logging.DEBUG)

    def test_filter_by_logger_name(self, log_capture) -> None:
        """Filtering by name includes child loggers only."""
        get_logger("acmeflow.issuance").info("Placing order")
        get_logger("acmeflow.challenges.dns01").info("Checking TXT")

        assert log_capture.get_messages(name="acmeflow.challenges") == ["Checking TXT"]
        assert log_capture.get_messages(name="acmeflow.issuance") == ["Placing order"]

    def test_clear(self, log_capture) -> None:
        get_logger("acmeflow.test").info("Message")
        log_capture.clear()

        assert log_capture.records == []
