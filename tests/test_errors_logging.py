"""Tests for error handling and logging modules."""

import json
import logging

import pytest

from dictation_cleanup.errors import (
    ConfigurationError,
    DictationCleanupError,
    ErrorCategory,
    MalformedRuleError,
    PersistenceError,
    SampleIndexError,
    format_error_for_display,
)
from dictation_cleanup.logging import (
    ROOT_LOGGER_NAME,
    LogConfig,
    LogLevel,
    StructuredFormatter,
    configure_logging,
    enable_file_logging,
    get_logger,
    record_fields,
    set_verbosity,
)


@pytest.fixture
def reset_logging():
    """Restore default logging configuration after the test."""
    yield
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers:
        handler.close()
    configure_logging(LogConfig())


def make_record(msg="Test message", level=logging.INFO, name="test"):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestErrorCategory:
    """Tests for ErrorCategory enum."""

    def test_categories(self):
        """Test error category values."""
        assert ErrorCategory.VALIDATION.value == "validation"
        assert ErrorCategory.CONFIGURATION.value == "configuration"
        assert ErrorCategory.STORAGE.value == "storage"
        assert ErrorCategory.INTERNAL.value == "internal"


class TestDictationCleanupError:
    """Tests for DictationCleanupError base class."""

    def test_basic_error(self):
        """Test basic error creation."""
        error = DictationCleanupError("Test error")

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.context == {}
        assert error.recoverable is False
        assert error.category == ErrorCategory.INTERNAL

    def test_error_with_context(self):
        """Test error with context."""
        error = DictationCleanupError("Test error", context={"key": "value"})

        assert "context: {'key': 'value'}" in str(error)
        assert error.context == {"key": "value"}


class TestSpecificErrors:
    """Tests for specific error types."""

    def test_malformed_rule_error(self):
        """Malformed rules are skipped, so the error is recoverable."""
        error = MalformedRuleError("Empty phrase")

        assert error.category == ErrorCategory.VALIDATION
        assert error.recoverable is True

    def test_sample_index_error(self):
        """SampleIndexError carries the index and store size."""
        error = SampleIndexError(5, 2)

        assert error.index == 5
        assert error.size == 2
        assert error.context == {"index": 5, "size": 2}
        assert error.message == "Sample index 5 out of range"
        assert error.recoverable is False

    def test_sample_index_error_is_index_error(self):
        """SampleIndexError can be caught as a plain IndexError."""
        with pytest.raises(IndexError):
            raise SampleIndexError(0, 0)

    def test_persistence_error(self):
        """Test persistence error."""
        error = PersistenceError("Disk full")

        assert error.category == ErrorCategory.STORAGE
        assert error.recoverable is True

    def test_configuration_error(self):
        """Test configuration error."""
        error = ConfigurationError("Bad config")

        assert error.category == ErrorCategory.CONFIGURATION
        assert error.recoverable is False


class TestFormatErrorForDisplay:
    """Tests for format_error_for_display function."""

    def test_format_package_error(self):
        """Test formatting a package error."""
        error = ConfigurationError("Invalid settings")

        assert format_error_for_display(error) == "[configuration] Invalid settings"

    def test_format_with_context(self):
        """Test formatting includes context as key=value pairs."""
        error = SampleIndexError(3, 1)

        assert format_error_for_display(error) == "[validation] Sample index 3 out of range (index=3, size=1)"

    def test_format_standard_error(self):
        """Test formatting standard exception."""
        error = ValueError("Standard error")

        assert format_error_for_display(error) == "[error] ValueError: Standard error"


class TestLogLevel:
    """Tests for LogLevel enum."""

    def test_ordering(self):
        """Test levels are ordered by verbosity."""
        assert LogLevel.QUIET < LogLevel.NORMAL < LogLevel.VERBOSE < LogLevel.DEBUG


class TestLogConfig:
    """Tests for LogConfig."""

    def test_defaults(self):
        """Test default configuration."""
        config = LogConfig()

        assert config.level == LogLevel.NORMAL
        assert config.log_file is None
        assert config.json_format is False


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_text_format(self):
        """Test text lines carry level, module and message."""
        formatter = StructuredFormatter(include_timestamp=False)

        formatted = formatter.format(make_record(name="dictation_cleanup.correction.engine"))

        assert formatted == "INFO    correction.engine: Test message"

    def test_foreign_logger_name_kept(self):
        """Test names outside the package are shown in full."""
        formatter = StructuredFormatter(include_timestamp=False)

        assert "other.module: Test message" in formatter.format(make_record(name="other.module"))

    def test_fields_in_text(self):
        """Test fields passed through extra= follow the message."""
        formatter = StructuredFormatter(include_timestamp=False)
        record = make_record()
        record.position = 4
        record.correction = "clawed -> Claude"

        assert formatter.format(record).endswith("Test message position=4 correction=clawed -> Claude")

    def test_json_format(self):
        """Test JSON formatting."""
        formatter = StructuredFormatter(json_format=True, include_timestamp=False)

        parsed = json.loads(formatter.format(make_record(level=logging.WARNING)))

        assert parsed == {"level": "warning", "logger": "test", "message": "Test message"}

    def test_json_fields_stringify_unserializable_values(self):
        """Test field values JSON cannot encode are stored as strings."""
        formatter = StructuredFormatter(json_format=True, include_timestamp=False)
        record = make_record()
        record.errors = 3
        record.path = object()

        parsed = json.loads(formatter.format(record))

        assert parsed["fields"]["errors"] == 3
        assert isinstance(parsed["fields"]["path"], str)

    def test_json_timestamp(self):
        """Test file output carries a timestamp."""
        formatter = StructuredFormatter(json_format=True)

        assert "time" in json.loads(formatter.format(make_record()))


class TestRecordFields:
    """Tests for record_fields."""

    def test_only_extra_fields(self, caplog):
        """Test standard record attributes are excluded."""
        logger = get_logger("dictation_cleanup.test_fields")

        with caplog.at_level(logging.WARNING, logger=ROOT_LOGGER_NAME):
            logger.warning("Dictionary save failed", extra={"key": "user_dictionary"})

        assert record_fields(caplog.records[-1]) == {"key": "user_dictionary"}


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_verbose(self, reset_logging):
        """Test verbose configuration."""
        configure_logging(LogConfig(level=LogLevel.VERBOSE))

        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.INFO

    def test_quiet_only_errors(self, reset_logging):
        """Quiet mode logs errors only."""
        configure_logging(LogConfig(level=LogLevel.QUIET))

        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.ERROR


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger(self):
        """Test loggers are children of the package logger."""
        logger = get_logger("dictation_cleanup.test_module")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "dictation_cleanup.test_module"
        assert logger.parent is logging.getLogger(ROOT_LOGGER_NAME)


class TestSetVerbosity:
    """Tests for set_verbosity function."""

    def test_set_verbosity(self, reset_logging):
        """Test setting verbosity level."""
        set_verbosity(LogLevel.DEBUG)

        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG


class TestEnableFileLogging:
    """Tests for enable_file_logging function."""

    def test_enable_file_logging(self, tmp_path, reset_logging):
        """Test enabling file logging writes records to the file."""
        log_file = tmp_path / "logs" / "cleanup.log"
        enable_file_logging(log_file)

        logger = get_logger("dictation_cleanup.test_file")
        logger.warning("Written to file")

        root = logging.getLogger(ROOT_LOGGER_NAME)
        file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1

        file_handlers[0].flush()
        assert "Written to file" in log_file.read_text(encoding="utf-8")
