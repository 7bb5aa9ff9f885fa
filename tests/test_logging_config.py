"""Tests for logging setup and sensitive data masking."""

import logging

from common.logging_config import SensitiveDataFilter, setup_logging


def make_record(msg, args=()):
    return logging.LogRecord('uploader', logging.INFO, __file__, 1, msg, args, None)


def test_filter_masks_query_tokens_and_bearer():
    record = make_record("Upload started: a.ipa -> https://example.test/up?token=abc123&x=1 Bearer xyz")

    SensitiveDataFilter().filter(record)

    assert 'abc123' not in record.msg
    assert 'xyz' not in record.msg
    assert 'x=1' in record.msg


def test_filter_masks_arguments():
    record = make_record("calling %s", ('https://example.test/up?signature=s3cr3t',))

    SensitiveDataFilter().filter(record)

    assert record.getMessage() == 'calling https://example.test/up?signature=***MASKED***'


def test_setup_logging_writes_to_file(tmp_path):
    log_file = tmp_path / 'ipadrop.log'

    logger = setup_logging('test_component_file', log_level='INFO', log_file=str(log_file))
    logger.info("File server started")
    for handler in logger.handlers:
        handler.flush()

    assert 'test_component_file - INFO - File server started' in log_file.read_text()
    assert not logger.propagate

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
