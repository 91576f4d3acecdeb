"""
Shared fixtures and step definitions for BDD tests.

- runner, mock_contacts, mock_settings, context: available to all scenario files here
- no_logging: autouse, prevents log file creation during tests
- 'the output contains' / 'the command fails' steps: shared across all feature files
"""

import pytest
from unittest.mock import patch
from click.testing import CliRunner
from pytest_bdd import then, parsers


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_contacts():
    with patch("partnerdb.cli.main.contact_store") as mock:
        yield mock


@pytest.fixture
def mock_settings():
    with patch("partnerdb.cli.main.settings_store") as mock:
        yield mock


@pytest.fixture
def context():
    """Mutable dict shared between Given/When/Then steps within a scenario."""
    return {}


@pytest.fixture(autouse=True)
def no_logging():
    with patch("partnerdb.cli.main.configure_logging"):
        yield


@then(parsers.parse('the output contains "{text}"'))
def output_contains(context, text):
    assert text in context["result"].output, (
        f"Expected {text!r} in output:\n{context['result'].output}"
    )


@then("the command fails")
def command_fails(context):
    assert context["result"].exit_code == 1, context["result"].output
