"""Tests for table discovery."""

import logging

import pytest

from stackcopy.engine.enumerator import enumerate_tables

from conftest import table_resource

pytestmark = pytest.mark.unit


def test_returns_only_table_resources():
    resources = {
        "UsersTable": table_resource("users-${stage}"),
        "Queue": {"Type": "AWS::SQS::Queue", "Properties": {"QueueName": "jobs-${stage}"}},
        "OrdersTable": table_resource("orders-${stage}"),
        "Role": {"Type": "AWS::IAM::Role"},
    }

    assert set(enumerate_tables(resources)) == {"users-${stage}", "orders-${stage}"}


def test_empty_manifest():
    assert enumerate_tables({}) == []
    assert enumerate_tables(None) == []


def test_duplicates_are_collapsed():
    resources = {"A": table_resource("t-${stage}"), "B": table_resource("t-${stage}")}

    assert enumerate_tables(resources) == ["t-${stage}"]


def test_table_without_name_is_skipped(caplog):
    resources = {
        "Generated": {"Type": "AWS::DynamoDB::Table", "Properties": {"BillingMode": "PAY_PER_REQUEST"}},
        "Named": table_resource("named-${stage}"),
    }

    with caplog.at_level(logging.WARNING):
        assert enumerate_tables(resources) == ["named-${stage}"]
    assert "Generated" in caplog.text
