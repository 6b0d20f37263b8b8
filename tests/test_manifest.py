"""Tests for loading deployment manifests."""

import pytest

from stackcopy.engine.enumerator import enumerate_tables
from stackcopy.exceptions import ConfigurationError
from stackcopy.services.manifest import DeploymentManifest

pytestmark = pytest.mark.unit

SERVERLESS_YML = """
service: shop
provider:
  name: aws
  region: eu-west-1
custom:
  stage: ${stage}
  copyDataDeploy:
    sourceStage: dev
    targetStage: prod
    overwriteAllData: true
resources:
  Resources:
    UsersTable:
      Type: AWS::DynamoDB::Table
      Properties:
        TableName: users-${stage}
        KeySchema:
          - AttributeName: id
            KeyType: HASH
    UsersTopic:
      Type: AWS::SNS::Topic
      Properties:
        TopicName: !Sub "users-${AWS::Region}"
        Tags: !GetAtt [UsersTable, Arn]
"""


@pytest.fixture
def manifest_path(tmp_path):
    path = tmp_path / "serverless.yml"
    path.write_text(SERVERLESS_YML)
    return path


def test_load(manifest_path):
    manifest = DeploymentManifest.load(manifest_path)

    assert manifest.region == "eu-west-1"
    assert manifest.stage_placeholder == "${stage}"
    assert enumerate_tables(manifest.resources) == ["users-${stage}"]
    assert manifest.resources["UsersTopic"]["Properties"]["TopicName"] == "users-${AWS::Region}"


def test_deploy_copy_config(manifest_path):
    deploy = DeploymentManifest.load(manifest_path).deploy_copy_config()

    assert deploy.source_stage == "dev"
    assert deploy.target_stage == "prod"
    assert deploy.overwrite_all_data is True


def test_missing_sections_have_defaults():
    manifest = DeploymentManifest({"service": "bare"})

    assert manifest.resources == {}
    assert manifest.region is None
    assert manifest.stage_placeholder == "${stage}"
    assert not manifest.deploy_copy_config().should_run("prod")


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="Cannot read"):
        DeploymentManifest.load(tmp_path / "nope.yml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "serverless.yml"
    path.write_text("resources: [unclosed")

    with pytest.raises(ConfigurationError, match="Invalid deployment manifest"):
        DeploymentManifest.load(path)


def test_not_a_mapping(tmp_path):
    path = tmp_path / "serverless.yml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigurationError, match="is not a mapping"):
        DeploymentManifest.load(path)
