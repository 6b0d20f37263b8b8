"""
Configuration models for copy runs.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_STAGE_PLACEHOLDER = "${stage}"
DEFAULT_MAX_CONCURRENCY = 25


class CopyConfig(BaseModel):
    """
    Parameters for a single copy run between two stages.
    """
    source_stage: str = Field(..., description="Stage to copy data from")
    target_stage: str = Field(..., description="Stage to copy data to")
    overwrite_all_data: bool = Field(False, description="Clear target tables before uploading")

    # Name resolution
    stage_placeholder: str = Field(DEFAULT_STAGE_PLACEHOLDER, description="Token replaced by the stage in table names")
    region: Optional[str] = Field(None, description="Region of the storage engine")

    # Throughput
    max_concurrency: int = Field(DEFAULT_MAX_CONCURRENCY, ge=1, description="Maximum simultaneous storage calls")
    scan_all_pages: bool = Field(True, description="Follow scan pagination instead of reading one page")

    @field_validator('source_stage', 'target_stage', 'stage_placeholder')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @model_validator(mode='after')
    def validate_distinct_stages(self) -> "CopyConfig":
        if self.source_stage == self.target_stage:
            raise ValueError(f"Source and target stage are both '{self.source_stage}'")
        return self


class DeployCopyConfig(BaseModel):
    """
    The ``copyDataDeploy`` block of a deployment file.

    Drives the automatic post-deploy copy.
    """
    model_config = ConfigDict(populate_by_name=True)

    source_stage: Optional[str] = Field(None, alias="sourceStage")
    target_stage: Optional[str] = Field(None, alias="targetStage")
    overwrite_all_data: bool = Field(False, alias="overwriteAllData")

    @field_validator('overwrite_all_data', mode='before')
    @classmethod
    def validate_overwrite(cls, v):
        # An empty YAML value means the flag was left out
        if v is None or v == "":
            return False
        return v

    def should_run(self, deployed_stage: str) -> bool:
        """Whether the copy is configured for the stage that was just deployed."""
        return bool(self.source_stage and self.target_stage and self.target_stage == deployed_stage)

    def to_copy_config(self, **overrides) -> CopyConfig:
        """Build the run configuration for this block."""
        return CopyConfig(
            source_stage=self.source_stage,
            target_stage=self.target_stage,
            overwrite_all_data=self.overwrite_all_data,
            **overrides
        )
