from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CloudProvider(str, Enum):
    AWS = "AWS"
    GCP = "GCP"
    AZURE = "Azure"


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python, immutable once built."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class GenerationRequest(_WireModel):
    problem_description: str = Field(description="Free-text infrastructure problem")
    provider: CloudProvider

    @field_validator("problem_description")
    @classmethod
    def _strip_and_require(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("problemDescription must not be empty")
        return value


class TechStackItem(_WireModel):
    category: str = Field(description="e.g., Compute, Database, Networking")
    services: List[str] = Field(min_length=1)
    justification: str = Field(description="Why this service was chosen")


class NetworkingPlan(_WireModel):
    vpc_design: str
    subnets: str
    connectivity: str
    security_groups: str


class ReliabilityPlan(_WireModel):
    load_balancing: str
    failover_strategy: str
    disaster_recovery: str
    backup_plan: str


class CloudSolution(_WireModel):
    title: str
    summary: str
    provider: CloudProvider
    mermaid_diagram: str
    tech_stack: List[TechStackItem]
    networking: NetworkingPlan
    reliability: ReliabilityPlan
    walkthrough: List[str]


class RenderRequest(_WireModel):
    chart: str
