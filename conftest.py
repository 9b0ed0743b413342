import copy
import json

import pytest

from cloudarch.inference.base import GenerationBackend
from cloudarch.renderer.compiler import MermaidCompiler


ECOMMERCE_DIAGRAM = """flowchart TB
    users((Shoppers)) --> r53[Route 53]
    r53 --> cf[CloudFront CDN]
    subgraph primary[us-east-1 Primary Region]
        subgraph vpc1[VPC 10.0.0.0/16]
            alb1[Application Load Balancer]
            subgraph az1[AZ us-east-1a]
                ecs1[ECS Fargate Tasks]
            end
            subgraph az2[AZ us-east-1b]
                ecs2[ECS Fargate Tasks]
            end
            aurora1[(Aurora PostgreSQL Writer)]
        end
    end
    subgraph dr[us-west-2 DR Region]
        alb2[Standby ALB]
        aurora2[(Aurora Global Replica)]
    end
    cf --> alb1
    alb1 --> ecs1 & ecs2
    ecs1 & ecs2 --> aurora1
    aurora1 -.->|Global DB replication| aurora2
    r53 -. failover .-> alb2
    alb2 --> aurora2
"""


SAMPLE_SOLUTION = {
    "title": "Multi-Region E-Commerce Platform on AWS",
    "summary": "Active/passive deployment across us-east-1 and us-west-2 with Aurora Global Database.",
    "provider": "AWS",
    "mermaidDiagram": ECOMMERCE_DIAGRAM,
    "techStack": [
        {
            "category": "Compute",
            "services": ["Amazon ECS", "AWS Fargate"],
            "justification": "Serverless containers remove node management.",
        },
        {
            "category": "Database",
            "services": ["Amazon Aurora PostgreSQL", "Aurora Global Database"],
            "justification": "Cross-region replication with sub-second lag.",
        },
    ],
    "networking": {
        "vpcDesign": "10.0.0.0/16 in us-east-1, 10.1.0.0/16 in us-west-2",
        "subnets": "Public subnets for ALB, private subnets for tasks and data",
        "connectivity": "Transit Gateway inter-region peering",
        "securityGroups": "ALB accepts 443 only; tasks accept traffic from ALB only",
    },
    "reliability": {
        "loadBalancing": "Layer 7 Application Load Balancer with path routing",
        "failoverStrategy": "Route 53 health checks fail over to the standby region",
        "disasterRecovery": "Multi-Region warm standby, RTO 15 min, RPO 1 s",
        "backupPlan": "Daily snapshots retained for 35 days",
    },
    "walkthrough": [
        "Shoppers resolve the storefront through Route 53.",
        "CloudFront serves static assets and forwards API calls to the ALB.",
        "ECS tasks read and write orders in Aurora.",
    ],
}


class FakeBackend(GenerationBackend):
    """Returns canned text (or raises) and records every call."""

    model = "fake-model"

    def __init__(self, text=None, exc=None):
        self.text = text
        self.exc = exc
        self.calls = []

    async def complete(self, prompt, schema):
        self.calls.append((prompt, schema))
        if self.exc is not None:
            raise self.exc
        return self.text


class FakeCompiler(MermaidCompiler):
    """Stands in for mermaid-cli: returns a minimal SVG, or raises `error`."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def compile(self, chart, *, render_id, theme):
        self.calls.append((chart, render_id, theme))
        if self.error is not None:
            raise self.error
        return f'<svg id="{render_id}" xmlns="http://www.w3.org/2000/svg"><style>#{render_id}{{font-family:{theme.font_family}}}</style></svg>'


@pytest.fixture
def sample_solution():
    return copy.deepcopy(SAMPLE_SOLUTION)


@pytest.fixture
def sample_json(sample_solution):
    return json.dumps(sample_solution)


@pytest.fixture
def ecommerce_diagram():
    return ECOMMERCE_DIAGRAM


@pytest.fixture
def fake_backend():
    return FakeBackend


@pytest.fixture
def fake_compiler():
    return FakeCompiler
