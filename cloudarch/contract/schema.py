"""
Structural contract of a CloudSolution.

CLOUD_SOLUTION_SCHEMA is the one descriptor shared by every generation
backend (to constrain decoding server-side) and by the response decoder
(to check what came back). Backends receive a projection of it in their
own dialect; nobody keeps a second copy.
"""

import copy
from typing import Any, Dict, List

from cloudarch.schemas import CloudProvider


PROVIDERS = [p.value for p in CloudProvider]

_STRING = {"type": "string"}

CLOUD_SOLUTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "description": "A professional title for the architecture",
        },
        "summary": {
            "type": "string",
            "description": "A high-level executive summary",
        },
        "provider": {
            "type": "string",
            "enum": PROVIDERS,
        },
        "mermaidDiagram": {
            "type": "string",
            "description": "Valid Mermaid.js flowchart code. Do not include markdown backticks.",
        },
        "techStack": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "category": {
                        "type": "string",
                        "description": "e.g., Compute, Database, Networking",
                    },
                    "services": {"type": "array", "items": dict(_STRING), "minItems": 1},
                    "justification": {
                        "type": "string",
                        "description": "Why this service was chosen",
                    },
                },
                "required": ["category", "services", "justification"],
            },
        },
        "networking": {
            "type": "object",
            "properties": {
                "vpcDesign": {"type": "string", "description": "CIDR blocks, VPC/VNet structure"},
                "subnets": {"type": "string", "description": "Public vs Private subnets strategy"},
                "connectivity": {
                    "type": "string",
                    "description": "VPN, Direct Connect/ExpressRoute, Interconnect, etc.",
                },
                "securityGroups": {
                    "type": "string",
                    "description": "Firewall rules, NSGs, Security Groups",
                },
            },
            "required": ["vpcDesign", "subnets", "connectivity", "securityGroups"],
        },
        "reliability": {
            "type": "object",
            "properties": {
                "loadBalancing": {
                    "type": "string",
                    "description": "ALB/NLB, App Gateway, or HTTP(S) LB details",
                },
                "failoverStrategy": {
                    "type": "string",
                    "description": "How automatic failover is handled",
                },
                "disasterRecovery": {
                    "type": "string",
                    "description": "RTO/RPO targets and strategy",
                },
                "backupPlan": {"type": "string", "description": "Backup frequency and retention"},
            },
            "required": ["loadBalancing", "failoverStrategy", "disasterRecovery", "backupPlan"],
        },
        "walkthrough": {
            "type": "array",
            "items": dict(_STRING),
            "description": "Step-by-step data flow or user journey through the system",
        },
    },
    "required": [
        "title",
        "summary",
        "provider",
        "mermaidDiagram",
        "techStack",
        "networking",
        "reliability",
        "walkthrough",
    ],
}


# ------------------------------------------------
# Dialect projections
# ------------------------------------------------

_GEMINI_KEYS = {"type", "properties", "items", "enum", "required", "description", "minItems"}


def to_gemini_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Gemini responseSchema dialect: OpenAPI subset with upper-case type
    names. Keywords Gemini does not understand are dropped.
    """
    out: Dict[str, Any] = {}
    for key, value in schema.items():
        if key not in _GEMINI_KEYS:
            continue
        if key == "type":
            out[key] = value.upper()
        elif key == "properties":
            out[key] = {name: to_gemini_schema(sub) for name, sub in value.items()}
        elif key == "items":
            out[key] = to_gemini_schema(value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def to_json_schema(schema: Dict[str, Any], strict: bool = True) -> Dict[str, Any]:
    """
    Plain JSON Schema for OpenAI-compatible `response_format`.
    Strict mode requires closed objects.
    """
    out = copy.deepcopy(schema)

    def _close(node: Dict[str, Any]) -> None:
        if node.get("type") == "object":
            node["additionalProperties"] = False
            for sub in node.get("properties", {}).values():
                _close(sub)
        elif node.get("type") == "array" and isinstance(node.get("items"), dict):
            _close(node["items"])

    if strict:
        _close(out)
    return out


# ------------------------------------------------
# Conformance check
# ------------------------------------------------

_PY_TYPES = {
    "string": str,
    "object": dict,
    "array": list,
    "boolean": bool,
    "integer": int,
    "number": (int, float),
}


def check_conformance(data: Any, schema: Dict[str, Any], path: str = "") -> List[str]:
    """
    Walk `data` against `schema` and return every violation found,
    each prefixed with its dotted path. Empty list means conformant.
    """
    where = path or "<root>"
    expected = schema.get("type")

    if data is None:
        return [f"{where}: must not be null"]

    py_type = _PY_TYPES.get(expected)
    # bool is an int subclass; never accept it for numeric fields
    if py_type is not None and (
        not isinstance(data, py_type)
        or (expected in ("integer", "number") and isinstance(data, bool))
    ):
        return [f"{where}: expected {expected}, got {type(data).__name__}"]

    violations: List[str] = []

    if "enum" in schema and data not in schema["enum"]:
        violations.append(f"{where}: {data!r} is not one of {schema['enum']}")

    if expected == "object":
        properties = schema.get("properties", {})
        for name in schema.get("required", []):
            if name not in data:
                violations.append(f"{_join(path, name)}: required field missing")
        for name, sub in properties.items():
            if name in data:
                violations.extend(check_conformance(data[name], sub, _join(path, name)))

    elif expected == "array":
        if len(data) < schema.get("minItems", 0):
            violations.append(f"{where}: expected at least {schema['minItems']} item(s), got {len(data)}")
        for index, item in enumerate(data if "items" in schema else []):
            violations.extend(check_conformance(item, schema["items"], f"{where}[{index}]"))

    return violations


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name
