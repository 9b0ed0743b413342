from cloudarch.schemas import GenerationRequest


ARCHITECT_PROMPT = """
You are a Senior Principal Cloud Architect.
Design a comprehensive cloud solution for the following problem on {provider}.

Problem Description:
"{problem_description}"

Requirements:
1. Create a detailed Mermaid.js flowchart diagram code representing the architecture. Use strict flowchart direction TB (Top to Bottom) or LR (Left to Right). Include subgraphs for VPCs/VNets, Regions, or Availability Zones to show isolation.
2. Focus heavily on networking constraints: internal routing, private IPs, peering (VPC/VNet Peering), Hub-and-Spoke topologies, Transit Gateways (AWS), or Virtual WAN (Azure), and secure ingress/egress.
3. Detail the Load Balancing strategy (Layer 4 vs Layer 7).
4. Define a Failover and Disaster Recovery (DR) plan (e.g., Multi-AZ, Multi-Region, Pilot Light, Warm Standby).
5. List the exact Technology Stack.
6. Provide a step-by-step solution walkthrough.

Output must be valid JSON following the defined schema.
"""


def build_prompt(request: GenerationRequest) -> str:
    return ARCHITECT_PROMPT.format(
        provider=request.provider.value,
        problem_description=request.problem_description,
    )
