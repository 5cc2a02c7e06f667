"""Persona catalog: the step types a quote workflow can be built from."""

from __future__ import annotations

from typing import Dict, List, Optional

from .contracts import Persona

UNASSIGNED = "Unassigned"

# Canonical role for each persona id. Kept separate from the catalog so the
# lookup also answers for persona ids registered without a default.
DEFAULT_ASSIGNEES: Dict[str, str] = {
    "configuration": "Account Executive",
    "pricing": "Finance Team",
    "quoting": "Deal Desk",
    "contract-creation": "Legal Team",
    "contract-negotiation": "Chief Revenue Officer",
    "contract-execution": "Customer",
    "order-fulfillment": "Operations Team",
    "billing": "Billing Team",
    "revenue": "Finance Team",
    "renewal": "Account Executive",
}

CATALOG: List[Persona] = [
    Persona(
        id="configuration",
        name="Configuration",
        description="Configure products and bundles for the deal",
        icon="fas fa-cogs",
        color="#6366f1",
        default_assignee=DEFAULT_ASSIGNEES["configuration"],
    ),
    Persona(
        id="pricing",
        name="Pricing",
        description="Review list prices, discounts and margins",
        icon="fas fa-dollar-sign",
        color="#10b981",
        default_assignee=DEFAULT_ASSIGNEES["pricing"],
    ),
    Persona(
        id="quoting",
        name="Quoting",
        description="Assemble and review the customer-facing quote",
        icon="fas fa-file-invoice",
        color="#f59e0b",
        default_assignee=DEFAULT_ASSIGNEES["quoting"],
    ),
    Persona(
        id="contract-creation",
        name="Contract Creation",
        description="Draft the contract from the approved quote",
        icon="fas fa-file-signature",
        color="#3b82f6",
        default_assignee=DEFAULT_ASSIGNEES["contract-creation"],
    ),
    Persona(
        id="contract-negotiation",
        name="Contract Negotiation",
        description="Negotiate terms and redlines with the customer",
        icon="fas fa-handshake",
        color="#ef4444",
        default_assignee=DEFAULT_ASSIGNEES["contract-negotiation"],
    ),
    Persona(
        id="contract-execution",
        name="Contract Execution",
        description="Collect signatures and countersign",
        icon="fas fa-pen-nib",
        color="#8b5cf6",
        default_assignee=DEFAULT_ASSIGNEES["contract-execution"],
    ),
    Persona(
        id="order-fulfillment",
        name="Order Fulfillment",
        description="Provision and deliver the ordered products",
        icon="fas fa-truck",
        color="#14b8a6",
        default_assignee=DEFAULT_ASSIGNEES["order-fulfillment"],
    ),
    Persona(
        id="billing",
        name="Billing",
        description="Issue invoices and set up payment schedules",
        icon="fas fa-receipt",
        color="#f97316",
        default_assignee=DEFAULT_ASSIGNEES["billing"],
    ),
    Persona(
        id="revenue",
        name="Revenue Recognition",
        description="Recognise revenue against delivery milestones",
        icon="fas fa-chart-line",
        color="#22c55e",
        default_assignee=DEFAULT_ASSIGNEES["revenue"],
    ),
    Persona(
        id="renewal",
        name="Renewal",
        description="Plan the renewal ahead of contract end",
        icon="fas fa-sync-alt",
        color="#0ea5e9",
        default_assignee=DEFAULT_ASSIGNEES["renewal"],
    ),
]


def default_assignee(persona_id: str) -> str:
    """Return the canonical assignee for ``persona_id``.

    Unknown ids resolve to ``"Unassigned"``.
    """

    return DEFAULT_ASSIGNEES.get(persona_id, UNASSIGNED)


def get_persona(persona_id: str) -> Optional[Persona]:
    """Look up a catalog persona by id."""
    return next((p for p in CATALOG if p.id == persona_id), None)


def list_personas() -> List[Persona]:
    return list(CATALOG)


__all__ = [
    "CATALOG",
    "DEFAULT_ASSIGNEES",
    "UNASSIGNED",
    "default_assignee",
    "get_persona",
    "list_personas",
]
