"""
Gateway Module - the remote approval authority behind an async port
"""

from sourcing_governance.gateway.base import (
    AwardDecision,
    ModificationReceipt,
    ProcurementGateway,
)
from sourcing_governance.gateway.http import HttpProcurementGateway
from sourcing_governance.gateway.memory import GatewayCall, InMemoryGateway

__all__ = [
    "ProcurementGateway",
    "ModificationReceipt",
    "AwardDecision",
    "HttpProcurementGateway",
    "InMemoryGateway",
    "GatewayCall",
]
