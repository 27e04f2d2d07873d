"""
Sourcing Governance - lifecycle and award governance for sourcing events

Keeps RFQ/BRFQ events on a strict lifecycle, lets operators pause a live
event to fix it without losing track of what changed, and decides when a
proposed award needs escalated approval.

Fun fact: Sealed-bid procurement was written into English law in the 1600s
to stop naval contracts going to whoever knew the Admiral best!
"""

from sourcing_governance.governance import SourcingGovernance

__version__ = "0.1.0"
__all__ = ["SourcingGovernance", "__version__"]
