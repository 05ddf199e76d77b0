"""
Stock Transfer Workflows.

State machine for the shipment / purchase receipt document lifecycle.
"""

from dataclasses import dataclass

from ledger_kernel.logging_config import get_logger

logger = get_logger("modules.stock_transfer.workflows")


@dataclass(frozen=True)
class Guard:
    """A condition for a transition."""
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None
    posts_entry: bool = False
    reconciles: bool = False


@dataclass(frozen=True)
class Workflow:
    """A state machine definition."""
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]


def find_transition(workflow: Workflow, from_state: str, action: str) -> Transition | None:
    """The transition for ``action`` out of ``from_state``, if any."""
    for transition in workflow.transitions:
        if transition.from_state == from_state and transition.action == action:
            return transition
    return None


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

POSTING_READY = Guard(
    name="posting_ready",
    description="Direction accounts exist and every line has a rate and quantity",
)


# -----------------------------------------------------------------------------
# Transfer Workflow
# -----------------------------------------------------------------------------

TRANSFER_WORKFLOW = Workflow(
    name="stock_transfer",
    description="Shipment or purchase receipt lifecycle",
    initial_state="draft",
    states=(
        "draft",
        "submitted",
        "cancelled",
        "discarded",
    ),
    transitions=(
        Transition("draft", "draft", action="edit"),
        Transition(
            "draft", "submitted", action="submit",
            guard=POSTING_READY, posts_entry=True, reconciles=True,
        ),
        Transition("draft", "discarded", action="discard"),
        Transition("submitted", "cancelled", action="cancel", reconciles=True),
    ),
)

logger.info(
    "stock_transfer_workflow_registered",
    extra={
        "workflow_name": TRANSFER_WORKFLOW.name,
        "state_count": len(TRANSFER_WORKFLOW.states),
        "transition_count": len(TRANSFER_WORKFLOW.transitions),
        "initial_state": TRANSFER_WORKFLOW.initial_state,
    },
)
