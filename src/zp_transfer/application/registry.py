"""In-process registry of live send-money workflows, one per signed-in user.

Workflow state is transient: it lives only while the user has the
send-money dialog open and is dropped on success, close or restart.
"""

import logging

from src.zp_common.errors import NoActiveTransferError
from src.zp_transfer.domain.workflow import TransferWorkflow

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    def __init__(self) -> None:
        self._workflows: dict[str, TransferWorkflow] = {}

    def open(self, user_id: str, workflow: TransferWorkflow) -> TransferWorkflow:
        """Register a new workflow, closing any previous one for this user."""
        self.close(user_id)
        self._workflows[user_id] = workflow
        return workflow

    def get(self, user_id: str) -> TransferWorkflow:
        workflow = self._workflows.get(user_id)
        if workflow is None or workflow.closed:
            self._workflows.pop(user_id, None)
            raise NoActiveTransferError()
        return workflow

    def close(self, user_id: str) -> None:
        workflow = self._workflows.pop(user_id, None)
        if workflow is not None:
            workflow.close()
            logger.debug("Closed transfer workflow for %s", user_id)

    def close_all(self) -> None:
        for user_id in list(self._workflows):
            self.close(user_id)

    def __len__(self) -> int:
        return len(self._workflows)


_registry = WorkflowRegistry()


def get_registry() -> WorkflowRegistry:
    return _registry
