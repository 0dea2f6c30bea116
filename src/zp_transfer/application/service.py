"""TransferApplicationService: opens and drives per-user send-money workflows.

Thin composition layer between the HTTP router, the workflow registry and
the domain workflow. Every method returns the workflow so the router can
render a state snapshot, including after a failed action.
"""

from src.zp_account.application.service import AccountApplicationService
from src.zp_backend.domain.models import AuthUser
from src.zp_backend.domain.repository import BackendProtocol
from src.zp_transfer.application.registry import WorkflowRegistry
from src.zp_transfer.domain.workflow import TransferWorkflow


class TransferApplicationService:
    def __init__(self, registry: WorkflowRegistry, backend: BackendProtocol) -> None:
        self._registry = registry
        self._backend = backend
        self._accounts = AccountApplicationService(backend)

    async def open(self, user: AuthUser) -> TransferWorkflow:
        sender = await self._accounts.load_profile(user)

        async def refresh_sender() -> None:
            workflow.sender = await self._accounts.load_profile(user)

        workflow = TransferWorkflow(self._backend, sender, on_done=refresh_sender)
        return self._registry.open(user.id, workflow)

    def current(self, user: AuthUser) -> TransferWorkflow:
        return self._registry.get(user.id)

    async def done(self, user: AuthUser) -> TransferWorkflow:
        workflow = self._registry.get(user.id)
        await workflow.done()
        self._registry.close(user.id)
        return workflow

    def close(self, user: AuthUser) -> None:
        self._registry.close(user.id)
