from __future__ import annotations

import logging

from stayhub.application.dto.session import ReconciliationResult
from stayhub.application.ports.identity_gateway_port import IdentityGatewayPort
from stayhub.application.ports.pending_role_store_port import PendingRoleStorePort
from stayhub.application.ports.profile_repository_port import ProfileRepositoryPort
from stayhub.domain.exceptions import InvalidRoleError

from .auth_common import ensure_role


logger = logging.getLogger(__name__)


class ReconcileRoleUseCase:
    """Assigns the role picked before an OAuth redirect to the signed-in user.

    The pending marker is consumed whenever it exists. A marker that is not a
    known role is dropped without writing anything. A stored role is never
    overwritten: when the conditional write changes no row the outcome is
    ``skipped`` and the gateway attributes are left alone. The profile row is
    the record of truth; mirroring the role into the gateway attribute bag is
    secondary and its failure only shows up in ``ReconciliationResult.error``.
    Nothing here raises.
    """

    def __init__(
        self,
        *,
        gateway: IdentityGatewayPort,
        profile_port: ProfileRepositoryPort,
        pending_role_store: PendingRoleStorePort,
    ):
        self._gateway = gateway
        self._profile_port = profile_port
        self._pending_role_store = pending_role_store

    def execute(self, *, user_id: str) -> ReconciliationResult:
        pending_role = self._pending_role_store.get()
        if not pending_role:
            return ReconciliationResult(outcome="no_marker")

        try:
            role = ensure_role(pending_role)
            existing_role = self._profile_port.get_role(user_id=user_id)
            if existing_role:
                logger.info(
                    "reconcile_role: skipped user_id=%s existing_role=%s pending_role=%s",
                    user_id,
                    existing_role,
                    role,
                )
                return ReconciliationResult(outcome="skipped", role=existing_role)

            if not self._profile_port.set_role(user_id=user_id, role=role):
                stored_role = self._profile_port.get_role(user_id=user_id)
                logger.info(
                    "reconcile_role: skipped user_id=%s reason=no_row_updated stored_role=%s",
                    user_id,
                    stored_role,
                )
                return ReconciliationResult(outcome="skipped", role=stored_role)
        except InvalidRoleError as exc:
            logger.warning("reconcile_role: invalid_marker user_id=%s error=%s", user_id, exc)
            return ReconciliationResult(outcome="failed", error=str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.error("reconcile_role: failed user_id=%s error=%s", user_id, exc)
            return ReconciliationResult(outcome="failed", role=pending_role, error=str(exc))
        finally:
            self._pending_role_store.remove()

        try:
            self._gateway.update_user_attributes(data={"role": role})
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "reconcile_role: attribute_sync_failed user_id=%s role=%s error=%s",
                user_id,
                role,
                exc,
            )
            return ReconciliationResult(outcome="committed", role=role, error=str(exc))

        logger.info("reconcile_role: committed user_id=%s role=%s", user_id, role)
        return ReconciliationResult(outcome="committed", role=role)
