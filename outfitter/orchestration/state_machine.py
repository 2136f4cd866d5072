"""Canonical state transition helpers for contract lifecycle entities."""

from __future__ import annotations

from outfitter.models.enums import ContractStatus


class InvalidTransitionError(ValueError):
    """Raised when a disallowed state transition is attempted."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Transition not allowed: {current} -> {target}")
        self.current = current
        self.target = target


class StateMachine:
    """Table-driven state machine; states absent from the table are terminal."""

    def __init__(self, transitions: dict[str, set[str]]) -> None:
        self._transitions = transitions

    def can_transition(self, current: str, target: str) -> bool:
        return target in self._transitions.get(current, set())

    def assert_transition(self, current: str, target: str) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(current, target)

    def allowed_targets(self, current: str) -> set[str]:
        return set(self._transitions.get(current, set()))

    def is_terminal(self, current: str) -> bool:
        return not self._transitions.get(current)


_S = ContractStatus

CONTRACT_TRANSITIONS: dict[str, set[str]] = {
    _S.DRAFT.value: {_S.PENDING_CLIENT_COMPLETION.value, _S.CANCELLED.value},
    _S.PENDING_CLIENT_COMPLETION.value: {_S.PENDING_ADMIN_REVIEW.value, _S.CANCELLED.value},
    _S.PENDING_ADMIN_REVIEW.value: {
        _S.READY_FOR_SIGNATURE.value,
        _S.PENDING_CLIENT_COMPLETION.value,
        _S.CANCELLED.value,
    },
    _S.READY_FOR_SIGNATURE.value: {
        _S.SENT_TO_DOCUSIGN.value,
        _S.CLIENT_SIGNED.value,
        _S.ADMIN_SIGNED.value,
        _S.CANCELLED.value,
    },
    _S.SENT_TO_DOCUSIGN.value: {
        _S.CLIENT_SIGNED.value,
        _S.ADMIN_SIGNED.value,
        _S.FULLY_EXECUTED.value,
        _S.CANCELLED.value,
    },
    _S.CLIENT_SIGNED.value: {_S.FULLY_EXECUTED.value, _S.CANCELLED.value},
    _S.ADMIN_SIGNED.value: {_S.FULLY_EXECUTED.value, _S.CANCELLED.value},
}

contract_state_machine = StateMachine(CONTRACT_TRANSITIONS)

SIGNABLE_STATUSES: frozenset[str] = frozenset(
    {
        _S.READY_FOR_SIGNATURE.value,
        _S.SENT_TO_DOCUSIGN.value,
        _S.CLIENT_SIGNED.value,
        _S.ADMIN_SIGNED.value,
    }
)
