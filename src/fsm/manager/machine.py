"""
Máquina de estados (TransactionStateMachine) de uma transação MMS.

Controla transições, guarda o locator de resultado e mantém
histórico rastreável. Uma instância pertence a uma única transação;
leitores externos consomem apenas o snapshot imutável (status).
"""

from typing import Any

from fsm.rules.guards import GuardResult, evaluate_guards
from fsm.states.transaction import (
    DEFAULT_INITIAL_STATE,
    TransactionState,
    is_terminal,
)
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransactionStatus, TransitionResult


class TransactionStateMachine:
    """
    Máquina de estados de uma transação.

    Attributes:
        current_state: Estado atual da máquina
        content_uri: Locator de resultado vigente
        history: Histórico de transições realizadas
    """

    __slots__ = ("_history", "_status", "_transaction_id")

    def __init__(self, transaction_id: str = "") -> None:
        """
        Inicializa a máquina em INITIALIZED.

        Args:
            transaction_id: Identificador da transação para logs
        """
        self._status = TransactionStatus(state=DEFAULT_INITIAL_STATE)
        self._history: list[StateTransition] = []
        self._transaction_id = transaction_id

    @property
    def status(self) -> TransactionStatus:
        """Snapshot imutável (estado + locator)."""
        return self._status

    @property
    def current_state(self) -> TransactionState:
        """Estado atual da máquina."""
        return self._status.state

    @property
    def content_uri(self) -> str | None:
        """Locator de resultado vigente."""
        return self._status.content_uri

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        """Verifica se está em estado terminal."""
        return is_terminal(self.current_state)

    def can_transition_to(self, target: TransactionState) -> bool:
        """Verifica se pode transitar para o estado alvo."""
        if not is_transition_valid(self.current_state, target):
            return False
        return evaluate_guards(self.current_state, target).allowed

    def transition(
        self,
        target: TransactionState,
        trigger: str,
        content_uri: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de estado.

        Args:
            target: Estado de destino
            trigger: Identificador do gatilho (ex: 'download_started')
            content_uri: Novo locator de resultado (mantém o atual se None)
            metadata: Dados adicionais para auditoria (nunca PII)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        current = self.current_state
        if not is_transition_valid(current, target):
            return TransitionResult(
                success=False,
                error_reason=f"Transição inválida: {current.name} → {target.name}",
            )

        guard_result: GuardResult = evaluate_guards(current, target)
        if not guard_result.allowed:
            return TransitionResult(success=False, error_reason=guard_result.reason)

        uri = content_uri if content_uri is not None else self.content_uri
        transition = StateTransition(
            from_state=current,
            to_state=target,
            trigger=trigger,
            content_uri=uri,
            metadata=metadata or {},
        )

        # Publica o novo snapshot numa única atribuição
        self._status = TransactionStatus(state=target, content_uri=uri)
        self._history.append(transition)

        return TransitionResult(success=True, transition=transition)

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo do estado atual para observability (seguro para logs)."""
        return {
            "transaction_id": self._transaction_id,
            "current_state": self.current_state.name,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.name for s in get_valid_targets(self.current_state)),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        """Histórico em formato seguro para logs."""
        return [t.to_log_dict() for t in self._history]
