"""
Regras de transição válidas entre estados da transação.

Grafo:
    INITIALIZED → DOWNLOADING | FAILED
    DOWNLOADING → SUCCESS | FAILED
    SUCCESS, FAILED → (terminais)
"""

from fsm.states.transaction import TERMINAL_STATES, TransactionState

TransitionMap = dict[TransactionState, frozenset[TransactionState]]

VALID_TRANSITIONS: TransitionMap = {
    # INITIALIZED: FAILED cobre exceção antes do download começar
    TransactionState.INITIALIZED: frozenset({
        TransactionState.DOWNLOADING,
        TransactionState.FAILED,
    }),
    TransactionState.DOWNLOADING: frozenset({
        TransactionState.SUCCESS,
        TransactionState.FAILED,
    }),
    TransactionState.SUCCESS: frozenset(),
    TransactionState.FAILED: frozenset(),
}


def get_valid_targets(state: TransactionState) -> frozenset[TransactionState]:
    """Retorna os estados de destino válidos (vazio se terminal)."""
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(from_state: TransactionState, to_state: TransactionState) -> bool:
    """
    Verifica se uma transição é válida segundo o grafo.

    Args:
        from_state: Estado de origem
        to_state: Estado de destino

    Returns:
        True se a transição é permitida, False caso contrário
    """
    if from_state in TERMINAL_STATES:
        return False
    return to_state in get_valid_targets(from_state)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transições.

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for state in TransactionState:
        if state not in VALID_TRANSITIONS:
            errors.append(f"Estado {state.name} ausente em VALID_TRANSITIONS")

    for state in TERMINAL_STATES:
        targets = VALID_TRANSITIONS.get(state, frozenset())
        if targets:
            errors.append(
                f"Estado terminal {state.name} não deveria ter transições: {targets}"
            )

    return errors
