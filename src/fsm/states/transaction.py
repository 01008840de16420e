"""
Estados canônicos de uma transação MMS.

Uma transação nasce INITIALIZED, passa por DOWNLOADING e termina
em SUCCESS ou FAILED. Estados terminais são imutáveis.
"""

from enum import StrEnum


class TransactionState(StrEnum):
    """
    Estados de uma transação de retrieve.

    Estados não-terminais:
        - INITIALIZED: Construída, ainda não iniciada
        - DOWNLOADING: Buscando a mensagem no MMSC

    Estados terminais:
        - SUCCESS: Mensagem persistida no inbox
        - FAILED: Falha de rede/parse ou duplicata suprimida
    """

    INITIALIZED = "INITIALIZED"
    DOWNLOADING = "DOWNLOADING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    def __str__(self) -> str:
        return self.value


TERMINAL_STATES: frozenset[TransactionState] = frozenset({
    TransactionState.SUCCESS,
    TransactionState.FAILED,
})

DEFAULT_INITIAL_STATE: TransactionState = TransactionState.INITIALIZED


def is_terminal(state: TransactionState) -> bool:
    """Verifica se o estado é terminal (transação encerrada)."""
    return state in TERMINAL_STATES


def is_valid_state(state: TransactionState) -> bool:
    """Verifica se o valor é um TransactionState válido."""
    return isinstance(state, TransactionState)
