"""
Estados canônicos do ciclo de vida de uma instância de mensageria.

Uma instância é uma conta conectada ao provedor de transporte. O estado
é a única fonte de verdade: campos derivados (payload de pareamento,
dados da conta) dependem dele e nunca o contrário.
"""

from enum import StrEnum


class InstanceState(StrEnum):
    """
    Estados de uma instância.

    Estados não-terminais:
        - INITIALIZING: Adapter criado, conexão em andamento
        - AWAITING_PAIRING: Desafio de pareamento (QR/código) aguardando leitura
        - AUTHENTICATED: Credencial aceita, socket ainda não pronto
        - CONNECTED: Socket aberto, conta identificada, envio liberado
        - DEGRADED: Conectada, mas com confirmação de entrega abaixo de "delivered"
        - INVALID: Falha após autenticação (ex: probe de liveness), requer novo pareamento
        - DISCONNECTED: Link perdido; aguarda reconexão com novo adapter

    Estado terminal:
        - TERMINATED: Encerrada (remoção explícita, logout remoto ou falha fatal)
    """

    INITIALIZING = "INITIALIZING"
    AWAITING_PAIRING = "AWAITING_PAIRING"
    AUTHENTICATED = "AUTHENTICATED"
    CONNECTED = "CONNECTED"
    DEGRADED = "DEGRADED"
    INVALID = "INVALID"
    DISCONNECTED = "DISCONNECTED"
    TERMINATED = "TERMINATED"

    def __str__(self) -> str:
        return self.value


# Uma vez terminada, a instância não aceita mais eventos
TERMINAL_STATES: frozenset[InstanceState] = frozenset({
    InstanceState.TERMINATED,
})

# Estados em que envio é permitido e account_info está populado
ACTIVE_STATES: frozenset[InstanceState] = frozenset({
    InstanceState.CONNECTED,
    InstanceState.DEGRADED,
})

DEFAULT_INITIAL_STATE: InstanceState = InstanceState.INITIALIZING


def is_terminal(state: InstanceState) -> bool:
    """Verifica se o estado é terminal."""
    return state in TERMINAL_STATES


def is_active(state: InstanceState) -> bool:
    """Verifica se a instância pode enviar mensagens no estado informado."""
    return state in ACTIVE_STATES


def is_valid_state(state: InstanceState) -> bool:
    """
    Verifica se o valor é um estado válido do enum.

    Args:
        state: Estado a ser verificado

    Returns:
        True se é um InstanceState válido
    """
    return isinstance(state, InstanceState)
