"""Stores — implementações concretas do store de mensagens.

Módulos disponíveis:
    - memory_stores: Store em memória para desenvolvimento/testes
    - redis_message_store: Store usando Redis (Upstash)
"""

from __future__ import annotations

from app.infra.stores.memory_stores import MemoryMessageStore
from app.infra.stores.redis_message_store import RedisMessageStore

__all__ = [
    # Memory (dev/test)
    "MemoryMessageStore",
    # Redis (Upstash)
    "RedisMessageStore",
]
