"""App — coração do sistema: transações MMS, serviços e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- use_cases/: transações MMS (retrieve)
- services/: serviços de aplicação (charset, dedupe, ack, retenção, retry)
- domain/: modelos de PDU, colunas e locators do store
- infra/: implementações concretas de IO (HTTP, codec WSP, stores)
- protocols/: contratos/interfaces
- observability/: correlation_id e métricas via logs

Padrão: app executa; fsm governa; config configura; utils apoia.
"""
