"""App — coração do sistema: ciclo de vida de instâncias e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- instances/: registro, lifecycle, reconexão e classificação de mensagens
- webhooks/: envelope e entrega de eventos de domínio
- infra/: implementações concretas de IO (transporte)
- protocols/: contratos/interfaces
- observability/: contexto de logs e métricas

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
