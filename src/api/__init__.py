"""API — camada de borda HTTP.

Responsabilidades:
- Receber requests de operadores e sistemas externos
- Validar payloads
- Traduzir erros de domínio em respostas HTTP

Subpastas:
- routes/: endpoints HTTP (instâncias, health)

NÃO PODE conter: FSM, regras de ciclo de vida, entrega de webhooks.
"""
