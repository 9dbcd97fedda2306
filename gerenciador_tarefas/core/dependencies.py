# gerenciador_tarefas/core/dependencies.py
"""
Define as dependências reutilizáveis para a aplicação FastAPI,
especialmente aquelas relacionadas à autenticação e ao acesso ao banco de dados.

A autenticação segue a sequência: sem token -> token presente -> verificado
ou rejeitado. Qualquer falha de verificação vira o mesmo 401, para não revelar
ao cliente se o token estava ausente, adulterado ou expirado.
"""

# ========================
# --- Importações ---
# ========================
import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.errors import AuthenticationError, TokenError
from gerenciador_tarefas.core.security import TokenService, get_token_service
from gerenciador_tarefas.db.mongodb_utils import get_database
from gerenciador_tarefas.models.token import Principal

# ========================
# --- Configuração do Logger ---
# ========================
logger = logging.getLogger(__name__)

# ========================
# --- Constantes ---
# ========================
BEARER_SCHEME = "Bearer"
TOKEN_NAO_FORNECIDO = "Token não fornecido. Acesso negado."
TOKEN_INVALIDO = "Token inválido ou expirado."

# ========================
# --- Tipos de Dependência ---
# ========================
DbDep = Annotated[AsyncIOMotorDatabase, Depends(get_database)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]

# ========================
# --- Extração do Token ---
# ========================
def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extrai o token do header `Authorization: Bearer <token>`.

    Aceita qualquer quantidade de espaços ou tabs entre o esquema e o token.
    O esquema deve ser exatamente "Bearer". Qualquer outro esquema, ou um
    token vazio, resulta em None.
    """
    if not authorization:
        return None

    parts = authorization.strip().split()
    if len(parts) < 2 or parts[0] != BEARER_SCHEME or not parts[1]:
        return None
    return parts[1]

# ========================
# --- Dependência: Verificação do Token ---
# ========================
async def verify_request_token(request: Request, token_service: TokenServiceDep) -> Principal:
    """
    Verifica o token da requisição e devolve a identidade completa do payload
    (incluindo `role`).

    O FastAPI reaproveita o resultado dentro da mesma requisição, então o token
    é verificado uma única vez mesmo quando rota e guardas dependem dele.

    Raises:
        AuthenticationError: 401 quando o token está ausente ou é rejeitado.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        logger.info(f"Requisição sem token para {request.method} {request.url.path}.")
        raise AuthenticationError(TOKEN_NAO_FORNECIDO)

    try:
        principal = token_service.verify(token)
    except TokenError as e:
        logger.info(f"Token rejeitado ({type(e).__name__}) para {request.method} {request.url.path}.")
        raise AuthenticationError(TOKEN_INVALIDO) from e

    # Contexto da requisição: somente id e email.
    request.state.principal = Principal(id=principal.id, email=principal.email)
    return principal

# ========================
# --- Dependência: Principal da Requisição ---
# ========================
async def get_current_principal(
    token_principal: Annotated[Principal, Depends(verify_request_token)]
) -> Principal:
    """
    Identidade entregue aos handlers: apenas `id` e `email`.
    O `role` não é propagado; somente as guardas de autorização o consultam.
    """
    return Principal(id=token_principal.id, email=token_principal.email)

# ========================
# --- Tipos Anotados para Rotas ---
# ========================
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
TokenPrincipal = Annotated[Principal, Depends(verify_request_token)]
