# gerenciador_tarefas/core/authorization.py
"""
Guardas de autorização das rotas.

Duas regras apenas: pertencer a um papel (`check_role`) e ser o dono do
recurso ou ter um papel privilegiado (`check_owner_or_role`). As funções
`check_*` são puras e recebem a identidade explicitamente (possivelmente None);
`require_*` as expõem como dependências FastAPI.
"""

# ========================
# --- Importações ---
# ========================
import logging
from typing import Any, Callable, Coroutine, Mapping, Optional, Sequence, Union

from fastapi import Request

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.dependencies import TokenPrincipal
from gerenciador_tarefas.core.errors import AuthorizationDeniedError, MissingRouteParameterError
from gerenciador_tarefas.core.utils import parse_int_id
from gerenciador_tarefas.models.token import Principal

# ========================
# --- Configuração do Logger ---
# ========================
logger = logging.getLogger(__name__)

# ========================
# --- Constantes ---
# ========================
DEFAULT_ROLE = "user"
ADMIN_ROLE = "admin"
PERMISSOES_INSUFICIENTES = "Acesso negado. Permissões insuficientes."
APENAS_PROPRIOS_RECURSOS = "Acesso negado. Você só pode acessar seus próprios recursos."

Roles = Union[str, Sequence[str]]

# ========================
# --- Regras Puras ---
# ========================
def effective_role(principal: Optional[Principal]) -> str:
    """Papel avaliado nas regras: o do token ou "user" quando ausente."""
    if principal is None or not principal.role:
        return DEFAULT_ROLE
    return principal.role

def check_role(principal: Optional[Principal], allowed: Roles) -> None:
    """
    Permite a requisição se o papel efetivo estiver entre os permitidos.

    Sem identidade, o papel efetivo é "user": a guarda libera rotas que aceitam
    "user" em vez de negar por padrão.

    Raises:
        AuthorizationDeniedError: 403 quando o papel não é permitido.
    """
    allowed_roles = [allowed] if isinstance(allowed, str) else list(allowed)
    role = effective_role(principal)
    if role not in allowed_roles:
        logger.warning(
            f"Acesso negado por papel: usuário {principal.id if principal else None} "
            f"com papel '{role}', permitidos {allowed_roles}."
        )
        raise AuthorizationDeniedError(PERMISSOES_INSUFICIENTES)

def check_owner_or_role(
    principal: Optional[Principal],
    params: Mapping[str, Any],
    param_name: str = "id",
    role: str = ADMIN_ROLE,
) -> None:
    """
    Permite a requisição se o usuário for dono do recurso identificado pelo
    parâmetro de rota `param_name`, ou se tiver o papel `role`.

    Um valor não numérico não é erro de formato: apenas não pertence a ninguém.

    Raises:
        MissingRouteParameterError: 400 quando o parâmetro não existe na rota.
        AuthorizationDeniedError: 403 quando o usuário não é o dono.
    """
    raw_value = params.get(param_name)
    if raw_value is None or raw_value == "":
        raise MissingRouteParameterError(param_name)

    if principal is not None and principal.role == role:
        return

    resource_owner_id = parse_int_id(raw_value)
    if principal is not None and resource_owner_id is not None and resource_owner_id == principal.id:
        return

    logger.warning(
        f"Acesso negado por propriedade: usuário {principal.id if principal else None} "
        f"tentou acessar {param_name}='{raw_value}'."
    )
    raise AuthorizationDeniedError(APENAS_PROPRIOS_RECURSOS)

# ========================
# --- Dependências FastAPI ---
# ========================
GuardDependency = Callable[..., Coroutine[Any, Any, None]]

def require_role(allowed: Roles) -> GuardDependency:
    """Cria uma dependência que exige um dos papéis informados."""
    async def role_guard(principal: TokenPrincipal) -> None:
        check_role(principal, allowed)
    return role_guard

def require_owner_or_role(role: str = ADMIN_ROLE, param_name: str = "id") -> GuardDependency:
    """Cria uma dependência que exige ser dono do recurso da rota ou ter o papel `role`."""
    async def owner_guard(request: Request, principal: TokenPrincipal) -> None:
        check_owner_or_role(principal, request.path_params, param_name=param_name, role=role)
    return owner_guard

require_admin = require_role(ADMIN_ROLE)
