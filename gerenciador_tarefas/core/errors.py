# gerenciador_tarefas/core/errors.py
"""
Hierarquia de erros de domínio da aplicação.

Cada erro carrega a mensagem pública e o status HTTP correspondente.
Os handlers registrados em `main.py` convertem qualquer `AppError` na resposta
padrão `{"success": false, "message": ...}`.
"""

# ========================
# --- Importações ---
# ========================
from typing import Any, Dict, List, Optional

from fastapi import status

# ========================
# --- Classe Base ---
# ========================
class AppError(Exception):
    """Classe base para todos os erros da aplicação."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Erro na requisição."
    headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        detalhes: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.detalhes = detalhes
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        """Corpo JSON devolvido ao cliente."""
        payload: Dict[str, Any] = {"success": False, "message": self.message}
        if self.detalhes:
            payload["detalhes"] = self.detalhes
        return payload

# ========================
# --- Erros de Token ---
# ========================
# Distinguíveis internamente (logs), mas sempre expostos como o mesmo 401.
class TokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token inválido ou expirado."

class TokenMissingError(TokenError):
    default_message = "Token não fornecido."

class TokenInvalidError(TokenError):
    default_message = "Token inválido."

class TokenExpiredError(TokenError):
    default_message = "Token expirado."

# ========================
# --- Erros de Autenticação / Autorização ---
# ========================
class AuthenticationError(AppError):
    """Falha de autenticação já no formato exposto ao cliente."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token inválido ou expirado."
    headers = {"WWW-Authenticate": "Bearer"}

class CredenciaisInvalidasError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Credenciais inválidas"

class AuthorizationDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Acesso negado. Permissões insuficientes."

class UsuarioSemPermissaoError(AuthorizationDeniedError):
    default_message = "Usuário não tem permissão para esta operação"

class MissingRouteParameterError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, param_name: str):
        self.param_name = param_name
        super().__init__(f'Parâmetro "{param_name}" ausente na rota.')

# ========================
# --- Erros de Validação ---
# ========================
class DadosInvalidosError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Dados de entrada inválidos"

class InvalidFilterValueError(DadosInvalidosError):
    """Valor de filtro, ordenação ou paginação rejeitado antes de consultar o banco."""
    default_message = "Parâmetros de filtro inválidos"

# ========================
# --- Erros de Recurso ---
# ========================
class ResourceNotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Recurso não encontrado"

class TarefaNaoEncontradaError(ResourceNotFoundError):
    default_message = "Tarefa não encontrada"

class UsuarioNaoEncontradoError(ResourceNotFoundError):
    default_message = "Usuário não encontrado"

class EmailEmUsoError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Email já está em uso por outro usuário"
