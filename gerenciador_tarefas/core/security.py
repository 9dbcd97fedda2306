# gerenciador_tarefas/core/security.py
"""
Módulo responsável pelas funcionalidades de segurança da aplicação:
hashing de senhas e emissão/verificação de tokens JWT de identidade.

O segredo e a validade padrão dos tokens são lidos uma única vez na
inicialização (`TokenServiceConfig.from_settings`) e injetados no
`TokenService`. Tokens não podem ser revogados antes de expirar.
"""

# ========================
# --- Importações ---
# ========================
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Union

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict, ValidationError

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.config import Settings, settings
from gerenciador_tarefas.core.errors import TokenExpiredError, TokenInvalidError, TokenMissingError
from gerenciador_tarefas.core.utils import parse_lifetime
from gerenciador_tarefas.models.token import Principal, TokenPayload

# ========================
# --- Configuração do Logger ---
# ========================
logger = logging.getLogger(__name__)

# ========================
# --- Configuração Hashing de Senha ---
# ========================
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

Lifetime = Union[str, int, timedelta]

# ========================
# --- Funções de Senha ---
# ========================
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verifica se uma senha em texto plano corresponde a um hash armazenado.

    Returns:
        True se a senha corresponder ao hash, False caso contrário.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Ocorre se o formato do hash for inválido para o passlib
        logger.warning("Tentativa de verificar senha com hash em formato inválido.")
        return False

def get_password_hash(password: str) -> str:
    """Gera um hash seguro (bcrypt) para uma senha fornecida."""
    return pwd_context.hash(password)

# ========================
# --- Configuração do Serviço de Tokens ---
# ========================
class TokenServiceConfig(BaseModel):
    """Configuração imutável do serviço de tokens, construída uma vez na inicialização."""
    secret: str
    algorithm: str = "HS256"
    default_lifetime: timedelta = timedelta(days=7)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_settings(cls, current_settings: Settings) -> "TokenServiceConfig":
        if not current_settings.JWT_SECRET_KEY:
            raise ValueError("JWT_SECRET_KEY não pode ser vazio.")
        return cls(
            secret=current_settings.JWT_SECRET_KEY,
            algorithm=current_settings.JWT_ALGORITHM,
            default_lifetime=parse_lifetime(current_settings.JWT_EXPIRES_IN),
        )

# ========================
# --- Serviço de Tokens ---
# ========================
class TokenService:
    """
    Emite e verifica tokens JWT assinados e com validade limitada.

    O payload contém apenas `id`, `email`, `role` (quando presente),
    `iat` e `exp`.
    """

    def __init__(self, config: TokenServiceConfig):
        self._config = config

    @property
    def config(self) -> TokenServiceConfig:
        return self._config

    def issue(self, subject: Union[Principal, Mapping[str, Any], Any], lifetime: Optional[Lifetime] = None) -> str:
        """
        Emite um token para a identidade informada.

        Args:
            subject: Objeto ou mapeamento com `id`, `email` e, opcionalmente, `role`.
                     Qualquer outro campo é descartado.
            lifetime: Validade do token. Se None, usa a validade padrão configurada.

        Returns:
            O token JWT codificado.

        Raises:
            ValueError: Se a validade não for positiva.
        """
        ttl = self._config.default_lifetime if lifetime is None else parse_lifetime(lifetime)

        if isinstance(subject, Mapping):
            principal = Principal.model_validate(dict(subject))
        else:
            principal = Principal(
                id=getattr(subject, "id"),
                email=getattr(subject, "email"),
                role=getattr(subject, "role", None),
            )

        issued_at = datetime.now(timezone.utc)
        to_encode = {
            "id": principal.id,
            "email": principal.email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
        }
        if principal.role is not None:
            to_encode["role"] = principal.role
        return jwt.encode(to_encode, self._config.secret, algorithm=self._config.algorithm)

    def verify(self, token: Optional[str]) -> Principal:
        """
        Verifica um token e devolve a identidade nele contida.

        A expiração é avaliada antes da assinatura: um token expirado é sempre
        reportado como `TokenExpiredError`.

        Raises:
            TokenMissingError: Token vazio ou ausente.
            TokenExpiredError: `agora > exp`.
            TokenInvalidError: Assinatura, formato ou payload inválidos.
        """
        if not token or not token.strip():
            raise TokenMissingError()

        try:
            unverified_claims = jwt.get_unverified_claims(token)
        except JWTError as e:
            raise TokenInvalidError() from e

        exp = unverified_claims.get("exp") if isinstance(unverified_claims, dict) else None
        if isinstance(exp, (int, float)) and not isinstance(exp, bool):
            if datetime.now(timezone.utc).timestamp() > exp:
                raise TokenExpiredError()

        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                options={"verify_exp": False},
            )
            token_data = TokenPayload.model_validate(payload)
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except (JWTError, ValidationError) as e:
            raise TokenInvalidError() from e

        return token_data.to_principal()

# ========================
# --- Instância Global ---
# ========================
# Construída uma única vez na importação; somente leitura a partir daí.
token_service = TokenService(TokenServiceConfig.from_settings(settings))

def get_token_service() -> TokenService:
    """Dependência FastAPI que fornece o serviço de tokens da aplicação."""
    return token_service
