# gerenciador_tarefas/models/token.py
"""
Este módulo define os modelos Pydantic relacionados à autenticação por token:
a identidade autenticada (`Principal`) e o payload contido dentro do token JWT.
"""

# ========================
# --- Importações ---
# ========================
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ========================
# --- Identidade Autenticada ---
# ========================
class Principal(BaseModel):
    """
    Identidade resolvida a partir de um token verificado.
    Vive apenas durante uma requisição; nunca é persistida.
    A ausência de `role` é diferente de um papel atribuído e vale "user"
    sempre que um papel é avaliado.
    """
    id: int = Field(..., gt=0, title="ID do Usuário")
    email: str = Field(..., title="E-mail do Usuário")
    role: Optional[str] = Field(None, title="Papel do Usuário")

    model_config = ConfigDict(frozen=True, extra="ignore")

# ========================
# --- Payload do Token ---
# ========================
class TokenPayload(Principal):
    """
    Dados (claims) contidos dentro de um token JWT.
    `iat` e `exp` são timestamps Unix em segundos.
    """
    iat: int = Field(..., title="Timestamp de Emissão")
    exp: int = Field(..., title="Timestamp de Expiração")

    def to_principal(self) -> Principal:
        return Principal(id=self.id, email=self.email, role=self.role)
