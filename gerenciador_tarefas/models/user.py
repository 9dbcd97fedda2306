# gerenciador_tarefas/models/user.py
"""
Este módulo define os modelos Pydantic para a entidade Usuário.
Inclui modelos para cadastro, login, atualização e as representações
do usuário no banco de dados e nas respostas da API.
"""

# ========================
# --- Importações ---
# ========================
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# ========================
# --- Configuração Comum ---
# ========================
# Campos em snake_case no Python/MongoDB e camelCase no JSON da API.
CAMEL_CASE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

def _normalize_email(value: Optional[str]) -> Optional[str]:
    return value.strip().lower() if isinstance(value, str) else value

# ========================
# --- Modelos de Entrada ---
# ========================
class UserCreate(BaseModel):
    """
    Dados necessários para cadastrar um novo usuário.
    """
    nome: str = Field(..., title="Nome", min_length=1, max_length=100)
    email: EmailStr = Field(..., title="Endereço de E-mail")
    password: str = Field(..., title="Senha", min_length=6, max_length=255, description="Senha (será hasheada antes de salvar).")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "nome": "Maria Silva",
                    "email": "maria@example.com",
                    "password": "senhaSegura123"
                }
            ]
        }
    }

    @field_validator("nome", mode="before")
    @classmethod
    def strip_nome(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)

class UserLogin(BaseModel):
    email: EmailStr = Field(..., title="Endereço de E-mail")
    password: str = Field(..., title="Senha", min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)

class UserUpdate(BaseModel):
    """
    Campos atualizáveis do usuário. Pelo menos um deve ser informado.
    """
    nome: Optional[str] = Field(None, title="Nome", min_length=1, max_length=100)
    email: Optional[EmailStr] = Field(None, title="Endereço de E-mail")

    @field_validator("nome", mode="before")
    @classmethod
    def strip_nome(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)

    @model_validator(mode="after")
    def check_at_least_one_field(self) -> "UserUpdate":
        if self.nome is None and self.email is None:
            raise ValueError("Pelo menos um campo deve ser fornecido para atualização")
        return self

# ========================
# --- Modelos de Banco e Resposta ---
# ========================
class UserInDB(BaseModel):
    """
    Representação completa de um usuário como armazenado no banco de dados.
    Inclui a senha hasheada e é usado apenas internamente.
    """
    id: int = Field(..., gt=0, title="ID Único do Usuário")
    nome: str
    email: str
    hashed_password: str
    role: Optional[str] = Field(None, title="Papel do Usuário (ex: 'admin')")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(from_attributes=True)

class User(BaseModel):
    """
    Usuário exposto nas respostas da API (sem a senha hasheada).
    """
    id: int
    nome: str
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = CAMEL_CASE_CONFIG

class LoginResponse(BaseModel):
    usuario: User
    token: str
