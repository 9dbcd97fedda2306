# gerenciador_tarefas/models/task.py
"""
Este módulo define os modelos Pydantic utilizados para representar Tarefas
na aplicação. Inclui modelos para a criação, atualização e representação
de tarefas como armazenadas e retornadas pelo banco de dados, além do
status da tarefa.
"""

# ========================
# --- Importações ---
# ========================
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# ========================
# --- Enumerações de Status ---
# ========================
class TaskStatus(str, Enum):
    """Define os possíveis status de uma tarefa."""
    PENDING = "pendente"
    IN_PROGRESS = "em_andamento"
    COMPLETED = "concluida"

TASK_STATUS_VALUES = [s.value for s in TaskStatus]

def _strip(value):
    return value.strip() if isinstance(value, str) else value

# ========================
# --- Modelos para Operações ---
# ========================
class TaskCreate(BaseModel):
    """
    Dados aceitos na criação de uma tarefa.
    O `usuario_id` vem do usuário autenticado, nunca do corpo da requisição.
    """
    titulo: str = Field(..., title="Título da Tarefa", min_length=1, max_length=255)
    descricao: Optional[str] = Field(None, title="Descrição Detalhada", max_length=1000)
    status: TaskStatus = Field(default=TaskStatus.PENDING, title="Status da Tarefa")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "titulo": "Finalizar relatório mensal",
                    "descricao": "Compilar dados e escrever o relatório final.",
                    "status": "pendente"
                }
            ]
        }
    }

    @field_validator("titulo", "descricao", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

class TaskUpdate(BaseModel):
    """
    Atualização parcial de uma tarefa. Pelo menos um campo deve ser informado.
    """
    titulo: Optional[str] = Field(None, title="Título da Tarefa", min_length=1, max_length=255)
    descricao: Optional[str] = Field(None, title="Descrição Detalhada", max_length=1000)
    status: Optional[TaskStatus] = Field(None, title="Status da Tarefa")

    @field_validator("titulo", "descricao", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @model_validator(mode="after")
    def check_at_least_one_field(self) -> "TaskUpdate":
        if not self.model_fields_set:
            raise ValueError("Pelo menos um campo deve ser fornecido para atualização")
        return self

# ========================
# --- Modelo de Banco e Resposta ---
# ========================
class Task(BaseModel):
    """
    Tarefa como armazenada no MongoDB e retornada pela API.
    No banco os campos ficam em snake_case; no JSON da API, em camelCase.
    """
    id: int = Field(..., gt=0, title="ID Único da Tarefa")
    titulo: str = Field(..., title="Título da Tarefa")
    descricao: Optional[str] = Field(None, title="Descrição Detalhada")
    status: TaskStatus = Field(default=TaskStatus.PENDING, title="Status da Tarefa")
    usuario_id: int = Field(..., gt=0, title="ID do Proprietário da Tarefa")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), title="Data de Criação")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), title="Data da Última Atualização")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        json_schema_extra={
            "examples": [
                {
                    "id": 1,
                    "titulo": "Finalizar relatório mensal",
                    "descricao": "Compilar dados e escrever o relatório final.",
                    "status": "pendente",
                    "usuarioId": 7,
                    "createdAt": "2025-10-26T20:19:18Z",
                    "updatedAt": "2025-10-26T20:19:18Z"
                }
            ]
        },
    )
