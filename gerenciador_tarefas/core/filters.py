# gerenciador_tarefas/core/filters.py
"""
Filtros, ordenação e paginação da listagem de tarefas.

`FilterSpec` valida os parâmetros de consulta antes de qualquer acesso ao banco;
`FilterQueryBuilder` traduz o filtro validado em uma consulta MongoDB e
executa uma única operação "página + total" através do colaborador `find_page`.

Observação sobre `titulo`: a busca por substring usa `$regex` sem a opção `i`,
portanto diferencia maiúsculas de minúsculas.
"""

# ========================
# --- Importações ---
# ========================
import logging
import math
import re
from datetime import datetime, timezone
from typing import (Any, Awaitable, Callable, Dict, Generic, List, Mapping, Optional,
                    Sequence, Tuple, TypeVar, Union)

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pymongo import ASCENDING, DESCENDING

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.errors import InvalidFilterValueError
from gerenciador_tarefas.core.utils import MAX_MONGO_INT
from gerenciador_tarefas.models.task import TASK_STATUS_VALUES, Task, TaskStatus

# ========================
# --- Configuração do Logger ---
# ========================
logger = logging.getLogger(__name__)

# ========================
# --- Constantes ---
# ========================
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25
MAX_LIMIT = 100
# `skip = (page - 1) * limit` precisa caber em int64
MAX_PAGE = MAX_MONGO_INT // MAX_LIMIT + 1

# Campo da API -> campo armazenado no MongoDB
SORT_FIELDS: Dict[str, str] = {
    "id": "id",
    "titulo": "titulo",
    "status": "status",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
SORT_DIRECTIONS: Dict[str, int] = {"ASC": ASCENDING, "DESC": DESCENDING}

T = TypeVar("T")

# ========================
# --- Especificação do Filtro ---
# ========================
class FilterSpec(BaseModel):
    """Parâmetros validados de listagem de tarefas."""
    page: int = Field(DEFAULT_PAGE, ge=1, le=MAX_PAGE, title="Página (começa em 1)")
    limit: int = Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, title="Itens por página")
    titulo: Optional[str] = Field(None, min_length=1, max_length=255, title="Trecho do título")
    status: Optional[TaskStatus] = Field(None, title="Status exato")
    usuario_id: Optional[int] = Field(None, gt=0, le=MAX_MONGO_INT, title="ID do proprietário")
    criado_apos: Optional[datetime] = Field(None, title="Criadas a partir de (inclusive)")
    criado_antes: Optional[datetime] = Field(None, title="Criadas até (inclusive)")
    ordenar_por: str = Field("createdAt", title="Campo de ordenação")
    ordenar_direcao: str = Field("DESC", title="Direção da ordenação")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, value):
        if value is None or isinstance(value, TaskStatus):
            return value
        if value not in TASK_STATUS_VALUES:
            raise ValueError(f"Status inválido: {value}. Status válidos: {', '.join(TASK_STATUS_VALUES)}")
        return value

    @field_validator("ordenar_por")
    @classmethod
    def check_ordenar_por(cls, value: str) -> str:
        if value not in SORT_FIELDS:
            raise ValueError(
                f"Valor inválido para ordenarPor: {value}. Valores válidos: {', '.join(SORT_FIELDS)}"
            )
        return value

    @field_validator("ordenar_direcao")
    @classmethod
    def check_ordenar_direcao(cls, value: str) -> str:
        if value not in SORT_DIRECTIONS:
            raise ValueError(
                f"Valor inválido para ordenarDirecao: {value}. Valores válidos: {', '.join(SORT_DIRECTIONS)}"
            )
        return value

    @field_validator("criado_apos", "criado_antes")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Datas sem fuso são interpretadas como UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def check_date_range(self) -> "FilterSpec":
        if self.criado_apos and self.criado_antes and self.criado_apos > self.criado_antes:
            raise ValueError("Data 'criadoApos' deve ser anterior ou igual a 'criadoAntes'")
        return self

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "FilterSpec":
        """
        Constrói o filtro a partir dos parâmetros brutos da query string.

        Valores vazios (ou só com espaços) são tratados como ausentes.

        Raises:
            InvalidFilterValueError: Se algum valor for inválido. `detalhes` lista
                cada campo rejeitado.
        """
        raw: Dict[str, Any] = {}
        for key, value in params.items():
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    continue
            if value is None:
                continue
            raw[key] = value

        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            detalhes = _validation_details(e)
            logger.info(f"Filtro de tarefas rejeitado: {detalhes}")
            message = detalhes[0]["mensagem"] if len(detalhes) == 1 else None
            raise InvalidFilterValueError(message, detalhes=detalhes) from e

def _validation_details(error: ValidationError) -> List[Dict[str, str]]:
    """Converte os erros do Pydantic em `[{campo, mensagem}]`."""
    detalhes = []
    for err in error.errors():
        campo = ".".join(str(part) for part in err.get("loc", ())) or "filtro"
        ctx_error = (err.get("ctx") or {}).get("error")
        mensagem = str(ctx_error) if ctx_error is not None else err.get("msg", "Valor inválido")
        detalhes.append({"campo": campo, "mensagem": mensagem})
    return detalhes

# ========================
# --- Consulta e Página ---
# ========================
SortSpec = List[Tuple[str, int]]

class TaskQuery(BaseModel):
    """Consulta MongoDB pronta para o colaborador de persistência."""
    filter: Dict[str, Any]
    sort: SortSpec
    skip: int
    limit: int

class Page(BaseModel, Generic[T]):
    """Uma fatia de resultados e o total necessário para calcular as páginas."""
    data: List[T]
    total: int
    page: int
    limit: int
    total_pages: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

def count_pages(total: int, limit: int) -> int:
    """`ceil(total / limit)`; zero quando não há resultados."""
    if total <= 0:
        return 0
    return math.ceil(total / limit)

FindPage = Callable[[Dict[str, Any], SortSpec, int, int], Awaitable[Tuple[Sequence[Task], int]]]

# ========================
# --- Construtor de Consultas ---
# ========================
class FilterQueryBuilder:
    """
    Traduz um `FilterSpec` em consulta e executa a paginação.

    Args:
        find_page: Corrotina `(filter, sort, skip, limit) -> (linhas, total)`.
    """

    def __init__(self, find_page: FindPage):
        self._find_page = find_page

    def build(self, spec: FilterSpec, usuario_id_scope: Optional[int] = None) -> TaskQuery:
        """
        Monta a consulta. Todos os predicados são combinados com E.

        Args:
            spec: Filtro já validado.
            usuario_id_scope: Quando informado, restringe ao proprietário e
                substitui qualquer `usuarioId` vindo do cliente.
        """
        query: Dict[str, Any] = {}

        if spec.titulo:
            query["titulo"] = {"$regex": re.escape(spec.titulo)}
        if spec.status is not None:
            query["status"] = spec.status.value

        usuario_id = usuario_id_scope if usuario_id_scope is not None else spec.usuario_id
        if usuario_id is not None:
            query["usuario_id"] = usuario_id

        created_range: Dict[str, datetime] = {}
        if spec.criado_apos is not None:
            created_range["$gte"] = spec.criado_apos
        if spec.criado_antes is not None:
            created_range["$lte"] = spec.criado_antes
        if created_range:
            query["created_at"] = created_range

        sort_field = SORT_FIELDS[spec.ordenar_por]
        sort: SortSpec = [(sort_field, SORT_DIRECTIONS[spec.ordenar_direcao])]
        if sort_field != "id":
            sort.append(("id", ASCENDING))

        return TaskQuery(filter=query, sort=sort, skip=spec.skip, limit=spec.limit)

    async def execute(
        self,
        spec: Union[FilterSpec, Mapping[str, Any]],
        usuario_id_scope: Optional[int] = None,
    ) -> Page[Task]:
        """
        Valida o filtro, executa uma única consulta paginada e devolve a página.

        Raises:
            InvalidFilterValueError: Filtro inválido; nenhuma consulta é executada.
        """
        if not isinstance(spec, FilterSpec):
            spec = FilterSpec.from_query(spec)

        task_query = self.build(spec, usuario_id_scope=usuario_id_scope)
        logger.debug(
            f"Consultando tarefas: filtro={task_query.filter}, ordenação={task_query.sort}, "
            f"skip={task_query.skip}, limit={task_query.limit}"
        )
        rows, total = await self._find_page(task_query.filter, task_query.sort, task_query.skip, task_query.limit)

        return Page[Task](
            data=list(rows),
            total=total,
            page=spec.page,
            limit=spec.limit,
            total_pages=count_pages(total, spec.limit),
        )
