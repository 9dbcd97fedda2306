# gerenciador_tarefas/routers/tarefas.py
"""
Este módulo define as rotas da API para o gerenciamento de Tarefas.
Inclui operações CRUD, listagem paginada com filtros e ordenação e
atalhos para marcar tarefas como concluídas ou pendentes.
Todas as rotas exigem autenticação; cada usuário só enxerga as próprias tarefas.
"""

# ========================
# --- Importações ---
# ========================
import logging
from functools import partial
from typing import Annotated, List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Response, status

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.authorization import require_owner_or_role
from gerenciador_tarefas.core.dependencies import CurrentPrincipal, DbDep
from gerenciador_tarefas.core.errors import (InvalidFilterValueError, TarefaNaoEncontradaError,
                                             UsuarioSemPermissaoError)
from gerenciador_tarefas.core.filters import FilterQueryBuilder, FilterSpec, Page
from gerenciador_tarefas.core.utils import MAX_MONGO_INT
from gerenciador_tarefas.db import task_crud
from gerenciador_tarefas.models.task import TASK_STATUS_VALUES, Task, TaskCreate, TaskStatus, TaskUpdate

# ========================
# --- Configurações e Constantes ---
# ========================
logger = logging.getLogger(__name__)

# ========================
# --- Configuração do Router ---
# ========================
router = APIRouter(
    prefix="/tarefas",
    tags=["Tarefas"],
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "Tarefa não encontrada."},
        status.HTTP_401_UNAUTHORIZED: {"description": "Não autorizado (token ausente, inválido ou expirado)."},
        status.HTTP_403_FORBIDDEN: {"description": "A tarefa não pertence ao usuário autenticado."},
    },
)

# ========================
# --- Dependências Locais ---
# ========================
async def get_filter_spec(
    page: Annotated[Optional[str], Query(description="Página (começa em 1).")] = None,
    limit: Annotated[Optional[str], Query(description="Itens por página (1 a 100).")] = None,
    titulo: Annotated[Optional[str], Query(description="Trecho do título (diferencia maiúsculas).")] = None,
    status_filter: Annotated[Optional[str], Query(alias="status", description="Status exato.")] = None,
    usuario_id: Annotated[Optional[str], Query(alias="usuarioId", description="ID do proprietário.")] = None,
    criado_apos: Annotated[Optional[str], Query(alias="criadoApos", description="Criadas a partir de (ISO 8601).")] = None,
    criado_antes: Annotated[Optional[str], Query(alias="criadoAntes", description="Criadas até (ISO 8601).")] = None,
    ordenar_por: Annotated[Optional[str], Query(alias="ordenarPor", description="id, titulo, status, createdAt ou updatedAt.")] = None,
    ordenar_direcao: Annotated[Optional[str], Query(alias="ordenarDirecao", description="ASC ou DESC.")] = None,
) -> FilterSpec:
    """Valida os parâmetros de listagem; valores inválidos resultam em 400 antes de consultar o banco."""
    return FilterSpec.from_query({
        "page": page,
        "limit": limit,
        "titulo": titulo,
        "status": status_filter,
        "usuarioId": usuario_id,
        "criadoApos": criado_apos,
        "criadoAntes": criado_antes,
        "ordenarPor": ordenar_por,
        "ordenarDirecao": ordenar_direcao,
    })

def get_query_builder(db: DbDep) -> FilterQueryBuilder:
    return FilterQueryBuilder(partial(task_crud.find_page, db))

FilterDep = Annotated[FilterSpec, Depends(get_filter_spec)]
QueryBuilderDep = Annotated[FilterQueryBuilder, Depends(get_query_builder)]

async def _get_owned_task(db, task_id: int, usuario_id: int) -> Task:
    """Busca a tarefa e garante que pertence ao usuário (404 se não existe, 403 se é de outro)."""
    task = await task_crud.get_task_by_id(db, task_id)
    if task is None:
        raise TarefaNaoEncontradaError()
    if task.usuario_id != usuario_id:
        logger.warning(f"Usuário {usuario_id} tentou acessar a tarefa {task_id} de outro usuário.")
        raise UsuarioSemPermissaoError()
    return task

async def _set_status(db, task_id: int, usuario_id: int, new_status: TaskStatus) -> Task:
    await _get_owned_task(db, task_id, usuario_id)
    updated = await task_crud.update_task(db, task_id, {"status": new_status})
    if updated is None:
        raise TarefaNaoEncontradaError()
    logger.info(f"Tarefa {task_id} marcada como '{new_status.value}' pelo usuário {usuario_id}.")
    return updated

# ========================
# --- Endpoints de Listagem ---
# ========================
@router.get(
    "/",
    response_model=Page[Task],
    summary="Lista as tarefas do usuário autenticado com filtros, ordenação e paginação",
    description=(
        "Filtros combinados: `titulo` (trecho), `status`, `criadoApos` e `criadoAntes` (inclusivos).\n"
        "Ordenação por `ordenarPor`/`ordenarDirecao`; empates são desfeitos pelo `id` crescente."
    ),
)
async def list_tarefas(principal: CurrentPrincipal, spec: FilterDep, builder: QueryBuilderDep):
    """
    Lista tarefas do usuário autenticado.
    Um `usuarioId` informado na query é ignorado: a listagem é sempre restrita ao usuário.
    """
    page = await builder.execute(spec, usuario_id_scope=principal.id)
    logger.debug(f"{len(page.data)} de {page.total} tarefas retornadas para usuário {principal.id}.")
    return page

@router.get(
    "/status/{status_value}",
    response_model=List[Task],
    summary="Lista até 100 tarefas do usuário autenticado com o status informado",
)
async def list_tarefas_por_status(
    db: DbDep,
    principal: CurrentPrincipal,
    status_value: Annotated[str, Path(description="pendente, em_andamento ou concluida (sem diferenciar maiúsculas).")]
):
    normalized = status_value.lower()
    if normalized not in TASK_STATUS_VALUES:
        raise InvalidFilterValueError(
            f"Status inválido: {status_value}. Status válidos: {', '.join(TASK_STATUS_VALUES)}"
        )
    return await task_crud.list_tasks_by_status(db, principal.id, TaskStatus(normalized))

@router.get(
    "/usuario/{usuarioId}",
    response_model=Page[Task],
    summary="Lista as tarefas de um usuário (o próprio usuário ou admin)",
    dependencies=[Depends(require_owner_or_role("admin", "usuarioId"))],
)
async def list_tarefas_do_usuario(
    usuarioId: Annotated[int, Path(le=MAX_MONGO_INT, description="ID do proprietário das tarefas.")],
    spec: FilterDep,
    builder: QueryBuilderDep,
):
    return await builder.execute(spec, usuario_id_scope=usuarioId)

# ========================
# --- Endpoints CRUD ---
# ========================
@router.post(
    "/",
    response_model=Task,
    status_code=status.HTTP_201_CREATED,
    summary="Cria uma nova tarefa para o usuário autenticado",
)
async def create_tarefa(
    db: DbDep,
    principal: CurrentPrincipal,
    task_in: Annotated[TaskCreate, Body(description="Dados da nova tarefa.")]
):
    """O proprietário (`usuarioId`), o ID e os timestamps são definidos pelo servidor."""
    return await task_crud.create_task(db, task_in, usuario_id=principal.id)

@router.get("/{id}", response_model=Task, summary="Busca uma tarefa do usuário autenticado pelo ID")
async def read_tarefa(
    db: DbDep,
    principal: CurrentPrincipal,
    id: Annotated[int, Path(le=MAX_MONGO_INT, description="ID da tarefa.")]
):
    return await _get_owned_task(db, id, principal.id)

@router.put("/{id}", response_model=Task, summary="Atualiza uma tarefa do usuário autenticado")
async def update_tarefa(
    db: DbDep,
    principal: CurrentPrincipal,
    id: Annotated[int, Path(le=MAX_MONGO_INT, description="ID da tarefa.")],
    task_update: Annotated[TaskUpdate, Body(description="Campos a serem atualizados.")]
):
    await _get_owned_task(db, id, principal.id)
    updated = await task_crud.update_task(db, id, task_update.model_dump(exclude_unset=True))
    if updated is None:
        raise TarefaNaoEncontradaError()
    logger.info(f"Tarefa {id} atualizada pelo usuário {principal.id}.")
    return updated

@router.delete(
    "/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove uma tarefa do usuário autenticado",
)
async def delete_tarefa(
    db: DbDep,
    principal: CurrentPrincipal,
    id: Annotated[int, Path(le=MAX_MONGO_INT, description="ID da tarefa.")]
):
    await _get_owned_task(db, id, principal.id)
    if not await task_crud.delete_task(db, id):
        raise TarefaNaoEncontradaError()
    logger.info(f"Tarefa {id} removida pelo usuário {principal.id}.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.patch("/{id}/concluir", response_model=Task, summary="Marca a tarefa como concluída")
async def concluir_tarefa(
    db: DbDep,
    principal: CurrentPrincipal,
    id: Annotated[int, Path(le=MAX_MONGO_INT, description="ID da tarefa.")]
):
    return await _set_status(db, id, principal.id, TaskStatus.COMPLETED)

@router.patch("/{id}/pendente", response_model=Task, summary="Marca a tarefa como pendente")
async def marcar_tarefa_pendente(
    db: DbDep,
    principal: CurrentPrincipal,
    id: Annotated[int, Path(le=MAX_MONGO_INT, description="ID da tarefa.")]
):
    return await _set_status(db, id, principal.id, TaskStatus.PENDING)
