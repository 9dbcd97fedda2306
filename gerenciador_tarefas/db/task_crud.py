# gerenciador_tarefas/db/task_crud.py
"""
Módulo contendo as funções CRUD (Create, Read, Update, Delete)
para interagir com a coleção de tarefas no MongoDB.
Inclui também a consulta paginada usada pela listagem e a criação de índices.

Erros de banco são registrados e propagados; o handler global da aplicação
os converte em 500.
"""

# ========================
# --- Importações ---
# ========================
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING, ReturnDocument

# --- Módulos da Aplicação ---
from gerenciador_tarefas.db.mongodb_utils import get_next_sequence
from gerenciador_tarefas.models.task import Task, TaskCreate, TaskStatus

# ========================
# --- Configurações e Constantes ---
# ========================
logger = logging.getLogger(__name__)
TASKS_COLLECTION = "tarefas"
TASKS_SEQUENCE = "tarefas"
STATUS_LIST_LIMIT = 100

# ========================
# --- Funções Auxiliares (Internas) ---
# ========================
def _get_tasks_collection(db: AsyncIOMotorDatabase) -> AsyncIOMotorCollection:
    """Retorna a coleção de tarefas do banco de dados."""
    return db[TASKS_COLLECTION]

def _to_document(task: Task) -> Dict[str, Any]:
    """Converte a tarefa para o documento armazenado (snake_case, datas como BSON)."""
    document = task.model_dump()
    document["status"] = task.status.value
    return document

def _to_task(document: Dict[str, Any]) -> Optional[Task]:
    document.pop("_id", None)
    try:
        return Task.model_validate(document)
    except ValidationError as e:
        logger.error(f"Documento de tarefa inválido no DB (id={document.get('id', 'N/A')}): {e}")
        return None

async def _collect(cursor) -> List[Task]:
    tasks = []
    async for document in cursor:
        task = _to_task(document)
        if task is not None:
            tasks.append(task)
    return tasks

# ========================
# --- Operações CRUD para Tarefas ---
# ========================
async def create_task(db: AsyncIOMotorDatabase, task_in: TaskCreate, usuario_id: int) -> Task:
    """
    Cria uma nova tarefa para o usuário informado.

    O ID é gerado pela sequência `tarefas` e os timestamps são definidos aqui.

    Args:
        db: Instância da conexão com o banco de dados.
        task_in: Dados validados da nova tarefa.
        usuario_id: ID do proprietário (usuário autenticado).

    Returns:
        A tarefa criada.
    """
    now = datetime.now(timezone.utc)
    task = Task(
        id=await get_next_sequence(db, TASKS_SEQUENCE),
        usuario_id=usuario_id,
        created_at=now,
        updated_at=now,
        **task_in.model_dump(),
    )
    collection = _get_tasks_collection(db)
    try:
        await collection.insert_one(_to_document(task))
    except Exception as e:
        logger.exception(f"Erro no DB ao criar tarefa para usuário {usuario_id}: {e}")
        raise
    logger.info(f"Tarefa {task.id} criada para usuário {usuario_id}.")
    return task

async def get_task_by_id(db: AsyncIOMotorDatabase, task_id: int) -> Optional[Task]:
    """
    Busca uma tarefa pelo ID, sem filtrar pelo proprietário.
    A verificação de propriedade fica com quem chama, para distinguir 404 de 403.
    """
    collection = _get_tasks_collection(db)
    document = await collection.find_one({"id": task_id})
    if document is None:
        return None
    return _to_task(document)

async def find_page(
    db: AsyncIOMotorDatabase,
    query: Dict[str, Any],
    sort: List[Tuple[str, int]],
    skip: int,
    limit: int,
) -> Tuple[List[Task], int]:
    """
    Busca uma página de tarefas e o total de documentos que casam com o filtro.

    Args:
        db: Instância da conexão com o banco de dados.
        query: Filtro MongoDB.
        sort: Lista `(campo, direção)` no formato do PyMongo.
        skip: Quantidade de documentos a pular.
        limit: Tamanho máximo da página.

    Returns:
        Tupla `(tarefas da página, total)`.
    """
    collection = _get_tasks_collection(db)
    try:
        total = await collection.count_documents(query)
        cursor = collection.find(query).sort(sort).skip(skip).limit(limit)
        tasks = await _collect(cursor)
    except Exception as e:
        logger.exception(f"Erro no DB ao listar tarefas com filtro {query}: {e}")
        raise
    return tasks, total

async def list_tasks_by_status(
    db: AsyncIOMotorDatabase,
    usuario_id: int,
    status: TaskStatus,
    limit: int = STATUS_LIST_LIMIT,
) -> List[Task]:
    """Lista as tarefas do usuário com o status exato, mais recentes primeiro."""
    collection = _get_tasks_collection(db)
    cursor = (
        collection.find({"usuario_id": usuario_id, "status": status.value})
        .sort([("created_at", DESCENDING), ("id", ASCENDING)])
        .limit(limit)
    )
    return await _collect(cursor)

async def update_task(db: AsyncIOMotorDatabase, task_id: int, update_data: Dict[str, Any]) -> Optional[Task]:
    """
    Atualiza uma tarefa existente com os campos de `update_data`.
    O campo `updated_at` é atualizado automaticamente.

    Returns:
        A tarefa atualizada ou None se ela não existir.
    """
    to_set = dict(update_data)
    if isinstance(to_set.get("status"), TaskStatus):
        to_set["status"] = to_set["status"].value
    to_set["updated_at"] = datetime.now(timezone.utc)

    collection = _get_tasks_collection(db)
    try:
        document = await collection.find_one_and_update(
            {"id": task_id},
            {"$set": to_set},
            return_document=ReturnDocument.AFTER,
        )
    except Exception as e:
        logger.exception(f"Erro no DB ao atualizar tarefa {task_id}: {e}")
        raise

    if document is None:
        logger.warning(f"Tentativa de atualizar tarefa não encontrada: ID {task_id}")
        return None
    return _to_task(document)

async def delete_task(db: AsyncIOMotorDatabase, task_id: int) -> bool:
    """Remove a tarefa. Retorna True se um documento foi removido."""
    collection = _get_tasks_collection(db)
    delete_result = await collection.delete_one({"id": task_id})
    return delete_result.deleted_count == 1

async def delete_tasks_by_user(db: AsyncIOMotorDatabase, usuario_id: int) -> int:
    """Remove todas as tarefas de um usuário e retorna quantas foram removidas."""
    collection = _get_tasks_collection(db)
    delete_result = await collection.delete_many({"usuario_id": usuario_id})
    logger.info(f"{delete_result.deleted_count} tarefas removidas do usuário {usuario_id}.")
    return delete_result.deleted_count

# ========================
# --- Criação de Índices do Banco de Dados ---
# ========================
async def create_task_indexes(db: AsyncIOMotorDatabase):
    """
    Cria os índices da coleção de tarefas, se ainda não existirem.
    Chamada durante a inicialização da aplicação.
    """
    collection = _get_tasks_collection(db)
    try:
        await collection.create_index("id", unique=True, name="tarefa_id_unique_idx")
        await collection.create_index("usuario_id", name="tarefa_usuario_idx")
        await collection.create_index(
            [("usuario_id", ASCENDING), ("created_at", DESCENDING)],
            name="tarefa_usuario_created_at_idx"
        )
        logger.info("Índices da coleção 'tarefas' verificados/criados.")
    except Exception as e:
        logger.error(f"Erro ao criar índices da coleção 'tarefas': {e}", exc_info=True)
