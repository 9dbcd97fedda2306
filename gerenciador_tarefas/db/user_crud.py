# gerenciador_tarefas/db/user_crud.py
"""
Módulo contendo as funções CRUD (Create, Read, Update, Delete)
para interagir com a coleção de usuários no MongoDB.
Inclui também a criação de índices.
"""

# ========================
# --- Importações ---
# ========================
import logging
from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.security import get_password_hash
from gerenciador_tarefas.db.mongodb_utils import get_next_sequence
from gerenciador_tarefas.models.user import UserCreate, UserInDB, UserUpdate

# ========================
# --- Configurações e Constantes ---
# ========================
logger = logging.getLogger(__name__)
USERS_COLLECTION = "usuarios"
USERS_SEQUENCE = "usuarios"

# ========================
# --- Funções Auxiliares (Internas) ---
# ========================
def _get_users_collection(db: AsyncIOMotorDatabase) -> AsyncIOMotorCollection:
    """Retorna a coleção de usuários do banco de dados."""
    return db[USERS_COLLECTION]

def _to_user(document: dict) -> Optional[UserInDB]:
    document.pop("_id", None)
    try:
        return UserInDB.model_validate(document)
    except ValidationError as e:
        logger.error(f"Documento de usuário inválido no DB (id={document.get('id', 'N/A')}): {e}")
        return None

# ========================
# --- Operações CRUD para Usuários ---
# ========================
async def get_user_by_id(db: AsyncIOMotorDatabase, user_id: int) -> Optional[UserInDB]:
    """
    Busca um usuário pelo seu ID.

    Returns:
        Um objeto UserInDB se o usuário for encontrado e válido, None caso contrário.
    """
    collection = _get_users_collection(db)
    document = await collection.find_one({"id": user_id})
    return _to_user(document) if document else None

async def get_user_by_email(db: AsyncIOMotorDatabase, email: str) -> Optional[UserInDB]:
    """
    Busca um usuário pelo e-mail (já normalizado em minúsculas).

    Returns:
        Um objeto UserInDB se o usuário for encontrado e válido, None caso contrário.
    """
    collection = _get_users_collection(db)
    document = await collection.find_one({"email": email})
    return _to_user(document) if document else None

async def list_users(db: AsyncIOMotorDatabase) -> List[UserInDB]:
    """Lista todos os usuários em ordem de ID."""
    collection = _get_users_collection(db)
    users = []
    async for document in collection.find({}).sort("id", ASCENDING):
        user = _to_user(document)
        if user is not None:
            users.append(user)
    return users

async def create_user(db: AsyncIOMotorDatabase, user_in: UserCreate) -> UserInDB:
    """
    Cria um novo usuário no banco de dados, com a senha hasheada.

    Novos usuários não recebem papel: o papel efetivo deles é "user".

    Raises:
        DuplicateKeyError: Se o e-mail já estiver cadastrado (índice único).
    """
    now = datetime.now(timezone.utc)
    user_db_obj = UserInDB(
        id=await get_next_sequence(db, USERS_SEQUENCE),
        nome=user_in.nome,
        email=user_in.email,
        hashed_password=get_password_hash(user_in.password),
        created_at=now,
        updated_at=now,
    )

    collection = _get_users_collection(db)
    try:
        await collection.insert_one(user_db_obj.model_dump())
    except DuplicateKeyError:
        logger.warning(f"Tentativa de criar usuário com email duplicado: {user_in.email}")
        raise
    except Exception as e:
        logger.exception(f"Erro inesperado ao inserir usuário {user_in.email} no DB: {e}")
        raise
    logger.info(f"Usuário {user_db_obj.id} criado.")
    return user_db_obj

async def update_user(db: AsyncIOMotorDatabase, user_id: int, user_update: UserUpdate) -> Optional[UserInDB]:
    """
    Atualiza nome e/ou e-mail de um usuário. O campo `updated_at` é
    atualizado automaticamente.

    Returns:
        O usuário atualizado ou None se ele não existir.

    Raises:
        DuplicateKeyError: Se o novo e-mail pertencer a outro usuário.
    """
    update_data = user_update.model_dump(exclude_none=True)
    update_data["updated_at"] = datetime.now(timezone.utc)

    collection = _get_users_collection(db)
    try:
        document = await collection.find_one_and_update(
            {"id": user_id},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        logger.warning(f"Atualização do usuário {user_id} resultou em email duplicado: {update_data.get('email')}")
        raise

    if document is None:
        logger.warning(f"Tentativa de atualizar usuário não encontrado: ID {user_id}")
        return None
    return _to_user(document)

async def delete_user(db: AsyncIOMotorDatabase, user_id: int) -> bool:
    """
    Deleta um usuário pelo ID.

    Returns:
        True se o usuário foi removido, False se não existia.
    """
    collection = _get_users_collection(db)
    delete_result = await collection.delete_one({"id": user_id})
    if delete_result.deleted_count == 1:
        logger.info(f"Usuário {user_id} removido.")
        return True
    logger.warning(f"Tentativa de remover usuário {user_id}, mas ele não foi encontrado.")
    return False

# ========================
# --- Configuração de Índices do Banco de Dados ---
# ========================
async def create_user_indexes(db: AsyncIOMotorDatabase):
    """
    Cria os índices da coleção de usuários (ID e e-mail únicos),
    se ainda não existirem. Chamada durante a inicialização da aplicação.
    """
    collection = _get_users_collection(db)
    try:
        await collection.create_index("id", unique=True, name="usuario_id_unique_idx")
        await collection.create_index("email", unique=True, name="email_unique_idx")
        logger.info("Índices da coleção 'usuarios' ('id', 'email') verificados/criados com sucesso.")
    except Exception as e:
        logger.error(f"Erro ao criar índices para a coleção 'usuarios': {e}", exc_info=True)
