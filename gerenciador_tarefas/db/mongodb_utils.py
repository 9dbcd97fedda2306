# gerenciador_tarefas/db/mongodb_utils.py
"""
Este módulo gerencia a conexão com o banco de dados MongoDB.
Inclui funções para conectar, fechar a conexão, obter a instância do banco
de dados, verificar a saúde da conexão e gerar IDs inteiros sequenciais.
Utiliza a biblioteca Motor para interações assíncronas com o MongoDB.
"""

# ========================
# --- Importações ---
# ========================
import logging
from typing import Optional

import motor.motor_asyncio
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.config import settings

# ========================
# --- Configuração do Logger ---
# ========================
logger = logging.getLogger(__name__)

COUNTERS_COLLECTION = "counters"

# ========================
# --- Variáveis Globais de Conexão ---
# ========================
db_client: Optional[AsyncIOMotorClient] = None
db_instance: Optional[AsyncIOMotorDatabase] = None

# ========================
# --- Função de Conexão ---
# ========================
async def connect_to_mongo() -> Optional[AsyncIOMotorDatabase]:
    """
    Estabelece a conexão com o MongoDB.

    Cria um cliente AsyncIOMotorClient, verifica a conexão com um comando 'ping',
    e define as variáveis globais `db_client` e `db_instance`.

    Returns:
        A instância AsyncIOMotorDatabase se a conexão for bem-sucedida, None caso contrário.
    """
    global db_client, db_instance
    logger.info("Tentando conectar ao MongoDB...")
    try:
        db_client = motor.motor_asyncio.AsyncIOMotorClient(
            settings.MONGODB_URL,
            serverSelectionTimeoutMS=5000,
            tz_aware=True,
        )
        await db_client.admin.command("ping")
        logger.info("Comando ping para MongoDB bem-sucedido.")

        db_instance = db_client[settings.DATABASE_NAME]
        logger.info(f"Conectado com sucesso ao banco de dados: {settings.DATABASE_NAME}")
        return db_instance

    except Exception as e:
        logger.error(f"Não foi possível conectar ao MongoDB: {e}", exc_info=True)
        db_client = None
        db_instance = None
        return None

# ========================
# --- Função de Fechamento de Conexão ---
# ========================
async def close_mongo_connection():
    """Fecha a conexão com o MongoDB, se houver uma aberta."""
    global db_client, db_instance
    logger.info("Tentando fechar conexão com MongoDB...")
    if db_client:
        db_client.close()
        db_client = None
        db_instance = None
        logger.info("Conexão com MongoDB fechada.")
    else:
        logger.warning("Tentativa de fechar conexão com MongoDB, mas cliente não estava inicializado.")

# ========================
# --- Função de Acesso ao DB ---
# ========================
def get_database() -> AsyncIOMotorDatabase:
    """
    Retorna a instância global do banco de dados MongoDB.

    Usada como dependência FastAPI ou chamada por outras partes da aplicação.

    Raises:
        RuntimeError: Se chamada antes de `connect_to_mongo` inicializar `db_instance`.
    """
    if db_instance is None:
        logger.error("Tentativa de obter instância do DB antes da inicialização!")
        raise RuntimeError("A conexão com o banco de dados não foi inicializada.")
    return db_instance

# ========================
# --- Verificação de Saúde ---
# ========================
async def check_mongo_connection() -> bool:
    """
    Verifica se a conexão atual com o MongoDB responde a um 'ping'.

    Returns:
        True se o MongoDB responder, False se não houver conexão ou o ping falhar.
    """
    if db_client is None:
        return False
    try:
        await db_client.admin.command("ping")
        return True
    except Exception as e:
        logger.warning(f"Ping ao MongoDB falhou: {e}")
        return False

# ========================
# --- Geração de IDs ---
# ========================
async def get_next_sequence(db: AsyncIOMotorDatabase, name: str) -> int:
    """
    Gera o próximo ID inteiro da sequência `name`.

    O incremento é atômico no MongoDB (`$inc` com upsert), então requisições
    concorrentes nunca recebem o mesmo ID.
    """
    counter = await db[COUNTERS_COLLECTION].find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return int(counter["seq"])
