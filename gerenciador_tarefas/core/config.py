# gerenciador_tarefas/core/config.py

# ========================
# --- Importações ---
# ========================
import os
import logging
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, ValidationError, field_validator, model_validator
from dotenv import load_dotenv

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.utils import parse_lifetime

# ===============================
# --- Configuração do Logger ---
# ===============================
logger = logging.getLogger(__name__)

# ===============================
# --- Carregamento do .env ---
# ===============================
# Define o caminho para o arquivo .env na raiz do projeto
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), '.env')
loaded = load_dotenv(dotenv_path=dotenv_path)

# ===============================
# --- Constantes ---
# ===============================
# Segredo usado apenas quando JWT_SECRET_KEY não é definido. NUNCA usar em produção.
INSECURE_DEV_JWT_SECRET = "chave_de_dev_insegura_temporaria"

# ======================================
# --- Definição das Configurações ---
# ======================================
class Settings(BaseSettings):
    """
    Configurações da aplicação lidas do ambiente usando Pydantic BaseSettings.
    Procura variáveis de ambiente ou variáveis em um arquivo .env.
    """
    # =========================
    # --- Config Gerais ---
    # =========================
    PROJECT_NAME: str = Field("Gerenciador de Tarefas API", description="Nome do Projeto")
    API_PREFIX: str = Field("/api", description="Prefixo das rotas da API")

    # =============================
    # --- Configurações MongoDB ---
    # =============================
    MONGODB_URL: str = Field(..., description="URL de conexão completa do MongoDB (obrigatória)")
    DATABASE_NAME: str = Field("gerenciador_tarefas_db", description="Nome do banco de dados MongoDB")

    # ===========================
    # --- Configurações JWT ---
    # ===========================
    JWT_SECRET_KEY: str = Field(
        INSECURE_DEV_JWT_SECRET,
        description="Chave secreta para assinar tokens JWT. O padrão é inseguro e serve apenas para desenvolvimento."
    )
    JWT_ALGORITHM: str = Field("HS256", description="Algoritmo de assinatura JWT")
    JWT_EXPIRES_IN: str = Field("7d", description="Validade padrão do token (ex: '1h', '24h', '7d')")

    # ===============================
    # --- Configuração de Logging ---
    # ===============================
    LOG_LEVEL: str = Field(default="INFO", description="Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)")

    # ===================================
    # --- Configurações CORS ---
    # ===================================
    CORS_ALLOWED_ORIGINS: List[str] = Field(default=[], description="Lista de origens CORS permitidas")

    model_config = {
        "case_sensitive": False,
    }

    # ===============================
    # --- Validadores ---
    # ===============================
    @field_validator("JWT_EXPIRES_IN")
    @classmethod
    def check_jwt_expires_in(cls, value: str) -> str:
        """Garante que a validade padrão do token seja uma duração positiva reconhecida."""
        parse_lifetime(value)
        return value

    @model_validator(mode='after')
    def check_jwt_secret(self) -> 'Settings':
        """Recusa segredo vazio e avisa quando o segredo inseguro de desenvolvimento está em uso."""
        if not self.JWT_SECRET_KEY or not self.JWT_SECRET_KEY.strip():
            raise ValueError("JWT_SECRET_KEY não pode ser vazio.")
        if self.JWT_SECRET_KEY == INSECURE_DEV_JWT_SECRET:
            logger.warning(
                "JWT_SECRET_KEY não definido: usando segredo INSEGURO de desenvolvimento. "
                "Defina JWT_SECRET_KEY antes de ir para produção."
            )
        return self

    @property
    def uses_insecure_jwt_secret(self) -> bool:
        return self.JWT_SECRET_KEY == INSECURE_DEV_JWT_SECRET

# ================================
# --- Criação da Instância ---
# ================================
try:
    settings = Settings()
except ValidationError as e:
    logger.critical(f"Erro fatal de validação ao carregar configurações: {e}")
    raise e
except Exception as e:
    logger.critical(f"Erro inesperado ao carregar configurações: {e}", exc_info=True)
    raise e
