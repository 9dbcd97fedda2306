# tests/conftest.py
# Inibir warnings de depreciação de bibliotecas
import warnings
warnings.filterwarnings("ignore", category=DeprecationWarning, module="passlib")

# ========================
# --- Configuração do Ambiente de Teste ---
# ========================
# Precisa acontecer antes de importar a aplicação: `settings` é criado na importação.
import os
from dotenv import load_dotenv
load_dotenv(dotenv_path='.env.test')
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "gerenciador_tarefas_test")
os.environ.setdefault("JWT_SECRET_KEY", "chave-secreta-exclusiva-dos-testes")
os.environ.setdefault("JWT_EXPIRES_IN", "1h")

"""
Fixtures do Pytest compartilhadas pela suíte de testes do Gerenciador de Tarefas.

Fixtures incluem:
- `mock_db`: banco MongoDB simulado (nenhum teste depende de um MongoDB real).
- `test_async_client`: cliente HTTP assíncrono (httpx) ligado à aplicação, com a
  dependência de banco substituída por `mock_db`.
- `auth_headers`: fábrica de cabeçalhos `Authorization` com tokens reais.
- Fábricas de objetos de domínio (`make_task`, `make_user`).
"""

# ========================
# --- Importações ---
# ========================
from datetime import datetime, timezone
from typing import AsyncGenerator, Callable, Dict, Optional
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.security import get_password_hash, token_service
from gerenciador_tarefas.db.mongodb_utils import get_database
from gerenciador_tarefas.main import app as fastapi_app
from gerenciador_tarefas.models.task import Task, TaskStatus
from gerenciador_tarefas.models.user import UserInDB

# ========================
# --- Constantes de Teste ---
# ========================
TEST_PASSWORD = "senhaSegura123"
FIXED_NOW = datetime(2025, 10, 26, 20, 19, 18, tzinfo=timezone.utc)

# ========================
# --- Banco Simulado ---
# ========================
@pytest.fixture
def mock_db() -> MagicMock:
    """Banco MongoDB simulado, injetado no lugar de `get_database`."""
    return MagicMock(name="mock_db")

# ========================
# --- Fixture Principal: Cliente de Teste HTTP ---
# ========================
@pytest_asyncio.fixture(scope="function")
async def test_async_client(mock_db: MagicMock) -> AsyncGenerator[AsyncClient, None]:
    """
    Cliente HTTP assíncrono que chama a aplicação diretamente (ASGITransport).
    O lifespan não é executado, então nenhuma conexão real com o MongoDB é aberta.
    """
    fastapi_app.dependency_overrides[get_database] = lambda: mock_db
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    fastapi_app.dependency_overrides.clear()

@pytest_asyncio.fixture(scope="function")
async def lenient_async_client(mock_db: MagicMock) -> AsyncGenerator[AsyncClient, None]:
    """Como `test_async_client`, mas devolve a resposta 500 em vez de propagar a exceção."""
    fastapi_app.dependency_overrides[get_database] = lambda: mock_db
    transport = ASGITransport(app=fastapi_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    fastapi_app.dependency_overrides.clear()

# ========================
# --- Autenticação ---
# ========================
@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Fábrica de cabeçalhos com um token válido para o usuário informado."""
    def _make(user_id: int = 1, email: str = "maria@example.com", role: Optional[str] = None) -> Dict[str, str]:
        subject = {"id": user_id, "email": email}
        if role is not None:
            subject["role"] = role
        return {"Authorization": f"Bearer {token_service.issue(subject)}"}
    return _make

# ========================
# --- Fábricas de Dados ---
# ========================
@pytest.fixture
def make_task() -> Callable[..., Task]:
    def _make(task_id: int = 1, usuario_id: int = 1, **overrides) -> Task:
        data = {
            "id": task_id,
            "titulo": f"Tarefa {task_id}",
            "descricao": "Descrição de teste",
            "status": TaskStatus.PENDING,
            "usuario_id": usuario_id,
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        }
        data.update(overrides)
        return Task(**data)
    return _make

@pytest.fixture(scope="session")
def hashed_test_password() -> str:
    """Hash bcrypt de `TEST_PASSWORD`, gerado uma vez por sessão."""
    return get_password_hash(TEST_PASSWORD)

@pytest.fixture
def make_user(hashed_test_password: str) -> Callable[..., UserInDB]:
    def _make(user_id: int = 1, email: str = "maria@example.com", role: Optional[str] = None, **overrides) -> UserInDB:
        data = {
            "id": user_id,
            "nome": "Maria Silva",
            "email": email,
            "hashed_password": hashed_test_password,
            "role": role,
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        }
        data.update(overrides)
        return UserInDB(**data)
    return _make
