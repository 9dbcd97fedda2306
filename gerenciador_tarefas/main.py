# gerenciador_tarefas/main.py
"""
Ponto de entrada principal e configuração da aplicação FastAPI do
Gerenciador de Tarefas. Define a instância da aplicação, middlewares,
rotas, handlers de erro, ciclo de vida (lifespan) e o endpoint raiz.
"""

# ========================
# --- Importações ---
# ========================
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.config import Settings, settings
from gerenciador_tarefas.core.errors import AppError, DadosInvalidosError
from gerenciador_tarefas.core.logging_config import setup_logging
from gerenciador_tarefas.db.mongodb_utils import close_mongo_connection, connect_to_mongo
from gerenciador_tarefas.db.task_crud import create_task_indexes
from gerenciador_tarefas.db.user_crud import create_user_indexes
from gerenciador_tarefas.routers import health, tarefas, usuarios

# ========================
# --- Configuração de Logging ---
# ========================
setup_logging(log_level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ========================
# --- Função de Setup do Middleware CORS ---
# ========================
def _setup_cors_middleware(app_instance: FastAPI, current_settings: Settings):
    """Configura o middleware CORS para a aplicação."""
    if current_settings.CORS_ALLOWED_ORIGINS:
        logger.info(f"Configurando CORS para origens: {current_settings.CORS_ALLOWED_ORIGINS}")
        app_instance.add_middleware(
            CORSMiddleware,
            allow_origins=current_settings.CORS_ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        logger.warning(
            "Nenhuma origem CORS configurada (settings.CORS_ALLOWED_ORIGINS está vazia). "
            "API pode não ser acessível de frontends em outros domínios."
        )

# ========================
# --- Ciclo de Vida (Lifespan) ---
# ========================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Conecta ao MongoDB e cria índices no startup; fecha a conexão no shutdown.
    """
    logger.info("Iniciando ciclo de vida da aplicação...")
    if settings.uses_insecure_jwt_secret:
        logger.warning("Tokens estão sendo assinados com o segredo INSEGURO de desenvolvimento.")

    db_connection = await connect_to_mongo()
    if db_connection is None:
        logger.critical("Falha fatal ao conectar ao MongoDB na inicialização. App pode não funcionar corretamente.")
        yield
        logger.info("Encerrando ciclo de vida (conexão DB falhou no início).")
        return

    app.state.db = db_connection
    try:
        await create_user_indexes(db_connection)
        await create_task_indexes(db_connection)
        logger.info("Criação/verificação de índices concluída.")
    except Exception as e:
        logger.error(f"Erro durante a criação de índices: {e}", exc_info=True)

    logger.info("Aplicação iniciada e pronta.")
    yield

    logger.info("Iniciando processo de encerramento...")
    await close_mongo_connection()
    logger.info("Aplicação encerrada.")

# ========================
# --- Handlers de Erro ---
# ========================
def _validation_details(exc: RequestValidationError) -> List[Dict[str, Any]]:
    detalhes = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        ctx_error = (err.get("ctx") or {}).get("error")
        detalhes.append({
            "campo": ".".join(loc) or "body",
            "mensagem": str(ctx_error) if ctx_error is not None else err.get("msg", "Valor inválido"),
        })
    return detalhes

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} em {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=exc.headers)

async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    detalhes = _validation_details(exc)
    logger.info(f"Dados inválidos em {request.method} {request.url.path}: {detalhes}")
    error = DadosInvalidosError(detalhes=detalhes)
    return JSONResponse(status_code=error.status_code, content=error.to_payload())

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": "Rota não encontrada.", "path": request.url.path},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Erro não tratado em {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Erro interno do servidor"},
    )

def _register_exception_handlers(app_instance: FastAPI):
    app_instance.add_exception_handler(AppError, app_error_handler)
    app_instance.add_exception_handler(RequestValidationError, validation_error_handler)
    app_instance.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app_instance.add_exception_handler(Exception, unhandled_error_handler)

# ========================
# --- Instância FastAPI ---
# ========================
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API RESTful multiusuário para gerenciamento de tarefas, com autenticação JWT.",
    version="0.1.0",
    lifespan=lifespan
)

# ========================
# --- Configuração de Middlewares e Handlers ---
# ========================
_setup_cors_middleware(app, settings)
_register_exception_handlers(app)

# ========================
# --- Rotas (Routers) ---
# ========================
app.include_router(usuarios.router, prefix=settings.API_PREFIX)
app.include_router(tarefas.router, prefix=settings.API_PREFIX)
app.include_router(health.router)

# ========================
# --- Endpoint Raiz ---
# ========================
@app.get("/", tags=["Root"])
async def read_root():
    """Endpoint raiz para verificar se a API está online."""
    return {"message": f"Bem-vindo à {settings.PROJECT_NAME}!"}

# ========================
# --- Execução (Uvicorn) ---
# ========================
if __name__ == "__main__": # pragma: no cover
    import uvicorn
    logger.info("Iniciando servidor Uvicorn para desenvolvimento...")
    uvicorn.run(
        "gerenciador_tarefas.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
