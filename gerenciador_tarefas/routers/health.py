# gerenciador_tarefas/routers/health.py

# ========================
# --- Importações ---
# ========================
from fastapi import APIRouter
from fastapi.responses import JSONResponse

# --- Módulos da Aplicação ---
from gerenciador_tarefas.db import mongodb_utils

# ========================
# --- Configuração do Router ---
# ========================
router = APIRouter()

# ========================
# --- Rotas da API ---
# ========================
@router.get("/health", tags=["Health"])
async def health_check():
    # MongoDB é a única dependência externa
    if not await mongodb_utils.check_mongo_connection():
        return JSONResponse(content={"status": "error", "message": "MongoDB não está disponível"}, status_code=503)

    return JSONResponse(content={"status": "ok"})
