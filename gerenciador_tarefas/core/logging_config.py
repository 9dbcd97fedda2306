# gerenciador_tarefas/core/logging_config.py
"""
Configuração do logging da aplicação com Loguru.

Os módulos da aplicação usam `logging.getLogger(__name__)`; o `InterceptHandler`
redireciona esses registros (e os de bibliotecas como Uvicorn e PyMongo) para
o Loguru, que centraliza formato e nível.
"""

# ========================
# --- Importações ---
# ========================
import logging
import sys

from loguru import logger as loguru_logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

# ========================
# --- Handler de Intercepção ---
# ========================
class InterceptHandler(logging.Handler):
    """Envia registros do `logging` padrão para o Loguru, preservando o nível."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Sobe a pilha até sair do módulo logging, para o Loguru apontar o chamador real
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())

# ========================
# --- Função de Setup ---
# ========================
def setup_logging(log_level: str = "INFO"):
    """
    Configura o logging global: um único sink Loguru em stderr e o `logging`
    padrão roteado para ele.

    Args:
        log_level: Nível mínimo de log (ex: "INFO", "DEBUG").
    """
    log_level = log_level.upper()

    loguru_logger.remove()
    loguru_logger.add(
        sys.stderr,
        level=log_level,
        format=LOG_FORMAT,
        enqueue=True,
        diagnose=False,  # não expõe valores de variáveis nos tracebacks
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    logging.getLogger("uvicorn.access").disabled = True
    logging.getLogger("uvicorn.error").propagate = False
    # O driver do MongoDB é verboso em DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    loguru_logger.disable("httpx")
