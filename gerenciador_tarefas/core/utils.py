# gerenciador_tarefas/core/utils.py
"""
Módulo contendo funções utilitárias diversas para a aplicação.
Inclui a conversão de durações textuais ("1h", "7d") usadas na validade
dos tokens e a interpretação estrita de identificadores numéricos vindos
de parâmetros de rota.
"""

# ========================
# --- Importações ---
# ========================
import re
from datetime import timedelta
from typing import Optional, Union

# ========================
# --- Constantes ---
# ========================
_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
# Maior inteiro que o BSON armazena (int64)
MAX_MONGO_INT = 2**63 - 1

# ========================
# --- Duração de Tokens ---
# ========================
def parse_lifetime(value: Union[str, int, timedelta]) -> timedelta:
    """
    Converte uma duração para `timedelta`.

    Aceita `timedelta`, inteiro (segundos) ou string no formato
    `<número><unidade>` com unidades `s`, `m`, `h`, `d` ou `w`
    (ex: "30m", "24h", "7d"). Um número sem unidade é interpretado como segundos.

    Args:
        value: A duração a ser convertida.

    Returns:
        A duração como `timedelta`.

    Raises:
        ValueError: Se o formato não for reconhecido ou a duração não for positiva.
    """
    if isinstance(value, timedelta):
        lifetime = value
    elif isinstance(value, bool):
        raise ValueError(f"Duração inválida: {value!r}")
    elif isinstance(value, int):
        lifetime = timedelta(seconds=value)
    elif isinstance(value, str):
        match = _DURATION_PATTERN.match(value)
        if not match:
            raise ValueError(f"Duração inválida: {value!r}. Use formatos como '30m', '1h', '7d'.")
        amount, unit = match.groups()
        lifetime = timedelta(**{_DURATION_UNITS[unit]: int(amount)})
    else:
        raise ValueError(f"Duração inválida: {value!r}")

    if lifetime <= timedelta(0):
        raise ValueError(f"A duração deve ser positiva: {value!r}")
    return lifetime

# ========================
# --- Identificadores Numéricos ---
# ========================
def parse_int_id(value: Optional[str]) -> Optional[int]:
    """
    Interpreta um valor de parâmetro de rota como inteiro em base 10.

    Diferente de `int()`, não aceita separadores `_` nem espaços internos.
    Retorna None quando o valor não é um inteiro válido.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not _INTEGER_PATTERN.match(text):
        return None
    return int(text, 10)
