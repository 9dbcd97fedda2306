# gerenciador_tarefas/routers/usuarios.py
"""
Este módulo define as rotas da API relacionadas a usuários:
cadastro, login (emissão do token JWT), gerenciamento da conta do
usuário autenticado e consultas administrativas.
"""

# ========================
# --- Importações ---
# ========================
import logging
from typing import Annotated, List

from fastapi import APIRouter, Body, Depends, Path, Response, status
from pymongo.errors import DuplicateKeyError

# --- Módulos da Aplicação ---
from gerenciador_tarefas.core.authorization import require_admin, require_owner_or_role
from gerenciador_tarefas.core.dependencies import CurrentPrincipal, DbDep, TokenServiceDep
from gerenciador_tarefas.core.errors import (CredenciaisInvalidasError, EmailEmUsoError,
                                             UsuarioNaoEncontradoError)
from gerenciador_tarefas.core.security import verify_password
from gerenciador_tarefas.core.utils import MAX_MONGO_INT
from gerenciador_tarefas.db import task_crud, user_crud
from gerenciador_tarefas.models.user import LoginResponse, User, UserCreate, UserLogin, UserUpdate

# ========================
# --- Configurações e Constantes ---
# ========================
logger = logging.getLogger(__name__)

# ========================
# --- Configuração do Router ---
# ========================
router = APIRouter(
    prefix="/usuarios",
    tags=["Usuários"],
    responses={
        status.HTTP_401_UNAUTHORIZED: {"description": "Não autorizado (token ausente, inválido ou expirado)."},
    },
)

# ========================
# --- Endpoints Públicos ---
# ========================
@router.post(
    "/cadastro",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    summary="Cadastra um novo usuário",
    response_description="Dados do usuário recém-cadastrado (sem senha).",
    responses={status.HTTP_409_CONFLICT: {"description": "E-mail já cadastrado."}},
)
async def cadastrar_usuario(
    db: DbDep,
    user_in: Annotated[UserCreate, Body(description="Dados do novo usuário.")]
):
    """
    Cadastra um novo usuário.

    Verifica duplicidade de e-mail e cria o usuário com a senha hasheada.
    """
    if await user_crud.get_user_by_email(db, user_in.email):
        logger.info(f"Cadastro recusado: email '{user_in.email}' já cadastrado.")
        raise EmailEmUsoError()

    try:
        created_user = await user_crud.create_user(db=db, user_in=user_in)
    except DuplicateKeyError as e:
        raise EmailEmUsoError() from e
    return User.model_validate(created_user)

@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Autentica o usuário e emite um token JWT",
    response_description="Dados do usuário e o token de acesso.",
)
async def login(
    db: DbDep,
    token_service: TokenServiceDep,
    credentials: Annotated[UserLogin, Body(description="E-mail e senha.")]
):
    """
    Autentica por e-mail e senha.

    O token carrega `id`, `email` e o papel armazenado do usuário, quando houver.
    E-mail inexistente e senha incorreta produzem o mesmo erro.
    """
    user = await user_crud.get_user_by_email(db, credentials.email)
    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.info(f"Falha de login para '{credentials.email}'.")
        raise CredenciaisInvalidasError()

    token = token_service.issue(user)
    logger.info(f"Usuário {user.id} autenticado.")
    return LoginResponse(usuario=User.model_validate(user), token=token)

# ========================
# --- Endpoints do Usuário Autenticado ---
# ========================
@router.get(
    "/me",
    response_model=User,
    summary="Obtém dados do usuário autenticado",
)
async def read_usuario_logado(db: DbDep, principal: CurrentPrincipal):
    user = await user_crud.get_user_by_id(db, principal.id)
    if user is None:
        raise UsuarioNaoEncontradoError()
    return User.model_validate(user)

@router.put(
    "/me",
    response_model=User,
    summary="Atualiza nome e/ou e-mail do usuário autenticado",
    responses={status.HTTP_409_CONFLICT: {"description": "E-mail já em uso por outro usuário."}},
)
async def update_usuario_logado(
    db: DbDep,
    principal: CurrentPrincipal,
    user_update: Annotated[UserUpdate, Body(description="Campos a serem atualizados.")]
):
    """
    Atualiza os dados do usuário autenticado.
    Um e-mail que já pertence a outro usuário é recusado com 409.
    """
    if user_update.email is not None:
        existing = await user_crud.get_user_by_email(db, user_update.email)
        if existing is not None and existing.id != principal.id:
            raise EmailEmUsoError()

    try:
        updated_user = await user_crud.update_user(db=db, user_id=principal.id, user_update=user_update)
    except DuplicateKeyError as e:
        raise EmailEmUsoError() from e

    if updated_user is None:
        raise UsuarioNaoEncontradoError()
    return User.model_validate(updated_user)

@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a conta do usuário autenticado e suas tarefas",
)
async def delete_usuario_logado(db: DbDep, principal: CurrentPrincipal):
    if not await user_crud.delete_user(db=db, user_id=principal.id):
        raise UsuarioNaoEncontradoError()
    await task_crud.delete_tasks_by_user(db, principal.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# ========================
# --- Endpoints Protegidos por Papel ---
# ========================
@router.get(
    "/",
    response_model=List[User],
    summary="Lista todos os usuários (somente admin)",
    dependencies=[Depends(require_admin)],
    responses={status.HTTP_403_FORBIDDEN: {"description": "Permissões insuficientes."}},
)
async def list_usuarios(db: DbDep):
    users = await user_crud.list_users(db)
    return [User.model_validate(user) for user in users]

@router.get(
    "/{id}",
    response_model=User,
    summary="Obtém um usuário pelo ID (o próprio usuário ou admin)",
    dependencies=[Depends(require_owner_or_role("admin", "id"))],
    responses={status.HTTP_403_FORBIDDEN: {"description": "Acesso apenas aos próprios recursos."}},
)
async def read_usuario(
    db: DbDep,
    id: Annotated[int, Path(le=MAX_MONGO_INT, description="ID do usuário.")]
):
    user = await user_crud.get_user_by_id(db, id)
    if user is None:
        raise UsuarioNaoEncontradoError()
    return User.model_validate(user)
