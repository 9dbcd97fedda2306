# tests/test_tarefas.py
"""
Testes de integração (nível HTTP) para as rotas de tarefas (`/api/tarefas`).

O acesso ao banco é substituído por mocks das funções de `task_crud`; os
testes verificam o escopo por usuário, a validação dos filtros antes da
consulta, a checagem de propriedade e o formato das respostas.
"""

# ========================
# --- Importações ---
# ========================
from unittest.mock import AsyncMock

import pytest
from fastapi import status
from httpx import AsyncClient

# --- Módulos da Aplicação ---
from gerenciador_tarefas.models.task import TaskStatus

# ========================
# --- Marcador Global de Teste ---
# ========================
pytestmark = pytest.mark.asyncio

TASK_CRUD = "gerenciador_tarefas.db.task_crud"

# ========================
# --- Criação ---
# ========================
async def test_create_tarefa_uses_authenticated_owner(test_async_client: AsyncClient, auth_headers, mocker, make_task):
    # --- Arrange ---
    create_task = mocker.patch(
        f"{TASK_CRUD}.create_task", new_callable=AsyncMock, return_value=make_task(task_id=10, usuario_id=3)
    )
    payload = {"titulo": "  Escrever testes  ", "descricao": "Cobrir rotas", "usuarioId": 99}

    # --- Act ---
    response = await test_async_client.post("/api/tarefas/", json=payload, headers=auth_headers(user_id=3))

    # --- Assert ---
    assert response.status_code == status.HTTP_201_CREATED, response.text
    body = response.json()
    assert body["id"] == 10
    assert body["usuarioId"] == 3
    assert body["createdAt"].startswith("2025-10-26T20:19:18")
    task_in = create_task.await_args.args[1]
    assert task_in.titulo == "Escrever testes", "O título deve ser salvo sem espaços nas pontas."
    assert create_task.await_args.kwargs["usuario_id"] == 3, "O proprietário vem do token, não do corpo."

async def test_create_tarefa_with_invalid_status_returns_400(test_async_client: AsyncClient, auth_headers, mocker):
    create_task = mocker.patch(f"{TASK_CRUD}.create_task", new_callable=AsyncMock)

    response = await test_async_client.post(
        "/api/tarefas/", json={"titulo": "X", "status": "arquivada"}, headers=auth_headers()
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    create_task.assert_not_awaited()

async def test_create_tarefa_without_token_returns_401(test_async_client: AsyncClient, mocker):
    create_task = mocker.patch(f"{TASK_CRUD}.create_task", new_callable=AsyncMock)

    response = await test_async_client.post("/api/tarefas/", json={"titulo": "X"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    create_task.assert_not_awaited()

# ========================
# --- Listagem Paginada ---
# ========================
async def test_list_tarefas_is_scoped_to_authenticated_user(test_async_client: AsyncClient, auth_headers, mocker, make_task):
    find_page = mocker.patch(
        f"{TASK_CRUD}.find_page",
        new_callable=AsyncMock,
        return_value=([make_task(task_id=1, usuario_id=3), make_task(task_id=2, usuario_id=3)], 7),
    )

    response = await test_async_client.get(
        "/api/tarefas/",
        params={"usuarioId": "99", "page": "2", "limit": "2", "status": "pendente"},
        headers=auth_headers(user_id=3),
    )

    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()["total"] == 7
    assert response.json()["page"] == 2
    assert response.json()["totalPages"] == 4
    assert len(response.json()["data"]) == 2

    _, query, sort, skip, limit = find_page.await_args.args
    assert query == {"usuario_id": 3, "status": "pendente"}, "O usuarioId da query deve ser ignorado."
    assert sort == [("created_at", -1), ("id", 1)]
    assert (skip, limit) == (2, 2)

async def test_list_tarefas_with_explicit_sort(test_async_client: AsyncClient, auth_headers, mocker):
    find_page = mocker.patch(f"{TASK_CRUD}.find_page", new_callable=AsyncMock, return_value=([], 0))

    response = await test_async_client.get(
        "/api/tarefas/",
        params={"ordenarPor": "titulo", "ordenarDirecao": "ASC", "titulo": "relat"},
        headers=auth_headers(user_id=3),
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"data": [], "total": 0, "page": 1, "limit": 25, "totalPages": 0}
    _, query, sort, _, _ = find_page.await_args.args
    assert query["titulo"] == {"$regex": "relat"}
    assert sort == [("titulo", 1), ("id", 1)]

@pytest.mark.parametrize(
    "params",
    [
        {"status": "arquivada"},
        {"page": "0"},
        {"limit": "101"},
        {"ordenarPor": "senha"},
        {"ordenarDirecao": "asc"},
        {"criadoApos": "ontem"},
        {"criadoApos": "2025-02-01T00:00:00Z", "criadoAntes": "2025-01-01T00:00:00Z"},
    ],
)
async def test_list_tarefas_invalid_filter_returns_400_without_querying(
    test_async_client: AsyncClient, auth_headers, mocker, params
):
    find_page = mocker.patch(f"{TASK_CRUD}.find_page", new_callable=AsyncMock)

    response = await test_async_client.get("/api/tarefas/", params=params, headers=auth_headers())

    assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text
    assert response.json()["success"] is False
    assert response.json()["detalhes"], "Cada campo inválido deve ser detalhado."
    find_page.assert_not_awaited()

async def test_list_tarefas_invalid_status_message(test_async_client: AsyncClient, auth_headers, mocker):
    mocker.patch(f"{TASK_CRUD}.find_page", new_callable=AsyncMock)

    response = await test_async_client.get("/api/tarefas/", params={"status": "arquivada"}, headers=auth_headers())

    assert response.json()["message"] == (
        "Status inválido: arquivada. Status válidos: pendente, em_andamento, concluida"
    )

# ========================
# --- Listagem por Status ---
# ========================
async def test_list_by_status(test_async_client: AsyncClient, auth_headers, mocker, make_task):
    list_by_status = mocker.patch(
        f"{TASK_CRUD}.list_tasks_by_status",
        new_callable=AsyncMock,
        return_value=[make_task(task_id=4, usuario_id=3, status=TaskStatus.COMPLETED)],
    )

    response = await test_async_client.get("/api/tarefas/status/concluida", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_200_OK
    assert [t["id"] for t in response.json()] == [4]
    assert list_by_status.await_args.args[1:] == (3, TaskStatus.COMPLETED)

async def test_list_by_invalid_status_returns_400(test_async_client: AsyncClient, auth_headers, mocker):
    list_by_status = mocker.patch(f"{TASK_CRUD}.list_tasks_by_status", new_callable=AsyncMock)

    response = await test_async_client.get("/api/tarefas/status/arquivada", headers=auth_headers())

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"].startswith("Status inválido: arquivada.")
    list_by_status.assert_not_awaited()

async def test_list_by_status_ignores_case(test_async_client: AsyncClient, auth_headers, mocker):
    list_by_status = mocker.patch(f"{TASK_CRUD}.list_tasks_by_status", new_callable=AsyncMock, return_value=[])

    response = await test_async_client.get("/api/tarefas/status/PENDENTE", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_200_OK
    assert list_by_status.await_args.args[1:] == (3, TaskStatus.PENDING)

# ========================
# --- Listagem por Usuário (proprietário ou admin) ---
# ========================
async def test_list_by_usuario_as_owner(test_async_client: AsyncClient, auth_headers, mocker):
    find_page = mocker.patch(f"{TASK_CRUD}.find_page", new_callable=AsyncMock, return_value=([], 0))

    response = await test_async_client.get("/api/tarefas/usuario/3", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_200_OK
    assert find_page.await_args.args[1] == {"usuario_id": 3}

async def test_list_by_usuario_of_other_user_returns_403(test_async_client: AsyncClient, auth_headers, mocker):
    find_page = mocker.patch(f"{TASK_CRUD}.find_page", new_callable=AsyncMock)

    response = await test_async_client.get("/api/tarefas/usuario/4", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"success": False, "message": "Acesso negado. Você só pode acessar seus próprios recursos."}
    find_page.assert_not_awaited()

async def test_list_by_usuario_as_admin(test_async_client: AsyncClient, auth_headers, mocker):
    find_page = mocker.patch(f"{TASK_CRUD}.find_page", new_callable=AsyncMock, return_value=([], 0))

    response = await test_async_client.get(
        "/api/tarefas/usuario/4", headers=auth_headers(user_id=1, role="admin")
    )

    assert response.status_code == status.HTTP_200_OK
    assert find_page.await_args.args[1] == {"usuario_id": 4}

# ========================
# --- Leitura, Atualização e Remoção ---
# ========================
async def test_read_tarefa_owned(test_async_client: AsyncClient, auth_headers, mocker, make_task):
    mocker.patch(f"{TASK_CRUD}.get_task_by_id", new_callable=AsyncMock, return_value=make_task(task_id=5, usuario_id=3))

    response = await test_async_client.get("/api/tarefas/5", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["titulo"] == "Tarefa 5"

async def test_read_tarefa_not_found(test_async_client: AsyncClient, auth_headers, mocker):
    mocker.patch(f"{TASK_CRUD}.get_task_by_id", new_callable=AsyncMock, return_value=None)

    response = await test_async_client.get("/api/tarefas/5", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"success": False, "message": "Tarefa não encontrada"}

async def test_read_tarefa_of_other_user_returns_403(test_async_client: AsyncClient, auth_headers, mocker, make_task):
    mocker.patch(f"{TASK_CRUD}.get_task_by_id", new_callable=AsyncMock, return_value=make_task(task_id=5, usuario_id=8))

    response = await test_async_client.get("/api/tarefas/5", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["message"] == "Usuário não tem permissão para esta operação"

async def test_update_tarefa_sends_only_provided_fields(test_async_client: AsyncClient, auth_headers, mocker, make_task):
    mocker.patch(f"{TASK_CRUD}.get_task_by_id", new_callable=AsyncMock, return_value=make_task(task_id=5, usuario_id=3))
    update_task = mocker.patch(
        f"{TASK_CRUD}.update_task",
        new_callable=AsyncMock,
        return_value=make_task(task_id=5, usuario_id=3, status=TaskStatus.IN_PROGRESS),
    )

    response = await test_async_client.put(
        "/api/tarefas/5", json={"status": "em_andamento"}, headers=auth_headers(user_id=3)
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "em_andamento"
    assert update_task.await_args.args[1:] == (5, {"status": TaskStatus.IN_PROGRESS})

async def test_update_tarefa_with_empty_body_returns_400(test_async_client: AsyncClient, auth_headers, mocker):
    update_task = mocker.patch(f"{TASK_CRUD}.update_task", new_callable=AsyncMock)

    response = await test_async_client.put("/api/tarefas/5", json={}, headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    update_task.assert_not_awaited()

async def test_update_tarefa_of_other_user_is_not_applied(test_async_client: AsyncClient, auth_headers, mocker, make_task):
    mocker.patch(f"{TASK_CRUD}.get_task_by_id", new_callable=AsyncMock, return_value=make_task(task_id=5, usuario_id=8))
    update_task = mocker.patch(f"{TASK_CRUD}.update_task", new_callable=AsyncMock)

    response = await test_async_client.put("/api/tarefas/5", json={"titulo": "Novo"}, headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_403_FORBIDDEN
    update_task.assert_not_awaited()

async def test_delete_tarefa(test_async_client: AsyncClient, auth_headers, mocker, make_task):
    mocker.patch(f"{TASK_CRUD}.get_task_by_id", new_callable=AsyncMock, return_value=make_task(task_id=5, usuario_id=3))
    delete_task = mocker.patch(f"{TASK_CRUD}.delete_task", new_callable=AsyncMock, return_value=True)

    response = await test_async_client.delete("/api/tarefas/5", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert response.content == b""
    assert delete_task.await_args.args[1] == 5

async def test_read_tarefa_with_non_numeric_id_returns_400(test_async_client: AsyncClient, auth_headers):
    response = await test_async_client.get("/api/tarefas/abc", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detalhes"][0]["campo"] == "id"

# ========================
# --- Atalhos de Status ---
# ========================
@pytest.mark.parametrize(
    ("action", "expected_status"),
    [("concluir", TaskStatus.COMPLETED), ("pendente", TaskStatus.PENDING)],
)
async def test_status_shortcuts(test_async_client: AsyncClient, auth_headers, mocker, make_task, action, expected_status):
    mocker.patch(f"{TASK_CRUD}.get_task_by_id", new_callable=AsyncMock, return_value=make_task(task_id=5, usuario_id=3))
    update_task = mocker.patch(
        f"{TASK_CRUD}.update_task",
        new_callable=AsyncMock,
        return_value=make_task(task_id=5, usuario_id=3, status=expected_status),
    )

    response = await test_async_client.patch(f"/api/tarefas/5/{action}", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == expected_status.value
    update_task.assert_awaited_once()
    assert update_task.await_args.args[1:] == (5, {"status": expected_status})

async def test_status_shortcut_on_missing_task_returns_404(test_async_client: AsyncClient, auth_headers, mocker):
    mocker.patch(f"{TASK_CRUD}.get_task_by_id", new_callable=AsyncMock, return_value=None)
    update_task = mocker.patch(f"{TASK_CRUD}.update_task", new_callable=AsyncMock)

    response = await test_async_client.patch("/api/tarefas/5/concluir", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_404_NOT_FOUND
    update_task.assert_not_awaited()

# ========================
# --- Limites de Inteiros (int64) ---
# ========================
async def test_list_tarefas_with_page_beyond_int64_returns_400(test_async_client: AsyncClient, auth_headers, mocker):
    find_page = mocker.patch(f"{TASK_CRUD}.find_page", new_callable=AsyncMock)

    response = await test_async_client.get(
        "/api/tarefas/", params={"page": str(10**18), "limit": "100"}, headers=auth_headers()
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert [d["campo"] for d in response.json()["detalhes"]] == ["page"]
    find_page.assert_not_awaited()

async def test_read_tarefa_with_id_beyond_int64_returns_400(test_async_client: AsyncClient, auth_headers, mocker):
    get_task = mocker.patch(f"{TASK_CRUD}.get_task_by_id", new_callable=AsyncMock)

    response = await test_async_client.get(f"/api/tarefas/{2**63}", headers=auth_headers(user_id=3))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detalhes"][0]["campo"] == "id"
    get_task.assert_not_awaited()

async def test_list_by_usuario_beyond_int64_as_admin_returns_400(test_async_client: AsyncClient, auth_headers, mocker):
    find_page = mocker.patch(f"{TASK_CRUD}.find_page", new_callable=AsyncMock)

    response = await test_async_client.get(
        f"/api/tarefas/usuario/{2**63}", headers=auth_headers(user_id=1, role="admin")
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    find_page.assert_not_awaited()
