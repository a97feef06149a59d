from conftest import TEST_USER


def test_notifications_require_login(client):
    assert client.get("/api/notifications/count").status_code == 401
    assert client.get("/api/notifications/tasks").status_code == 401
    assert client.get("/api/motivational-phrase").status_code == 401
    assert client.put("/api/motivational-phrase", json={"phrase": "Hola"}).status_code == 401
    assert client.get("/api/stats").status_code == 401


def test_notifications_for_current_user(logged_in_client, app_storage):
    """
    GIVEN tareas asignadas al usuario de la sesión y a otros
    WHEN consulta sus notificaciones
    THEN solo ve sus tareas pendientes, ordenadas, y el contador coincide
    """
    email = TEST_USER["email"]
    app_storage.create_task({"title": "media", "assignedTo": email})
    app_storage.create_task({"title": "urgente", "assignedTo": email, "priority": "urgente"})
    app_storage.create_task({"title": "hecha", "assignedTo": email, "status": "completada"})
    app_storage.create_task({"title": "de otro", "assignedTo": "javier@gestoria-ejemplo.es"})

    tasks = logged_in_client.get("/api/notifications/tasks").get_json()
    count = logged_in_client.get("/api/notifications/count").get_json()

    assert [t["title"] for t in tasks] == ["urgente", "media"]
    assert tasks[0]["assignedUserName"] == "Ana García"
    assert count == {"count": len(tasks)}


def test_motivational_phrase_default_then_update(logged_in_client, database):
    default = logged_in_client.get("/api/motivational-phrase")
    assert default.status_code == 200
    assert default.get_json() == {"phrase": "¡Vamos por un día productivo! 💪"}
    assert database.motivational_phrases.count_documents({}) == 0

    logged_in_client.put("/api/motivational-phrase", json={"phrase": "Primera"})
    updated = logged_in_client.put("/api/motivational-phrase", json={"phrase": "Hoy cerramos el trimestre"})

    assert updated.status_code == 200
    assert updated.get_json() == {"phrase": "Hoy cerramos el trimestre"}
    assert logged_in_client.get("/api/motivational-phrase").get_json()["phrase"] == "Hoy cerramos el trimestre"
    assert database.motivational_phrases.count_documents({"userEmail": TEST_USER["email"]}) == 1


def test_motivational_phrase_validation(logged_in_client):
    for payload in ({}, {"phrase": ""}, {"phrase": 5}, {"phrase": None}):
        response = logged_in_client.put("/api/motivational-phrase", json=payload)
        assert response.status_code == 400
        assert "phrase" in response.get_json()["errors"]


def test_stats(logged_in_client, app_storage):
    app_storage.create_client({"name": "Marta", "email": "marta@example.com", "phone": "600111222"})
    app_storage.create_client({
        "name": "Pedro", "email": "pedro@example.com", "phone": "600333444", "status": "en-tareas",
    })
    app_storage.create_task({"title": "pendiente"})

    stats = logged_in_client.get("/api/stats").get_json()

    assert stats["totalClients"] == 2
    assert stats["pendingTasks"] == 1
    assert set(stats["pipelineStats"]) == {
        "nuevo", "presupuesto-enviado", "presupuesto-pagado", "en-tareas", "terminado",
    }
    assert stats["pipelineStats"]["en-tareas"] == 1


def test_task_assigned_with_uppercase_email_is_notified(logged_in_client):
    logged_in_client.post("/api/tasks", json={"title": "Modelo 130", "assignedTo": TEST_USER["email"].upper()})

    tasks = logged_in_client.get("/api/notifications/tasks").get_json()

    assert [t["title"] for t in tasks] == ["Modelo 130"]
    assert logged_in_client.get("/api/notifications/count").get_json() == {"count": 1}
