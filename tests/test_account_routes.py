SEEDED_TITLES = [
    "Cloud Architect",
    "Data Scientist",
    "DevOps Engineer",
    "Full Stack Developer",
    "Mobile App Developer",
    "UI/UX Designer",
]


# ---------- auth ----------

async def test_register_and_me(client):
    response = await client.post(
        "/api/auth/register",
        json={"name": "Ada", "email": "Ada@Example.com", "password": "secret123"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "ada@example.com"
    assert "password" not in str(body["user"]).lower()

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Ada"


async def test_duplicate_registration_rejected(client, auth_headers):
    response = await client.post(
        "/api/auth/register",
        json={"name": "Again", "email": "learner@example.com", "password": "secret123"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


async def test_short_password_is_a_client_error(client):
    response = await client.post(
        "/api/auth/register",
        json={"name": "Ada", "email": "ada@example.com", "password": "123"},
    )
    assert response.status_code == 400
    assert "password" in response.json()["detail"]


async def test_login(client, auth_headers):
    ok = await client.post("/api/auth/login", json={"email": "learner@example.com", "password": "secret123"})
    assert ok.status_code == 200
    assert ok.json()["token"]

    wrong = await client.post("/api/auth/login", json={"email": "learner@example.com", "password": "nope-nope"})
    assert wrong.status_code == 400


async def test_protected_routes_need_a_token(client):
    assert (await client.get("/api/auth/me")).status_code == 401
    assert (await client.get("/api/roadmap", headers={"Authorization": "Token abc"})).status_code == 401
    assert (await client.get("/api/progress", headers={"Authorization": "Bearer not-a-jwt"})).status_code == 401


# ---------- resume ----------

async def test_resume_text_roundtrip(client, auth_headers):
    assert (await client.get("/api/resume", headers=auth_headers)).status_code == 404

    response = await client.put("/api/resume/text", json={"text": "Node.js, Express, MongoDB"}, headers=auth_headers)
    assert response.status_code == 200

    stored = (await client.get("/api/resume", headers=auth_headers)).json()
    assert stored["text"] == "Node.js, Express, MongoDB"
    assert stored["fileName"] == "manual-entry.txt"
    assert stored["uploadedAt"]


async def test_empty_resume_text_rejected(client, auth_headers):
    response = await client.put("/api/resume/text", json={"text": "   "}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Resume text is required"


async def test_upload_plain_text_resume(client, auth_headers):
    text = "Senior engineer. " * 50
    response = await client.post(
        "/api/resume/upload",
        files={"resume": ("cv.txt", text.encode("utf-8"), "text/plain")},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["resume"]["fileName"] == "cv.txt"
    assert body["resume"]["text"].endswith("...")

    stored = (await client.get("/api/resume", headers=auth_headers)).json()
    assert stored["text"] == text


async def test_upload_unsupported_type(client, auth_headers):
    response = await client.post(
        "/api/resume/upload",
        files={"resume": ("photo.png", b"\x89PNG\r\n", "image/png")},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert "image/png" in response.json()["detail"]


# ---------- job roles ----------

async def test_seeded_roles_sorted_by_title(client):
    response = await client.get("/api/jobs")
    assert response.status_code == 200
    roles = response.json()
    assert [r["title"] for r in roles] == SEEDED_TITLES

    devops = next(r for r in roles if r["title"] == "DevOps Engineer")
    assert devops["requiredSkills"][0] == {"skill": "Docker", "level": "intermediate", "importance": "critical"}
    assert devops["averageSalary"]["currency"] == "USD"


async def test_get_role_by_id(client):
    roles = (await client.get("/api/jobs")).json()
    response = await client.get(f"/api/jobs/{roles[0]['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == roles[0]["title"]

    assert (await client.get("/api/jobs/99999")).status_code == 404


async def test_create_role_normalizes_skills(client, auth_headers):
    response = await client.post(
        "/api/jobs",
        json={
            "title": "Backend Developer",
            "description": "APIs and services",
            "category": "Software Development",
            "requiredSkills": ["Node.js", {"skill": "Docker", "level": "Advanced", "importance": "Critical"}],
        },
        headers=auth_headers,
    )
    assert response.status_code == 201
    skills = response.json()["requiredSkills"]
    assert skills == [
        {"skill": "Node.js", "level": "intermediate", "importance": "medium"},
        {"skill": "Docker", "level": "advanced", "importance": "critical"},
    ]


async def test_create_role_with_unknown_importance_is_rejected(client, auth_headers):
    response = await client.post(
        "/api/jobs",
        json={
            "title": "Site Reliability Engineer",
            "description": "On call for production",
            "category": "Operations",
            "requiredSkills": [{"skill": "Docker", "importance": "required"}],
        },
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"].startswith("requiredSkills[0].importance:")

    titles = [r["title"] for r in (await client.get("/api/jobs")).json()]
    assert "Site Reliability Engineer" not in titles


async def test_health_and_metrics(client):
    assert (await client.get("/health")).json() == {"status": "ok"}
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "counters" in response.json()


async def test_correlation_id_echoed(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "trace-123"})
    assert response.headers["X-Correlation-ID"] == "trace-123"
