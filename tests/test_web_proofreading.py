"""Route tests for proofreading progress, reminders, drafts, settings and meta."""


class TestProofreadingApi:

    def test_list_newest_first_with_progress(self, client):
        payload = client.get("/api/proofreading/").get_json()
        assert payload["filter"] == "all"
        assert [item["id"] for item in payload["requests"]] == ["1", "2", "3"]
        assert payload["requests"][0]["completion_rate"] == 50
        assert payload["requests"][2]["is_complete"] is True
        assert payload["requests"][0]["languages"][0]["name"] == "German"

    def test_filters(self, client):
        complete = client.get("/api/proofreading/?filter=complete").get_json()
        incomplete = client.get("/api/proofreading/?filter=incomplete").get_json()
        assert [item["id"] for item in complete["requests"]] == ["3"]
        assert [item["id"] for item in incomplete["requests"]] == ["1", "2"]

    def test_unknown_filter(self, client):
        response = client.get("/api/proofreading/?filter=pending")
        assert response.status_code == 400

    def test_get_missing_request(self, client):
        assert client.get("/api/proofreading/99").status_code == 404

    def test_mark_language_complete(self, client):
        response = client.put("/api/proofreading/2/languages/de", json={"complete": True})
        payload = response.get_json()["request"]
        assert payload["completion_status"]["de"] is True
        assert payload["completion_rate"] == 17

    def test_mark_unknown_language(self, client):
        response = client.put("/api/proofreading/2/languages/sv", json={"complete": True})
        assert response.status_code == 400

    def test_complete_must_be_boolean(self, client):
        response = client.put("/api/proofreading/2/languages/de", json={"complete": "yes"})
        assert response.status_code == 400

    def test_reminder_preview_and_send(self, client, gateway):
        preview = client.get("/api/proofreading/1/reminder").get_json()["message"]
        assert "🌍 **Pending Languages:** ES, NL, IT" in preview

        response = client.post("/api/proofreading/1/reminder", json={})
        assert response.status_code == 200
        assert gateway.posts[0]["text"] == preview

    def test_reminder_for_complete_request(self, client, gateway):
        response = client.post("/api/proofreading/3/reminder", json={})
        assert response.status_code == 400
        assert response.get_json()["code"] == "request_complete"
        assert gateway.posts == []


class TestDraftsApi:

    def test_generate_drafts(self, client):
        response = client.post("/api/drafts/", json={"text": "Hello", "form_id": "f1"})
        assert response.status_code == 202
        job = response.get_json()["job"]
        assert job["state"] == "completed"
        assert job["result"]["texts"]["de"] == "[DE] Hello"

        polled = client.get(f"/api/drafts/{job['job_id']}").get_json()["job"]
        assert polled["job_id"] == job["job_id"]

    def test_blank_text_rejected(self, client):
        assert client.post("/api/drafts/", json={"text": "  "}).status_code == 400

    def test_non_string_text_rejected(self, client):
        for method, path in (("post", "/api/drafts/"), ("put", "/api/drafts/source")):
            response = getattr(client, method)(path, json={"text": 42, "form_id": "f1"})
            assert response.status_code == 400
            assert response.get_json()["details"]["field"] == "text"

    def test_missing_job(self, client):
        assert client.get("/api/drafts/nope").status_code == 404
        assert client.delete("/api/drafts/nope").status_code == 404

    def test_source_update_returns_snapshot(self, client):
        from src.translation.utils import calculate_hash

        payload = client.put("/api/drafts/source", json={"form_id": "f1", "text": "Hi"}).get_json()
        assert payload["snapshot"] == calculate_hash("Hi")


class TestSettingsApi:

    def test_get_settings(self, client):
        payload = client.get("/api/settings/").get_json()
        assert payload["config"]["workflow"]["slack_channel"] == "#translations"
        assert "Holidu Web" in payload["meta"]["projects"]

    def test_update_settings(self, client):
        response = client.put("/api/settings/", json={"config": {
            "workflow": {"slack_channel": "#l10n", "notifications": False},
            "drafts": {"openai": {"api_key": "sk-new"}},
        }})
        assert response.status_code == 200

        config = client.get("/api/settings/").get_json()["config"]
        assert config["workflow"]["slack_channel"] == "#l10n"
        assert config["workflow"]["notifications"] is False
        assert config["workflow"]["default_project"] == "Holidu Web"
        assert config["drafts"]["openai"]["api_key"] == "sk-new"
        assert config["drafts"]["openai"]["models"] == ["gpt-4o-mini", "gpt-4o"]

    def test_invalid_settings(self, client):
        for bad in (
            {"workflow": {"slack_channel": "translations"}},
            {"workflow": {"default_project": "Website"}},
            {"notifications": {"provider": "pigeon"}},
            {"drafts": {"provider": "bad name!"}},
            {"log_mode": "verbose"},
            {"drafts": {"job_timeout": "soon"}},
            {"drafts": {"job_timeout": 0}},
            {"drafts": {"max_retries": "many"}},
            {"drafts": {"max_retries": 0}},
        ):
            response = client.put("/api/settings/", json={"config": bad})
            assert response.status_code == 400, bad

    def test_missing_config(self, client):
        assert client.put("/api/settings/", json={}).status_code == 400

    def test_job_limits_saved(self, client):
        response = client.put("/api/settings/", json={"config": {"drafts": {"job_timeout": 30, "max_retries": 2}}})
        assert response.status_code == 200
        drafts = client.get("/api/settings/").get_json()["config"]["drafts"]
        assert drafts["job_timeout"] == 30
        assert drafts["max_retries"] == 2

    def test_reset_restores_defaults(self, client):
        client.put("/api/settings/", json={"config": {"workflow": {"slack_channel": "#l10n"}}})

        response = client.post("/api/settings/reset")
        assert response.status_code == 200
        assert response.get_json()["config"]["workflow"]["slack_channel"] == "#translations"
        assert client.get("/api/settings/").get_json()["config"]["workflow"]["slack_channel"] == "#translations"


class TestMeta:

    def test_health(self, anonymous_client):
        assert anonymous_client.get("/health").get_json() == {"status": "ok"}

    def test_meta(self, anonymous_client):
        payload = anonymous_client.get("/api/meta").get_json()
        assert payload["default_project"] == "Holidu Web"
        assert [row["code"] for row in payload["proofreading_languages"]] == ["de", "es", "pt", "nl", "fr", "it"]
        assert len(payload["draft_languages"]) == 11

    def test_unknown_route(self, anonymous_client):
        response = anonymous_client.get("/api/nothing")
        assert response.status_code == 404
        assert response.get_json()["code"] == "not_found"
