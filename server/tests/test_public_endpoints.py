"""Tests for the public site API"""

import uuid
from datetime import datetime, timedelta, timezone

from school_portal.models.contact_message import ContactMessage
from school_portal.models.news import NewsItem
from school_portal.models.site_section import SiteSection


class TestPublicEndpoints:
    def test_get_section(self, client, store):
        store.insert(
            SiteSection,
            {"section_key": "historia", "title": "Nuestra Historia", "content": "Desde 1960"},
        )

        response = client.get("/api/sections/historia")

        assert response.status_code == 200
        assert response.json()["title"] == "Nuestra Historia"

    def test_missing_section_404(self, client):
        response = client.get("/api/sections/no-existe")

        assert response.status_code == 404

    def test_news_list(self, client, store):
        store.insert(NewsItem, {"title": "Juramento a la bandera"})

        response = client.get("/api/news")

        assert response.status_code == 200
        assert [n["title"] for n in response.json()] == ["Juramento a la bandera"]

    def test_events_list_includes_capacity(self, client, create_event):
        create_event(title="Casa Abierta", max_participants=2, current_participants=2)
        create_event(
            title="Expirado",
            event_date=datetime.now(timezone.utc) - timedelta(days=3),
        )

        response = client.get("/api/events")

        assert response.status_code == 200
        events = response.json()
        assert [e["title"] for e in events] == ["Casa Abierta"]
        assert events[0]["capacity_status"] == "full"
        assert events[0]["spots_left"] == 0

    def test_get_event(self, client, create_event):
        event = create_event(max_participants=0, current_participants=500)

        response = client.get(f"/api/events/{event.id}")

        assert response.status_code == 200
        assert response.json()["capacity_status"] == "unlimited"
        assert response.json()["spots_left"] is None

    def test_get_unknown_event(self, client):
        assert client.get(f"/api/events/{uuid.uuid4()}").status_code == 404

    def test_gallery(self, client):
        response = client.get("/api/gallery")

        assert response.status_code == 200
        assert response.json() == []

    def test_contact_submission(self, client, store):
        response = client.post(
            "/api/contact",
            json={
                "name": "Ana Torres",
                "email": "ana@example.com",
                "subject": "vespertina",
                "message": "¿Hay cupos en la sección vespertina?",
            },
        )

        assert response.status_code == 201
        assert response.json()["success"] is True
        messages = store.select(ContactMessage)
        assert len(messages) == 1
        assert messages[0].subject == "vespertina"

    def test_contact_validation(self, client, store):
        response = client.post(
            "/api/contact",
            json={"name": "Ana", "email": "ana", "subject": "otro", "message": "Hola"},
        )

        assert response.status_code == 422
        assert store.select(ContactMessage) == []

    def test_unknown_live_resource(self, client):
        assert client.get("/api/live/staff").status_code == 404

    def test_contact_rejects_malformed_domain(self, client, store):
        response = client.post(
            "/api/contact",
            json={
                "name": "Ana",
                "email": "ana@example..com",
                "subject": "informacion",
                "message": "Hola",
            },
        )

        assert response.status_code == 422
        assert store.select(ContactMessage) == []
