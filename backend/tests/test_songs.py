import base64
from fastapi.testclient import TestClient
from sqlmodel import Session

from conftest import make_png
from models import Song, SongSection


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_create_song(client: TestClient):
    response = client.post("/api/songs", json={"title": "Amazing Grace", "tempo": 72, "key": "G"})
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Amazing Grace"
    assert data["tempo"] == 72
    assert data["id"]


def test_create_song_validation_error(client: TestClient):
    response = client.post("/api/songs", json={"title": "  "})
    assert response.status_code == 422
    assert response.json()["detail"] == {"code": "empty_title", "message": "Please enter a title"}

    response = client.post("/api/songs", json={"title": "Fast", "tempo": 999})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "invalid_tempo"


def test_duplicate_song_id(client: TestClient):
    assert client.post("/api/songs", json={"title": "A", "id": "same"}).status_code == 200
    response = client.post("/api/songs", json={"title": "B", "id": "same"})
    assert response.status_code == 409


def test_get_songs(client: TestClient, session: Session):
    session.add(Song(title="Listed"))
    session.commit()

    response = client.get("/api/songs")
    assert response.status_code == 200
    assert "Listed" in [s["title"] for s in response.json()]


def test_get_song_not_found(client: TestClient):
    response = client.get("/api/songs/nope")
    assert response.status_code == 404


def test_update_song(client: TestClient):
    song_id = client.post("/api/songs", json={"title": "Old", "tempo": 60}).json()["id"]

    response = client.put(f"/api/songs/{song_id}", json={"title": "New"})
    assert response.status_code == 200
    assert response.json()["title"] == "New"
    assert response.json()["tempo"] == 60

    response = client.put(f"/api/songs/{song_id}", json={"tempo": None})
    assert response.json()["tempo"] is None


def test_song_sections_flow(client: TestClient, session: Session):
    song_id = client.post("/api/songs", json={"title": "Structured"}).json()["id"]

    verse = client.post(f"/api/songs/{song_id}/sections", json={"section_type": "verse", "custom_label": "1"})
    assert verse.status_code == 200
    assert verse.json()["display_label"] == "V1"
    client.post(f"/api/songs/{song_id}/sections", json={"section_type": "chorus"})
    custom = client.post(
        f"/api/songs/{song_id}/sections",
        json={"section_type": "custom", "custom_name": "Tag"},
    ).json()
    assert custom["display_label"] == "Tag"
    assert custom["order"] == 2

    moved = client.post(f"/api/songs/{song_id}/sections/move", json={"from_index": 2, "to_index": 0})
    assert [s["display_label"] for s in moved.json()] == ["Tag", "V1", "C"]

    updated = client.put(f"/api/song-sections/{custom['id']}", json={"custom_label": "2"})
    assert updated.json()["display_label"] == "Tag2"

    assert client.delete(f"/api/song-sections/{verse.json()['id']}").status_code == 200
    detail = client.get(f"/api/songs/{song_id}").json()
    assert [s["display_label"] for s in detail["sections"]] == ["Tag2", "C"]
    assert [s["order"] for s in detail["sections"]] == [0, 1]


def test_invalid_section_type(client: TestClient):
    song_id = client.post("/api/songs", json={"title": "S"}).json()["id"]
    response = client.post(f"/api/songs/{song_id}/sections", json={"section_type": "solo"})
    assert response.status_code == 422


def test_song_images_flow(client: TestClient):
    song_id = client.post("/api/songs", json={"title": "Sheet"}).json()["id"]

    response = client.post(f"/api/songs/{song_id}/images", json={"data": b64(make_png())})
    assert response.status_code == 200
    assert response.json() == {"index": 0, "count": 1}

    data_url = "data:image/png;base64," + b64(make_png(color=(0, 0, 255)))
    assert client.post(f"/api/songs/{song_id}/images", json={"data": data_url}).json()["count"] == 2

    image = client.get(f"/api/songs/{song_id}/images/1")
    assert image.status_code == 200
    assert image.headers["content-type"] == "image/jpeg"
    assert image.content[:2] == b"\xff\xd8"

    assert client.post(f"/api/songs/{song_id}/images/move", json={"from_index": 1, "to_index": 0}).status_code == 200
    assert client.delete(f"/api/songs/{song_id}/images/0").status_code == 200
    assert client.get(f"/api/songs/{song_id}").json()["image_count"] == 1
    assert client.get(f"/api/songs/{song_id}/images/1").status_code == 404


def test_song_image_errors(client: TestClient):
    song_id = client.post("/api/songs", json={"title": "Sheet"}).json()["id"]

    response = client.post(f"/api/songs/{song_id}/images", json={"data": "%%%not-base64%%%"})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "image_compression_failed"

    response = client.post(f"/api/songs/{song_id}/images", json={"data": b64(b"plain text")})
    assert response.status_code == 422


def test_song_image_limit(client: TestClient, mocker):
    mocker.patch("domain.constants.MAX_SHEET_MUSIC_IMAGES", 1)
    song_id = client.post("/api/songs", json={"title": "Sheet"}).json()["id"]
    client.post(f"/api/songs/{song_id}/images", json={"data": b64(make_png())})

    response = client.post(f"/api/songs/{song_id}/images", json={"data": b64(make_png())})
    assert response.status_code == 422
    assert response.json()["detail"] == {
        "code": "image_limit_exceeded",
        "message": "You can add up to 1 sheet music images",
    }


def test_delete_song(client: TestClient, session: Session):
    song_id = client.post("/api/songs", json={"title": "Gone"}).json()["id"]
    section_id = client.post(f"/api/songs/{song_id}/sections", json={"section_type": "intro"}).json()["id"]

    assert client.delete(f"/api/songs/{song_id}").status_code == 200
    assert session.get(Song, song_id) is None
    assert session.get(SongSection, section_id) is None


def test_delete_song_in_use(client: TestClient):
    song_id = client.post("/api/songs", json={"title": "Busy"}).json()["id"]
    setlist_id = client.post("/api/setlists", json={"title": "Gig"}).json()["id"]
    client.post(f"/api/setlists/{setlist_id}/items", json={"song_id": song_id})

    assert client.delete(f"/api/songs/{song_id}").status_code == 409

    response = client.delete(f"/api/songs/{song_id}", params={"detach_items": True})
    assert response.status_code == 200
    assert client.get(f"/api/setlists/{setlist_id}").json()["items"] == []


def test_import_status(client: TestClient):
    response = client.get("/api/songs/images/import/status")
    assert response.status_code == 200
    assert response.json()["is_running"] is False


def test_import_unknown_song(client: TestClient):
    response = client.post("/api/songs/missing/images/import", json={"images": [b64(make_png())]})
    assert response.status_code == 404


def test_update_section_null_type(client: TestClient):
    song_id = client.post("/api/songs", json={"title": "S"}).json()["id"]
    section = client.post(f"/api/songs/{song_id}/sections", json={"section_type": "bridge"}).json()

    response = client.put(f"/api/song-sections/{section['id']}", json={"section_type": None, "custom_label": "2"})
    assert response.status_code == 200
    assert response.json()["section_type"] == "bridge"
    assert response.json()["display_label"] == "B2"
