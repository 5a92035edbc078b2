"""End-to-end moderation scenario across three users.

A uploads a song, B (a plain user) cannot delete it, admin C can, and the
song's row and blobs are gone afterwards.
"""

from uuid import UUID

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tunebase.db.models import Song
from tunebase.storage import FakeStorageClient
from tests.factories import create_admin, create_profile
from tests.helpers import auth_headers


def test_upload_forbidden_delete_then_admin_delete(
    auth_client: TestClient, db_session: Session, storage: FakeStorageClient
):
    uploader = auth_headers(create_profile(db_session, display_name="A"))
    bystander = auth_headers(create_profile(db_session, display_name="B"))
    admin = auth_headers(create_admin(db_session, display_name="C"))

    response = auth_client.post(
        "/api/upload",
        data={"title": "Take Five", "artist": "Dave Brubeck"},
        files={
            "audioFile": ("take5.mp3", b"ID3-audio", "audio/mpeg"),
            "coverArt": ("take5.jpg", b"\xff\xd8jpeg", "image/jpeg"),
        },
        headers=uploader,
    )
    assert response.status_code == 200
    song_id = UUID(response.json()["song"]["id"])

    # Favorited and playlisted by the bystander before moderation
    assert auth_client.post("/api/favorites", json={"songId": str(song_id)}, headers=bystander).status_code == 200
    playlist_id = auth_client.post("/api/playlists", json={"name": "Jazz"}, headers=bystander).json()["playlist"]["id"]
    auth_client.post(f"/api/playlists/{playlist_id}/songs", json={"songId": str(song_id)}, headers=bystander)

    response = auth_client.delete(f"/api/admin/songs/{song_id}", headers=bystander)
    assert response.status_code == 403
    assert len(storage.list_objects("songs")) == 1

    response = auth_client.delete(f"/api/admin/songs/{song_id}", headers=admin)
    assert response.status_code == 200

    db_session.expire_all()
    assert db_session.get(Song, song_id) is None
    assert storage.list_objects("songs") == []
    assert storage.list_objects("covers") == []
    assert auth_client.get("/api/songs").json()["data"] == []
    assert auth_client.get("/api/favorites", headers=bystander).json()["data"] == []
    detail = auth_client.get(f"/api/playlists/{playlist_id}", headers=bystander).json()["data"]
    assert detail["songs"] == []
