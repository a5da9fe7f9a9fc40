"""Recipe create/update/delete, media uploads, likes and comments"""

import pytest
from sqlalchemy import func, select

from core.config import settings
from models.recipe_models import Comment, Like
from services.feed_service import feed_service
from services.recipe_service import parse_int


@pytest.mark.parametrize("raw,expected", [
    ("30", 30),
    ("45 minutes", 45),
    ("  12", 12),
    ("0", None),
    ("abc", None),
    ("", None),
    (None, None),
])
def test_parse_int(raw, expected):
    assert parse_int(raw) == expected


def test_create_requires_auth(client):
    res = client.post("/api/recipes", data={"title": "x", "ingredients": "y", "instructions": "z"})
    assert res.status_code == 401
    assert res.json() == {"message": "Access token required"}


def test_create_with_invalid_token(client):
    res = client.post(
        "/api/recipes",
        data={"title": "x", "ingredients": "y", "instructions": "z"},
        headers={"Authorization": "Bearer garbage"},
    )
    assert res.status_code == 401
    assert res.json() == {"message": "Invalid or expired token"}


def test_create_requires_fields(client, make_user):
    alice = make_user("alice")
    res = client.post("/api/recipes", data={"title": "Only title"}, headers=alice["headers"])
    assert res.status_code == 400
    assert res.json() == {"message": "Title, ingredients, and instructions are required"}


def test_create_returns_zeroed_engagement(client, make_user):
    alice = make_user("alice")
    res = client.post(
        "/api/recipes",
        data={"title": "Toast", "ingredients": "bread", "instructions": "toast it"},
        headers=alice["headers"],
    )
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Recipe created successfully"
    recipe = body["recipe"]
    assert recipe["likeCount"] == 0
    assert recipe["commentCount"] == 0
    assert recipe["isLiked"] is False
    assert recipe["visibility"] == "public"
    assert recipe["userId"] == alice["id"]


@pytest.mark.parametrize("visibility", ["private", " ", "public "])
def test_create_rejects_unknown_visibility(client, make_user, visibility):
    alice = make_user("alice")
    res = client.post(
        "/api/recipes",
        data={"title": "T", "ingredients": "i", "instructions": "s", "visibility": visibility},
        headers=alice["headers"],
    )
    assert res.status_code == 400
    assert res.json() == {"message": "Visibility must be 'public' or 'friends'"}
    assert client.get("/api/recipes", headers=alice["headers"]).json()["recipes"] == []


def test_create_empty_visibility_defaults_to_public(client, make_user):
    alice = make_user("alice")
    res = client.post(
        "/api/recipes",
        data={"title": "T", "ingredients": "i", "instructions": "s", "visibility": ""},
        headers=alice["headers"],
    )
    assert res.status_code == 201
    assert res.json()["recipe"]["visibility"] == "public"


@pytest.mark.parametrize("visibility", ["private", "  "])
def test_update_rejects_unknown_visibility(client, make_user, make_recipe, visibility):
    alice = make_user("alice")
    recipe = make_recipe(alice, visibility="friends")
    url = f"/api/recipes/{recipe['id']}"

    res = client.put(url, data={"visibility": visibility}, headers=alice["headers"])
    assert res.status_code == 400
    assert res.json() == {"message": "Visibility must be 'public' or 'friends'"}
    assert client.get(url).json()["recipe"]["visibility"] == "friends"


def test_create_with_image_upload(client, make_user, upload_dir):
    alice = make_user("alice")
    res = client.post(
        "/api/recipes",
        data={"title": "Photo Cake", "ingredients": "flour", "instructions": "bake"},
        files={"image": ("cake.PNG", b"\x89PNG fake image bytes", "image/png")},
        headers=alice["headers"],
    )
    assert res.status_code == 201, res.text
    image_path = res.json()["recipe"]["imagePath"]
    assert image_path.endswith(".png")
    assert (upload_dir / image_path).read_bytes() == b"\x89PNG fake image bytes"

    served = client.get(f"/uploads/{image_path}")
    assert served.status_code == 200
    assert served.content == b"\x89PNG fake image bytes"


def test_create_rejects_wrong_media_type(client, make_user, upload_dir):
    alice = make_user("alice")
    res = client.post(
        "/api/recipes",
        data={"title": "Bad", "ingredients": "i", "instructions": "s"},
        files={"video": ("clip.txt", b"not a video", "text/plain")},
        headers=alice["headers"],
    )
    assert res.status_code == 400
    assert res.json() == {"message": "Only video files are allowed for video field"}
    assert client.get("/api/recipes").json()["recipes"] == []


def test_update_owner_only(client, make_user, make_recipe):
    alice = make_user("alice")
    bob = make_user("bob")
    recipe = make_recipe(alice)

    res = client.put(f"/api/recipes/{recipe['id']}", data={"title": "Hijacked"}, headers=bob["headers"])
    assert res.status_code == 404
    assert res.json() == {"message": "Recipe not found or access denied"}

    res = client.put("/api/recipes/999", data={"title": "Nope"}, headers=alice["headers"])
    assert res.status_code == 404


def test_update_merges_fields(client, make_user, make_recipe):
    alice = make_user("alice")
    recipe = make_recipe(alice, title="Old", description="desc", tags="a,b", cookingTime="20")

    res = client.put(
        f"/api/recipes/{recipe['id']}",
        data={"title": "", "description": "", "servings": "6", "visibility": "friends"},
        headers=alice["headers"],
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["message"] == "Recipe updated successfully"
    updated = body["recipe"]
    assert updated["title"] == "Old"
    assert updated["description"] == ""
    assert updated["tags"] == "a,b"
    assert updated["cookingTime"] == 20
    assert updated["servings"] == 6
    assert updated["visibility"] == "friends"
    assert updated["ingredients"] == recipe["ingredients"]


def test_update_replaces_media(client, make_user, upload_dir):
    alice = make_user("alice")
    res = client.post(
        "/api/recipes",
        data={"title": "Cake", "ingredients": "flour", "instructions": "bake"},
        files={"image": ("one.jpg", b"first", "image/jpeg")},
        headers=alice["headers"],
    )
    recipe = res.json()["recipe"]
    old_image = recipe["imagePath"]

    res = client.put(
        f"/api/recipes/{recipe['id']}",
        files={"image": ("two.jpg", b"second", "image/jpeg")},
        headers=alice["headers"],
    )
    assert res.status_code == 200, res.text
    new_image = res.json()["recipe"]["imagePath"]
    assert new_image != old_image
    assert (upload_dir / new_image).read_bytes() == b"second"
    assert not (upload_dir / old_image).exists()


def test_delete_removes_recipe_edges_and_media(client, db_session, make_user, upload_dir):
    alice = make_user("alice")
    bob = make_user("bob")
    res = client.post(
        "/api/recipes",
        data={"title": "Cake", "ingredients": "flour", "instructions": "bake"},
        files={"image": ("cake.jpg", b"img", "image/jpeg")},
        headers=alice["headers"],
    )
    recipe = res.json()["recipe"]
    url = f"/api/recipes/{recipe['id']}"
    client.post(f"{url}/like", headers=bob["headers"])
    client.post(f"{url}/comments", json={"content": "nice"}, headers=bob["headers"])

    assert client.delete(url, headers=bob["headers"]).status_code == 404

    res = client.delete(url, headers=alice["headers"])
    assert res.status_code == 200
    assert res.json() == {"message": "Recipe deleted successfully"}

    assert client.get(url).status_code == 404
    assert client.get(f"{url}/comments").json() == {"comments": []}
    assert not (upload_dir / recipe["imagePath"]).exists()

    likes = db_session.scalar(select(func.count(Like.id)).where(Like.recipe_id == recipe["id"]))
    comments = db_session.scalar(select(func.count(Comment.id)).where(Comment.recipe_id == recipe["id"]))
    db_session.commit()
    assert (likes, comments) == (0, 0)


def test_like_requires_auth_and_existing_recipe(client, make_user):
    alice = make_user("alice")
    assert client.post("/api/recipes/1/like").status_code == 401

    res = client.post("/api/recipes/999/like", headers=alice["headers"])
    assert res.status_code == 404
    assert res.json() == {"message": "Recipe not found"}


def test_like_toggle_round_trip(client, make_user, make_recipe):
    alice = make_user("alice")
    recipe = make_recipe(alice)
    url = f"/api/recipes/{recipe['id']}/like"

    assert client.post(url, headers=alice["headers"]).json()["isLiked"] is True
    assert client.post(url, headers=alice["headers"]).json()["isLiked"] is False
    assert client.get(f"/api/recipes/{recipe['id']}").json()["recipe"]["likeCount"] == 0


def test_duplicate_like_reported_as_storage_error(client, make_user, make_recipe, monkeypatch):
    alice = make_user("alice")
    recipe = make_recipe(alice)
    url = f"/api/recipes/{recipe['id']}"
    assert client.post(f"{url}/like", headers=alice["headers"]).json()["isLiked"] is True

    # A concurrent toggle that missed the first like inserts a second row
    async def not_liked(*args, **kwargs):
        return False

    with monkeypatch.context() as patched:
        patched.setattr(feed_service, "has_liked", not_liked)
        res = client.post(f"{url}/like", headers=alice["headers"])
    assert res.status_code == 500
    assert res.json() == {"message": "Database error"}

    detail = client.get(url, headers=alice["headers"]).json()["recipe"]
    assert detail["likeCount"] == 1
    assert detail["isLiked"] is True


def test_add_and_list_comments(client, make_user, make_recipe):
    alice = make_user("alice", full_name="Alice Cook")
    bob = make_user("bob")
    recipe = make_recipe(alice)
    url = f"/api/recipes/{recipe['id']}/comments"

    res = client.post(url, json={"content": "  First!  "}, headers=alice["headers"])
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Comment added"
    assert body["comment"]["content"] == "First!"
    assert body["comment"]["username"] == "alice"
    assert body["comment"]["fullName"] == "Alice Cook"
    assert body["comment"]["recipeId"] == recipe["id"]

    client.post(url, json={"content": "Second"}, headers=bob["headers"])

    comments = client.get(url).json()["comments"]
    assert [c["content"] for c in comments] == ["Second", "First!"]
    assert [c["username"] for c in comments] == ["bob", "alice"]


def test_whitespace_comment_rejected_without_row(client, make_user, make_recipe):
    alice = make_user("alice")
    recipe = make_recipe(alice)
    url = f"/api/recipes/{recipe['id']}/comments"

    res = client.post(url, json={"content": "   "}, headers=alice["headers"])
    assert res.status_code == 400
    assert res.json() == {"message": "Comment content is required"}

    assert client.get(url).json() == {"comments": []}
    assert client.get(f"/api/recipes/{recipe['id']}").json()["recipe"]["commentCount"] == 0


def test_comment_on_missing_recipe(client, make_user):
    alice = make_user("alice")
    res = client.post("/api/recipes/999/comments", json={"content": "hello"}, headers=alice["headers"])
    assert res.status_code == 404
    assert client.get("/api/recipes/999/comments").json() == {"comments": []}


def test_oversized_upload_rejected(client, make_user, upload_dir, monkeypatch):
    alice = make_user("alice")
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 8)

    res = client.post(
        "/api/recipes",
        data={"title": "Big", "ingredients": "i", "instructions": "s"},
        files={"image": ("big.jpg", b"0123456789abcdef", "image/jpeg")},
        headers=alice["headers"],
    )
    assert res.status_code == 413
    assert res.json() == {"message": "File too large"}
    assert list(upload_dir.iterdir()) == []
    assert client.get("/api/recipes").json()["recipes"] == []
