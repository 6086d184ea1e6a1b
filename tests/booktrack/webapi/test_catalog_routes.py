from __future__ import annotations


def test_books_are_public(client, seed) -> None:
    response = client.get("/api/books")

    assert response.status_code == 200
    books = response.json()["books"]
    assert len(books) == 5
    assert {book["title"] for book in books} >= {"The Silent Harbor", "Garden of Numbers"}


def test_search_filters_and_counts(client, seed) -> None:
    response = client.get("/api/books?action=search&q=mara&availability=available")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["books"][0]["title"] == "The Silent Harbor"

    literal = client.get("/api/books", params={"action": "search", "q": "100%"}).json()
    assert [book["title"] for book in literal["books"]] == ["100% Coverage"]

    science = client.get("/api/books?action=search&category=Science").json()
    assert science["count"] == 3


def test_missing_book_returns_not_found(client, seed) -> None:
    response = client.get("/api/books?id=9999")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Book not found"}


def test_members_cannot_create_books(client, seed, bearer) -> None:
    payload = {"title": "Forbidden Tome", "author": "Nobody"}

    anonymous = client.post("/api/books", json=payload)
    member = client.post("/api/books", json=payload, headers=bearer(seed.member_id))

    assert anonymous.status_code == 403
    assert member.status_code == 403
    assert member.json() == {"success": False, "message": "Admin access required"}


def test_editor_maintains_catalog(client, seed, bearer) -> None:
    headers = bearer(seed.moderator_id)

    created = client.post(
        "/api/books",
        json={"title": "Tidal Maps", "author": "June Hale", "category_id": seed.science_id, "pages": 240},
        headers=headers,
    )
    assert created.status_code == 200
    assert created.json()["message"] == "Book created successfully"
    book_id = created.json()["book_id"]

    updated = client.put(f"/api/books?id={book_id}", json={"pages": 256}, headers=headers)
    assert updated.json() == {"success": True, "message": "Book updated successfully"}
    book = client.get(f"/api/books?id={book_id}").json()["book"]
    assert book["pages"] == 256
    assert book["category"] == "Science"
    assert book["availability"] == "available"

    missing_id = client.put("/api/books", json={"pages": 1}, headers=headers)
    assert missing_id.status_code == 400
    assert missing_id.json()["message"] == "Book ID required"

    deleted = client.delete(f"/api/books?id={book_id}", headers=headers)
    assert deleted.json()["message"] == "Book deleted successfully"
    assert client.get(f"/api/books?id={book_id}").status_code == 404


def test_create_requires_title_and_author(client, seed, bearer) -> None:
    response = client.post("/api/books", json={"title": "  "}, headers=bearer(seed.library_admin_id))

    assert response.status_code == 400
    assert response.json()["message"] == "Title and author are required"


def test_bookmarks_round_trip(client, seed, bearer) -> None:
    headers = bearer(seed.member_id)
    book_id = seed.book_ids[1]

    added = client.post(f"/api/bookmarks?book_id={book_id}", headers=headers)
    assert added.status_code == 200
    assert added.json()["message"] == "Book bookmarked successfully"

    again = client.post(f"/api/bookmarks?book_id={book_id}", headers=headers)
    assert again.status_code == 409
    assert again.json()["message"] == "Book already bookmarked"

    listed = client.get("/api/bookmarks", headers=headers).json()["bookmarks"]
    assert [item["title"] for item in listed] == ["Orbits and Tides"]

    removed = client.delete(f"/api/bookmarks?book_id={book_id}", headers=headers)
    assert removed.json() == {"success": True, "message": "Bookmark removed successfully"}
    assert client.delete(f"/api/bookmarks?book_id={book_id}", headers=headers).status_code == 404


def test_bookmarks_require_book_id_and_login(client, seed, bearer) -> None:
    assert client.get("/api/bookmarks").status_code == 401

    response = client.post("/api/bookmarks", headers=bearer(seed.member_id))
    assert response.status_code == 400
    assert response.json()["message"] == "Book ID required"
