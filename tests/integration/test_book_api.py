"""End-to-end tests for the /books endpoints over an in-memory database."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine

from src.bookshelf.core.services import DbManageService

pytestmark = pytest.mark.integration


def _create(client: TestClient, **fields) -> int:
    response = client.post("/books", json=fields)
    assert response.status_code == 201, response.text
    return response.json()["id"]


class TestCreateBook:
    def test_create_and_fetch(self, client: TestClient):
        response = client.post("/books", json={"title": "Dune", "author": "Frank Herbert"})

        assert response.status_code == 201
        book_id = response.json()["id"]

        fetched = client.get(f"/books/{book_id}")
        assert fetched.status_code == 200
        assert fetched.json() == {
            "id": book_id,
            "title": "Dune",
            "author": "Frank Herbert",
            "description": "",
        }
        assert list(fetched.json()) == ["id", "title", "author", "description"]

    def test_create_with_description(self, client: TestClient):
        book_id = _create(client, title="Emma", author="Jane Austen", description="Matchmaking")

        assert client.get(f"/books/{book_id}").json()["description"] == "Matchmaking"

    def test_create_from_form_body(self, client: TestClient):
        response = client.post("/books", data={"title": "Dune", "author": "Frank Herbert"})

        assert response.status_code == 201
        book = client.get(f"/books/{response.json()['id']}").json()
        assert (book["title"], book["author"]) == ("Dune", "Frank Herbert")

    def test_create_from_query_string(self, client: TestClient):
        response = client.post("/books", params={"title": "Dune", "author": "Frank Herbert"})

        assert response.status_code == 201

    def test_body_takes_precedence_over_query(self, client: TestClient):
        response = client.post(
            "/books",
            params={"title": "From query"},
            json={"title": "From body", "author": "Someone"},
        )

        book = client.get(f"/books/{response.json()['id']}").json()
        assert book["title"] == "From body"

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": "", "author": "Frank Herbert"},
            {"title": "Dune", "author": ""},
            {"title": "Dune"},
            {},
            {"title": None, "author": "Frank Herbert"},
        ],
    )
    def test_missing_required_fields(self, client: TestClient, payload: dict):
        _create(client, title="Existing", author="Someone")

        response = client.post("/books", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"] == "title and author are required"
        assert len(client.get("/books").json()) == 1

    def test_non_string_field_is_rejected(self, client: TestClient):
        response = client.post("/books", json={"title": 42, "author": "Someone"})

        assert response.status_code == 400
        assert response.json()["detail"] == "title must be a string"

    def test_invalid_json_is_rejected(self, client: TestClient):
        response = client.post(
            "/books",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "request body is not valid JSON"

    def test_json_array_is_rejected(self, client: TestClient):
        response = client.post("/books", json=[{"title": "Dune", "author": "Herbert"}])

        assert response.status_code == 400
        assert response.json()["detail"] == "request body must be a JSON object"

    def test_lone_surrogate_is_rejected(self, client: TestClient):
        response = client.post(
            "/books",
            content=b'{"title": "\\ud800", "author": "A"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "title is not valid UTF-8"
        assert client.get("/books").json() == []

    def test_lone_surrogate_on_update_leaves_book_unchanged(self, client: TestClient):
        book_id = _create(client, title="Dune", author="Herbert")

        response = client.put(
            f"/books/{book_id}",
            content=b'{"title": "Dune", "author": "\\udfff"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "author is not valid UTF-8"
        assert client.get(f"/books/{book_id}").json()["author"] == "Herbert"

    def test_repeated_query_key_keeps_first_value(self, client: TestClient):
        response = client.post(
            "/books", params=[("title", "Q"), ("title", "R"), ("author", "A")]
        )

        assert response.status_code == 201
        assert client.get(f"/books/{response.json()['id']}").json()["title"] == "Q"

    def test_repeated_form_key_keeps_first_value(self, client: TestClient):
        response = client.post(
            "/books", data={"title": ["First", "Second"], "author": "A"}
        )

        assert response.status_code == 201
        assert client.get(f"/books/{response.json()['id']}").json()["title"] == "First"

    def test_ids_are_unique(self, client: TestClient):
        ids = {_create(client, title=f"Book {i}", author="Author") for i in range(5)}

        assert len(ids) == 5


class TestListBooks:
    def test_empty_catalog(self, client: TestClient):
        response = client.get("/books")

        assert response.status_code == 200
        assert response.json() == []

    def test_lists_every_book_in_id_order(self, client: TestClient):
        ids = [_create(client, title=f"Book {i}", author="Author") for i in range(4)]

        books = client.get("/books").json()

        assert [book["id"] for book in books] == ids
        for book in books:
            assert list(book) == ["id", "title", "author", "description"]

    def test_special_characters_survive_serialization(self, client: TestClient):
        _create(
            client,
            title='The "Quoted" Title',
            author="Line one\nLine two",
            description="back\\slash and tab\t",
        )

        book = client.get("/books").json()[0]

        assert book["title"] == 'The "Quoted" Title'
        assert book["author"] == "Line one\nLine two"
        assert book["description"] == "back\\slash and tab\t"

    def test_sql_metacharacters_are_stored_verbatim(self, client: TestClient):
        title = "Robert'); DROP TABLE books;--"
        book_id = _create(client, title=title, author="Bobby")

        assert client.get(f"/books/{book_id}").json()["title"] == title
        assert len(client.get("/books").json()) == 1


class TestGetBook:
    def test_unknown_id(self, client: TestClient):
        response = client.get("/books/999999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Book not found"

    @pytest.mark.parametrize("raw_id", ["abc", "1.5", "1e3", "9223372036854775808"])
    def test_malformed_id(self, client: TestClient, raw_id: str):
        response = client.get(f"/books/{raw_id}")

        assert response.status_code == 400
        assert response.json()["detail"] == "invalid book id"

    @pytest.mark.parametrize("raw_id", ["-1", "0", "9223372036854775807"])
    def test_well_formed_ids_outside_catalog_are_not_found(
        self, client: TestClient, raw_id: str
    ):
        assert client.get(f"/books/{raw_id}").status_code == 404

    def test_signed_id_resolves(self, client: TestClient):
        book_id = _create(client, title="Dune", author="Herbert")

        assert client.get(f"/books/+{book_id}").json()["id"] == book_id


class TestUpdateBook:
    def test_update_replaces_fields(self, client: TestClient):
        book_id = _create(client, title="Dune", author="Herbert", description="old")

        response = client.put(
            f"/books/{book_id}", json={"title": "Dune Messiah", "author": "Frank Herbert"}
        )

        assert response.status_code == 200
        assert response.json() == {"message": f"Book {book_id} updated"}
        assert client.get(f"/books/{book_id}").json() == {
            "id": book_id,
            "title": "Dune Messiah",
            "author": "Frank Herbert",
            "description": "",
        }

    def test_repeated_update_is_idempotent(self, client: TestClient):
        book_id = _create(client, title="Dune", author="Herbert")
        payload = {"title": "Children of Dune", "author": "Herbert", "description": "Third"}

        first = client.put(f"/books/{book_id}", json=payload)
        second = client.put(f"/books/{book_id}", json=payload)

        assert first.status_code == second.status_code == 200
        assert client.get(f"/books/{book_id}").json()["title"] == "Children of Dune"

    def test_update_from_form_body(self, client: TestClient):
        book_id = _create(client, title="Dune", author="Herbert")

        response = client.put(f"/books/{book_id}", data={"title": "New", "author": "Other"})

        assert response.status_code == 200
        assert client.get(f"/books/{book_id}").json()["title"] == "New"

    def test_update_unknown_id(self, client: TestClient):
        response = client.put("/books/999999", json={"title": "X", "author": "Y"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Book not found"

    def test_update_missing_fields_leaves_book_unchanged(self, client: TestClient):
        book_id = _create(client, title="Dune", author="Herbert")

        response = client.put(f"/books/{book_id}", json={"title": "", "author": "Other"})

        assert response.status_code == 400
        assert client.get(f"/books/{book_id}").json()["title"] == "Dune"

    def test_update_malformed_id(self, client: TestClient):
        response = client.put("/books/abc", json={"title": "X", "author": "Y"})

        assert response.status_code == 400
        assert response.json()["detail"] == "invalid book id"

    def test_malformed_id_is_reported_before_missing_fields(self, client: TestClient):
        response = client.put("/books/abc", json={})

        assert response.json()["detail"] == "invalid book id"


class TestDeleteBook:
    def test_delete_then_get(self, client: TestClient):
        book_id = _create(client, title="Dune", author="Herbert")

        response = client.delete(f"/books/{book_id}")

        assert response.status_code == 200
        assert response.json() == {"message": f"Book {book_id} deleted"}
        assert client.get(f"/books/{book_id}").status_code == 404

    def test_second_delete_is_not_found(self, client: TestClient):
        book_id = _create(client, title="Dune", author="Herbert")
        client.delete(f"/books/{book_id}")

        response = client.delete(f"/books/{book_id}")

        assert response.status_code == 404

    def test_delete_only_removes_target(self, client: TestClient):
        keep = _create(client, title="Keep", author="A")
        drop = _create(client, title="Drop", author="B")

        client.delete(f"/books/{drop}")

        assert [book["id"] for book in client.get("/books").json()] == [keep]

    def test_delete_malformed_id(self, client: TestClient):
        assert client.delete("/books/abc").status_code == 400


class TestRouting:
    def test_unsupported_method(self, client: TestClient):
        assert client.patch("/books", json={}).status_code == 405
        assert client.post("/books/1", json={}).status_code == 405

    def test_unknown_paths(self, client: TestClient):
        assert client.get("/authors").status_code == 404
        assert client.get("/books/1/reviews").status_code == 404

    def test_trailing_slash_is_not_redirected(self, client: TestClient):
        response = client.get("/books/", follow_redirects=False)

        assert response.status_code == 404

    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/books", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_is_generated(self, client: TestClient):
        response = client.get("/books")

        assert response.headers["X-Request-ID"]

    def test_security_headers(self, client: TestClient):
        response = client.get("/books")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestStorageFailures:
    def test_storage_failure_is_internal_error(self, client: TestClient, engine: Engine):
        DbManageService(engine).drop_all()

        response = client.get("/books")

        assert response.status_code == 500
        assert response.json()["detail"].startswith("List books failed: ")

    def test_create_failure_names_the_action(self, client: TestClient, engine: Engine):
        DbManageService(engine).drop_all()

        response = client.post("/books", json={"title": "Dune", "author": "Herbert"})

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Create book failed: ")

    @pytest.mark.parametrize(
        ("method", "payload", "prefix"),
        [
            ("GET", None, "Get book failed: "),
            ("PUT", {"title": "Dune", "author": "Herbert"}, "Update book failed: "),
            ("DELETE", None, "Delete book failed: "),
        ],
    )
    def test_single_book_failures_name_the_action(
        self,
        client: TestClient,
        engine: Engine,
        method: str,
        payload: dict | None,
        prefix: str,
    ):
        book_id = _create(client, title="Dune", author="Herbert")
        DbManageService(engine).drop_all()

        response = client.request(method, f"/books/{book_id}", json=payload)

        assert response.status_code == 500
        assert response.json()["detail"].startswith(prefix)
