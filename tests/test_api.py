from datetime import date

import pytest

BOOK = {
    "title": "Effective Java",
    "author": "Joshua Bloch",
    "isbn": "9780134685991",
    "category": "Programming",
    "totalCopies": 3,
    "publisher": "Addison-Wesley",
    "publishYear": 2018,
}

BORROWER = {
    "name": "Alice Reader",
    "email": "alice@library.org",
    "phone": "0123456789",
}


def create_book(client, **overrides):
    response = client.post("/api/books", json={**BOOK, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def create_borrower(client, **overrides):
    response = client.post("/api/borrowers", json={**BORROWER, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def borrow(client, book_id, borrower_id, **extra):
    return client.post("/api/borrow", json={"bookId": book_id, "borrowerId": borrower_id, **extra})


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    assert client.get("/api/health").json() == {"status": "healthy"}


@pytest.mark.parametrize("path", ["/api/books", "/api/borrowers"])
def test_collections_answer_without_redirect(client, path):
    response = client.get(path, follow_redirects=False)

    assert response.status_code == 200
    assert response.json() == []


def test_create_paths_answer_without_redirect(client):
    book = client.post("/api/books", json=BOOK, follow_redirects=False)
    borrower = client.post("/api/borrowers", json=BORROWER, follow_redirects=False)
    record = client.post(
        "/api/borrow",
        json={"bookId": book.json()["id"], "borrowerId": borrower.json()["id"]},
        follow_redirects=False,
    )

    assert (book.status_code, borrower.status_code, record.status_code) == (201, 201, 201)
    assert client.post("/api/books/", json={**BOOK, "isbn": "0201633612"}).status_code == 201


def test_create_and_fetch_book(client):
    book = create_book(client)

    assert book["availableCopies"] == 3
    assert book["status"] == "AVAILABLE"

    fetched = client.get(f"/api/books/{book['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["isbn"] == "9780134685991"
    assert [b["id"] for b in client.get("/api/books").json()] == [book["id"]]


def test_duplicate_isbn_is_409(client):
    create_book(client)

    response = client.post("/api/books", json=BOOK)

    assert response.status_code == 409
    assert response.json()["error"] == "duplicate-resource"


@pytest.mark.parametrize("overrides", [
    {"isbn": "12-34"},
    {"isbn": "97801346859912"},
    {"title": "   "},
    {"totalCopies": 0},
    {"publishYear": 999},
    {"category": None},
])
def test_invalid_book_is_400(client, overrides):
    response = client.post("/api/books", json={**BOOK, **overrides})

    assert response.status_code == 400
    assert response.json()["error"] == "validation"


def test_unknown_book_is_404(client):
    response = client.get("/api/books/99")

    assert response.status_code == 404
    assert response.json()["error"] == "resource-not-found"


def test_non_numeric_id_is_400(client):
    assert client.get("/api/books/abc").status_code == 400


def test_book_searches(client):
    create_book(client)
    create_book(client, title="Fluent Python", author="Luciano Ramalho", isbn="978-1-4919-4600-8", category="Python")

    by_title = client.get("/api/books/search/title", params={"title": "PYTHON"}).json()
    by_author = client.get("/api/books/search/author", params={"author": "bloch"}).json()
    by_category = client.get("/api/books/category/Python").json()

    assert [b["title"] for b in by_title] == ["Fluent Python"]
    assert [b["title"] for b in by_author] == ["Effective Java"]
    assert [b["title"] for b in by_category] == ["Fluent Python"]


def test_update_book_reconciles_copies(client):
    book = create_book(client)
    borrower = create_borrower(client)
    borrow(client, book["id"], borrower["id"])

    response = client.put(f"/api/books/{book['id']}", json={**BOOK, "totalCopies": 6})
    assert response.status_code == 200
    assert response.json()["availableCopies"] == 5

    response = client.put(f"/api/books/{book['id']}", json={**BOOK, "totalCopies": 0})
    assert response.status_code == 400


def test_update_book_below_copies_on_loan_is_422(client):
    book = create_book(client, totalCopies=2)
    borrow(client, book["id"], create_borrower(client)["id"])
    borrow(client, book["id"], create_borrower(client, email="bob@library.org")["id"])

    response = client.put(f"/api/books/{book['id']}", json={**BOOK, "totalCopies": 1})

    assert response.status_code == 422
    assert response.json()["error"] == "invalid-operation"


def test_delete_book(client):
    book = create_book(client)
    borrower = create_borrower(client)
    record = borrow(client, book["id"], borrower["id"]).json()

    assert client.delete(f"/api/books/{book['id']}").status_code == 409

    client.post("/api/borrow/return", json={"recordId": record["id"]})
    assert client.delete(f"/api/books/{book['id']}").status_code == 204
    assert client.get(f"/api/books/{book['id']}").status_code == 404


def test_low_stock_report(client):
    book = create_book(client, totalCopies=5)
    for n in range(5):
        borrower = create_borrower(client, email=f"reader{n}@library.org")
        assert borrow(client, book["id"], borrower["id"]).status_code == 201

    low = client.get("/api/books/inventory/low-stock").json()

    assert [b["id"] for b in low] == [book["id"]]
    assert low[0]["status"] == "OUT_OF_STOCK"


def test_borrower_lifecycle(client):
    borrower = create_borrower(client)

    assert borrower["membershipId"].startswith("MEM-")
    assert borrower["membershipType"] == "REGULAR"
    assert borrower["isActive"] is True

    response = client.put(
        f"/api/borrowers/{borrower['id']}",
        json={**BORROWER, "name": "Alice R.", "membershipType": "PREMIUM"},
    )
    assert response.status_code == 200
    assert response.json()["membershipType"] == "PREMIUM"
    assert response.json()["membershipId"] == borrower["membershipId"]

    assert client.patch(f"/api/borrowers/{borrower['id']}/deactivate").status_code == 204
    assert client.get("/api/borrowers/active").json() == []
    assert client.patch(f"/api/borrowers/{borrower['id']}/activate").status_code == 204
    assert len(client.get("/api/borrowers/active").json()) == 1
    assert len(client.get("/api/borrowers").json()) == 1

    assert client.delete(f"/api/borrowers/{borrower['id']}").status_code == 204
    assert client.get(f"/api/borrowers/{borrower['id']}").status_code == 404


@pytest.mark.parametrize("overrides", [
    {"email": "not-an-email"},
    {"email": "a@"},
    {"email": "@x"},
    {"email": "a@x@y"},
    {"email": "a b@x"},
    {"email": "a@x."},
    {"phone": "12345"},
    {"phone": "01234567ab"},
    {"name": ""},
    {"membershipType": "GOLD"},
])
def test_invalid_borrower_is_400(client, overrides):
    assert client.post("/api/borrowers", json={**BORROWER, **overrides}).status_code == 400


def test_duplicate_email_is_409(client):
    create_borrower(client)

    assert client.post("/api/borrowers", json=BORROWER).status_code == 409


@pytest.mark.parametrize("email", ["a@x", "ops@localhost", "first.last+tag@mail.library.org"])
def test_borrower_email_needs_no_dotted_domain(client, email):
    borrower = create_borrower(client, email=email)

    assert borrower["email"] == email
    assert client.get(f"/api/borrowers/{borrower['id']}").json()["email"] == email


def test_borrow_and_return_flow(client, clock):
    book = create_book(client)
    borrower = create_borrower(client)

    response = borrow(client, book["id"], borrower["id"], borrowDays=14)
    assert response.status_code == 201
    record = response.json()
    assert record["status"] == "BORROWED"
    assert record["borrowDate"] == "2024-06-01"
    assert record["dueDate"] == "2024-06-15"
    assert record["fineAmount"] == 0.0
    assert record["bookTitle"] == "Effective Java"
    assert record["borrowerName"] == "Alice Reader"
    assert client.get(f"/api/books/{book['id']}").json()["availableCopies"] == 2

    clock.day = date(2024, 6, 20)
    response = client.post("/api/borrow/return", json={"recordId": record["id"], "notes": "Spine worn"})
    assert response.status_code == 200
    returned = response.json()
    assert returned["status"] == "RETURNED"
    assert returned["returnDate"] == "2024-06-20"
    assert returned["fineAmount"] == 10.0
    assert returned["notes"] == "Spine worn"
    assert client.get(f"/api/books/{book['id']}").json()["availableCopies"] == 3

    again = client.post("/api/borrow/return", json={"recordId": record["id"]})
    assert again.status_code == 422
    assert again.json()["error"] == "invalid-operation"


@pytest.mark.parametrize("days", [0, 91])
def test_borrow_days_out_of_range_is_400(client, days):
    book = create_book(client)
    borrower = create_borrower(client)

    assert borrow(client, book["id"], borrower["id"], borrowDays=days).status_code == 400


def test_borrow_missing_fields_is_400(client):
    assert client.post("/api/borrow", json={"bookId": 1}).status_code == 400


def test_borrow_unknown_book_is_404(client):
    borrower = create_borrower(client)

    assert borrow(client, 999, borrower["id"]).status_code == 404


def test_inactive_borrower_is_422(client):
    book = create_book(client)
    borrower = create_borrower(client)
    client.patch(f"/api/borrowers/{borrower['id']}/deactivate")

    response = borrow(client, book["id"], borrower["id"])

    assert response.status_code == 422
    assert response.json()["error"] == "borrower-not-active"


def test_last_copy_is_422_for_second_borrower(client):
    book = create_book(client, totalCopies=1)
    first = create_borrower(client)
    second = create_borrower(client, email="bob@library.org")

    assert borrow(client, book["id"], first["id"]).status_code == 201
    response = borrow(client, book["id"], second["id"])

    assert response.status_code == 422
    assert response.json()["error"] == "book-not-available"
    book = client.get(f"/api/books/{book['id']}").json()
    assert book["availableCopies"] == 0
    assert book["status"] == "OUT_OF_STOCK"


def test_sixth_borrow_is_422(client):
    borrower = create_borrower(client)
    for n in range(5):
        book = create_book(client, isbn=f"978013468{n:04d}")
        assert borrow(client, book["id"], borrower["id"]).status_code == 201
    book = create_book(client, isbn="9780134689999")

    response = borrow(client, book["id"], borrower["id"])

    assert response.status_code == 422
    assert response.json()["error"] == "invalid-operation"
    assert client.get(f"/api/books/{book['id']}").json()["availableCopies"] == 3


def test_overdue_active_and_lost(client, clock):
    book = create_book(client)
    borrower = create_borrower(client)
    late = borrow(client, book["id"], borrower["id"], borrowDays=7).json()
    current = borrow(client, book["id"], borrower["id"], borrowDays=30).json()

    clock.day = date(2024, 6, 12)
    overdue = client.get("/api/borrow/overdue").json()
    assert [r["id"] for r in overdue] == [late["id"]]
    assert overdue[0]["status"] == "OVERDUE"
    assert client.get("/api/borrow/overdue").json() == overdue
    assert [r["id"] for r in client.get("/api/borrow/active").json()] == [current["id"]]

    clock.day = date(2024, 6, 30)
    response = client.patch(f"/api/borrow/{late['id']}/mark-lost")
    assert response.status_code == 200
    assert response.json()["status"] == "LOST"
    assert response.json()["fineAmount"] == 100.0
    assert response.json()["returnDate"] == "2024-06-30"
    assert client.get(f"/api/books/{book['id']}").json()["availableCopies"] == 1

    by_book = client.get(f"/api/borrow/book/{book['id']}").json()
    by_borrower = client.get(f"/api/borrow/borrower/{borrower['id']}").json()
    assert [r["id"] for r in by_book] == [late["id"], current["id"]]
    assert by_book == by_borrower


def test_mark_lost_unknown_record_is_404(client):
    assert client.patch("/api/borrow/5/mark-lost").status_code == 404
