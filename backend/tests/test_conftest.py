import pytest
from sqlalchemy.orm import Session
from sqlalchemy import text
from fastapi.testclient import TestClient

def test_test_db_fixture(test_db):
    """Test that the test_db fixture provides a working database session."""
    assert isinstance(test_db, Session)

    # Test that we can execute queries
    result = test_db.execute(text("SELECT 1")).scalar()
    assert result == 1

def test_test_db_has_schema(test_db):
    """Test that every table is created for each test."""
    tables = {
        row[0] for row in test_db.execute(
            text("SELECT name FROM sqlite_master WHERE type='table'")
        )
    }
    assert {
        "users",
        "flashcard_sets",
        "flashcards",
        "collaborators",
        "favorites",
        "shared_links",
        "study_sessions",
        "study_progress",
    } <= tables

def test_test_db_enforces_foreign_keys(test_db):
    """Test that SQLite foreign keys are switched on."""
    assert test_db.execute(text("PRAGMA foreign_keys")).scalar() == 1

def test_test_db_isolation(test_db):
    """Test that each test gets a fresh database."""
    assert test_db.execute(text("SELECT COUNT(*) FROM users")).scalar() == 0

def test_client_fixture(client):
    """Test that the client fixture provides a working test client."""
    assert isinstance(client, TestClient)

    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the Flashcards API"}

def test_client_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"
