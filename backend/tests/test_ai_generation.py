import asyncio
import pytest

from conftest import auth
from services.ai_flashcard import AIFlashcardService
from api.errors import UpstreamUnavailable

SOURCE_TEXT = "Mitochondria: powerhouse of the cell\nRibosome: makes proteins"

def parse(client, text=SOURCE_TEXT, **extra):
    return client.post("/api/ai/parse", json={"text": text, **extra}, headers=auth("alice"))

def test_parse_without_completion(client, fake_completion):
    """Test that parsed pairs are returned when no completion service is configured."""
    fake_completion.enabled = False

    response = parse(client, count=10)
    assert response.status_code == 200
    data = response.json()
    assert [card["term"] for card in data["flashcards"]] == ["Mitochondria", "Ribosome"]
    assert data["parsed_count"] == 2
    assert data["generated_count"] == 0

def test_parse_fills_remaining_from_completion(client, fake_completion):
    """Test that completion output tops up the parsed pairs."""
    fake_completion.responses = ["1. Nucleus: holds DNA\n2. Golgi: packages proteins\n3. Lysosome: digests waste"]

    data = parse(client, count=4).json()
    assert [card["term"] for card in data["flashcards"]] == ["Mitochondria", "Ribosome", "Nucleus", "Golgi"]
    assert data["parsed_count"] == 2
    assert data["generated_count"] == 2
    assert "Generate 2 educational flashcards" in fake_completion.prompts[0]

def test_parse_truncates_to_count(client, fake_completion):
    data = parse(client, count=1).json()
    assert [card["term"] for card in data["flashcards"]] == ["Mitochondria"]
    assert fake_completion.prompts == []

def test_parse_custom_delimiter(client, fake_completion):
    fake_completion.enabled = False
    data = parse(client, text="cat | feline\ndog | canine", delimiter="|").json()
    assert [(card["term"], card["description"]) for card in data["flashcards"]] == [
        ("cat", "feline"),
        ("dog", "canine")
    ]

def test_parse_rejects_blank_text(client):
    assert parse(client, text="   ").status_code == 400

def test_nothing_parsed_and_no_completion_is_unavailable(client, fake_completion):
    fake_completion.enabled = False
    response = parse(client, text="no pairs in this text")
    assert response.status_code == 503
    assert response.json()["error"] == "upstream_unavailable"

def test_nothing_parsed_and_completion_fails_is_unavailable(client, fake_completion):
    fake_completion.error = "Completion service timed out"
    response = parse(client, text="no pairs in this text")
    assert response.status_code == 503

def test_completion_failure_returns_parsed_pairs(client, fake_completion):
    fake_completion.error = "Completion service error: RuntimeError"
    response = parse(client, count=5)
    assert response.status_code == 200
    assert response.json()["parsed_count"] == 2
    assert response.json()["generated_count"] == 0

def test_generate_pairs_service(test_db, fake_completion):
    fake_completion.responses = ["Nucleus: holds DNA"]
    service = AIFlashcardService(test_db, fake_completion)

    result = asyncio.run(service.generate_pairs("nothing to parse", count=3))
    assert result.parsed_count == 0
    assert [pair.term for pair in result.flashcards] == ["Nucleus"]

    with pytest.raises(UpstreamUnavailable):
        asyncio.run(AIFlashcardService(test_db).generate_pairs("nothing to parse"))

def test_generate_saves_cards_to_set(client, make_user, make_set, fake_completion):
    fake_completion.enabled = False
    make_user("alice")
    flashcard_set = make_set("alice", cards=[("Existing", "card")])

    response = client.post(
        "/api/ai/generate",
        json={"set_id": flashcard_set.id, "text": SOURCE_TEXT},
        headers=auth("alice")
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Generated 2 flashcards"
    assert all(card["set_id"] == flashcard_set.id for card in data["flashcards"])

    cards = client.get(f"/api/flashcards/set/{flashcard_set.id}", headers=auth("alice")).json()
    assert [card["term"] for card in cards] == ["Existing", "Mitochondria", "Ribosome"]

def test_generate_requires_edit_access(client, make_user, make_set, grant):
    make_user("alice")
    make_user("bob")
    flashcard_set = make_set("alice")
    grant(flashcard_set.id, "bob", "viewer")

    response = client.post(
        "/api/ai/generate",
        json={"set_id": flashcard_set.id, "text": SOURCE_TEXT},
        headers=auth("bob")
    )
    assert response.status_code == 403

def multiple_choice(client, card_id, user_id="alice", **extra):
    response = client.post(
        "/api/ai/multiple-choice",
        json={"flashcard_id": card_id, **extra},
        headers=auth(user_id)
    )
    assert response.status_code == 200, response.text
    return response.json()

def test_multiple_choice_uses_set_descriptions(client, make_user, make_set, fake_completion):
    make_user("alice")
    flashcard_set = make_set("alice", cards=[
        ("Paris", "Capital of France"),
        ("Berlin", "Capital of Germany"),
        ("Madrid", "Capital of Spain"),
        ("Rome", "Capital of Italy"),
        ("Lisbon", "Capital of Portugal"),
    ])
    card_id = flashcard_set.flashcards[0].id

    data = multiple_choice(client, card_id)
    texts = [option["text"] for option in data["options"]]
    assert data["question"] == "Paris"
    assert data["correct_answer"] == "Capital of France"
    assert len(texts) == 4
    assert len(set(texts)) == 4
    assert [option["text"] for option in data["options"] if option["correct"]] == ["Capital of France"]
    assert fake_completion.prompts == []

def test_multiple_choice_skips_duplicates_of_the_answer(client, make_user, make_set, fake_completion):
    fake_completion.enabled = False
    make_user("alice")
    flashcard_set = make_set("alice", cards=[
        ("H2O", "Water"),
        ("Aqua", " water "),
        ("NaCl", "Salt"),
        ("Halite", "salt"),
    ])
    card_id = flashcard_set.flashcards[0].id

    data = multiple_choice(client, card_id)
    texts = sorted(option["text"] for option in data["options"])
    assert texts == ["Salt", "Water"]

def test_multiple_choice_tops_up_from_completion(client, make_user, make_set, fake_completion):
    fake_completion.responses = ["1. Capital of Germany\n2. Capital of Spain\n3. Capital of France\n4. Capital of Italy"]
    make_user("alice")
    flashcard_set = make_set("alice", cards=[
        ("Paris", "Capital of France"),
        ("Berlin", "Capital of Germany"),
    ])
    card_id = flashcard_set.flashcards[0].id

    data = multiple_choice(client, card_id, count=3)
    texts = sorted(option["text"] for option in data["options"])
    assert texts == ["Capital of France", "Capital of Germany", "Capital of Italy", "Capital of Spain"]
    assert "Paris" in fake_completion.prompts[0]

def test_multiple_choice_with_failed_completion_returns_fewer_options(client, make_user, make_set, fake_completion):
    fake_completion.error = "Completion service error: RuntimeError"
    make_user("alice")
    flashcard_set = make_set("alice", cards=[("Only", "one card")])
    card_id = flashcard_set.flashcards[0].id

    data = multiple_choice(client, card_id)
    assert data["options"] == [{"text": "one card", "correct": True}]

def test_multiple_choice_on_invisible_card_is_not_found(client, make_user, make_set):
    make_user("alice")
    flashcard_set = make_set("alice", cards=[("Term", "Description")])
    card_id = flashcard_set.flashcards[0].id

    response = client.post("/api/ai/multiple-choice", json={"flashcard_id": card_id}, headers=auth("bob"))
    assert response.status_code == 404

def suggestions(client, set_id, user_id="alice"):
    return client.post("/api/ai/suggestions", json={"set_id": set_id}, headers=auth(user_id))

def test_study_suggestions(client, make_user, make_set, fake_completion):
    fake_completion.responses = ["1. Space out reviews\n2. Explain each term aloud\n\n3. Quiz yourself daily\n4. Draw diagrams"]
    make_user("alice")
    flashcard_set = make_set("alice", cards=[(f"Term {i}", f"Description {i}") for i in range(7)])
    mastered_id = flashcard_set.flashcards[0].id
    for _ in range(3):
        client.post("/api/study/progress", json={"flashcard_id": mastered_id, "is_correct": True}, headers=auth("alice"))

    response = suggestions(client, flashcard_set.id)
    assert response.status_code == 200
    data = response.json()
    assert data["total_cards"] == 7
    assert data["needs_practice"] == 6
    assert data["suggestions"] == ["Space out reviews", "Explain each term aloud", "Quiz yourself daily"]
    assert [card["term"] for card in data["recommended_cards"]] == [f"Term {i}" for i in range(1, 6)]
    assert "Term 0: Description 0" in fake_completion.prompts[0]

@pytest.mark.parametrize("completion_state", ["disabled", "failing"])
def test_study_suggestions_without_completion(client, make_user, make_set, fake_completion, completion_state):
    if completion_state == "disabled":
        fake_completion.enabled = False
    else:
        fake_completion.error = "Completion service timed out"
    make_user("alice")
    flashcard_set = make_set("alice", cards=[("Term", "Description")])

    response = suggestions(client, flashcard_set.id)
    assert response.status_code == 200
    data = response.json()
    assert data["suggestions"] == []
    assert data["needs_practice"] == 1
    assert [card["term"] for card in data["recommended_cards"]] == ["Term"]

def test_study_suggestions_for_empty_or_invisible_set(client, make_user, make_set):
    make_user("alice")
    empty_set = make_set("alice")
    private_set = make_set("alice", cards=[("Term", "Description")])

    assert suggestions(client, empty_set.id).status_code == 404
    assert suggestions(client, private_set.id, user_id="bob").status_code == 404
