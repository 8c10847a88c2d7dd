from datetime import timedelta

from db.cards import count_due_cards, insert_card, list_due_cards
from services.reviews import due_cards_for, due_count_for
from utils.timeutil import to_db

from conftest import FIXED_NOW


def _card_due_at(conn, owner_id, front, due_at):
    card_id = insert_card(conn, owner_id, {"front": front, "back": front.upper()}, FIXED_NOW - timedelta(days=30))
    conn.execute("UPDATE cards SET next_review = ? WHERE id = ?", (to_db(due_at), card_id))
    return card_id


def test_due_list_filters_and_orders(conn, make_owner):
    owner_id = make_owner("alice")
    _card_due_at(conn, owner_id, "morgen", FIXED_NOW + timedelta(days=1))
    yesterday = _card_due_at(conn, owner_id, "gestern", FIXED_NOW - timedelta(days=1))
    two_days = _card_due_at(conn, owner_id, "vorgestern", FIXED_NOW - timedelta(days=2))

    due = list_due_cards(conn, owner_id, FIXED_NOW)

    assert [card.id for card in due] == [two_days, yesterday]
    assert count_due_cards(conn, owner_id, FIXED_NOW) == 2


def test_due_boundary_is_inclusive_and_ties_break_by_id(conn, make_owner):
    owner_id = make_owner("alice")
    first = _card_due_at(conn, owner_id, "eins", FIXED_NOW)
    second = _card_due_at(conn, owner_id, "zwei", FIXED_NOW)
    _card_due_at(conn, owner_id, "drei", FIXED_NOW + timedelta(microseconds=1))

    assert [card.id for card in list_due_cards(conn, owner_id, FIXED_NOW)] == [first, second]
    assert count_due_cards(conn, owner_id, FIXED_NOW) == 2


def test_due_list_is_owner_scoped(conn, make_owner):
    alice = make_owner("alice")
    bob = make_owner("bob")
    _card_due_at(conn, alice, "Katze", FIXED_NOW - timedelta(hours=1))
    bobs = _card_due_at(conn, bob, "Maus", FIXED_NOW - timedelta(hours=1))

    assert [card.id for card in due_cards_for(conn, "bob", FIXED_NOW)] == [bobs]
    assert due_count_for(conn, "alice", FIXED_NOW) == 1


def test_new_card_is_due_immediately(conn, make_owner):
    owner_id = make_owner("alice")
    card_id = insert_card(conn, owner_id, {"front": "neu", "back": "new"}, FIXED_NOW)

    assert [card.id for card in list_due_cards(conn, owner_id, FIXED_NOW)] == [card_id]
    assert count_due_cards(conn, owner_id, FIXED_NOW - timedelta(seconds=1)) == 0


def test_due_endpoints(client, signup):
    headers = signup("alice")
    created = client.post("/api/v1/vocabulary", json={"front": "Apfel", "back": "apple"}, headers=headers)
    assert created.status_code == 200

    due = client.get("/api/v1/vocabulary/due", headers=headers)
    assert due.status_code == 200
    assert [card["front"] for card in due.json()] == ["Apfel"]
    assert client.get("/api/v1/vocabulary/due/count", headers=headers).json() == 1

    review = client.post("/api/review", json={"card_id": created.json()["id"], "quality": 5}, headers=headers)
    assert review.status_code == 200
    assert client.get("/api/v1/vocabulary/due/count", headers=headers).json() == 0
    assert client.get("/api/v1/vocabulary/due", headers=headers).json() == []
