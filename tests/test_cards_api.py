def _create_tag(client, headers, name, color=None):
    response = client.post("/api/tags", json={"name": name, "color": color}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def _create_card(client, headers, **fields):
    response = client.post("/api/v1/vocabulary", json=fields, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_create_card_with_tags_and_defaults(client, signup):
    headers = signup("alice")
    animals = _create_tag(client, headers, "animals", "#00aa00")

    card = _create_card(
        client,
        headers,
        front="  der Hund ",
        back="the dog",
        example_sentence="Der Hund bellt.",
        language_pair="EN_DE",
        tag_ids=[animals["id"]],
    )

    assert card["front"] == "der Hund"
    assert card["ease_factor"] == 2.5
    assert card["repetitions"] == 0
    assert card["interval_days"] == 0
    assert card["last_reviewed"] is None
    assert card["next_review"] == card["created_at"]
    assert card["tags"] == [{"id": animals["id"], "name": "animals", "color": "#00aa00"}]


def test_blank_front_is_rejected(client, signup):
    headers = signup("alice")
    response = client.post("/api/v1/vocabulary", json={"front": "  ", "back": "x"}, headers=headers)
    assert response.status_code == 400


def test_unknown_language_pair_is_rejected(client, signup):
    headers = signup("alice")
    response = client.post(
        "/api/v1/vocabulary",
        json={"front": "a", "back": "b", "language_pair": "EN_XX"},
        headers=headers,
    )
    assert response.status_code == 400


def test_cannot_attach_another_users_tag(client, signup):
    alice = signup("alice")
    bob = signup("bob")
    bobs_tag = _create_tag(client, bob, "private")

    response = client.post(
        "/api/v1/vocabulary",
        json={"front": "a", "back": "b", "tag_ids": [bobs_tag["id"]]},
        headers=alice,
    )

    assert response.status_code == 404
    assert client.get("/api/v1/vocabulary/count", headers=alice).json() == 0


def test_list_search_and_tag_filter(client, signup):
    headers = signup("alice")
    food = _create_tag(client, headers, "food")
    _create_card(client, headers, front="der Apfel", back="the apple", tag_ids=[food["id"]])
    _create_card(client, headers, front="die Hausaufgabe", back="the homework")
    _create_card(client, headers, front="das Haus", back="the house")

    everything = client.get("/api/v1/vocabulary", headers=headers).json()
    assert [card["front"] for card in everything] == ["der Apfel", "die Hausaufgabe", "das Haus"]

    by_prefix = client.get("/api/v1/vocabulary", params={"search": "haus"}, headers=headers).json()
    assert sorted(card["front"] for card in by_prefix) == ["das Haus", "die Hausaufgabe"]

    by_tag = client.get("/api/v1/vocabulary", params={"tag_id": food["id"]}, headers=headers).json()
    assert [card["front"] for card in by_tag] == ["der Apfel"]

    sorted_desc = client.get(
        "/api/v1/vocabulary",
        params={"sort_by": "front", "sort_direction": "desc"},
        headers=headers,
    ).json()
    assert [card["front"] for card in sorted_desc] == ["die Hausaufgabe", "der Apfel", "das Haus"]

    assert client.get("/api/v1/vocabulary", params={"search": "!!"}, headers=headers).json() == []


def test_update_keeps_schedule(client, signup):
    headers = signup("alice")
    card = _create_card(client, headers, front="el gato", back="the cat")
    reviewed = client.post("/api/review", json={"card_id": card["id"], "quality": 5}, headers=headers).json()

    response = client.put(
        f"/api/v1/vocabulary/{card['id']}",
        json={"front": "el gato", "back": "the cat (m.)", "language_pair": "EN_ES"},
        headers=headers,
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["back"] == "the cat (m.)"
    for field in ("ease_factor", "repetitions", "interval_days", "last_reviewed", "next_review"):
        assert updated[field] == reviewed[field]

    # A review after an edit still applies on top of the latest schedule
    again = client.post("/api/review", json={"card_id": card["id"], "quality": 5}, headers=headers).json()
    assert again["repetitions"] == 2
    assert again["interval_days"] == 6


def test_cards_are_private(client, signup):
    alice = signup("alice")
    bob = signup("bob")
    card = _create_card(client, alice, front="il cane", back="the dog")

    assert client.get(f"/api/v1/vocabulary/{card['id']}", headers=bob).status_code == 403
    assert client.delete(f"/api/v1/vocabulary/{card['id']}", headers=bob).status_code == 403
    assert client.get("/api/v1/vocabulary", headers=bob).json() == []
    assert client.get("/api/v1/vocabulary/999", headers=alice).status_code == 404


def test_delete_card(client, signup):
    headers = signup("alice")
    card = _create_card(client, headers, front="le chat", back="the cat")
    client.post("/api/review", json={"card_id": card["id"], "quality": 3}, headers=headers)

    assert client.delete(f"/api/v1/vocabulary/{card['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/v1/vocabulary/{card['id']}", headers=headers).status_code == 404
    assert client.get("/api/v1/vocabulary/count", headers=headers).json() == 0


def test_language_pairs(client):
    pairs = client.get("/api/v1/vocabulary/languages").json()
    assert {"code": "DE_FR", "display_name": "German ⇄ French"} in pairs
    assert len(pairs) == 10


def test_tag_crud(client, signup):
    alice = signup("alice")
    bob = signup("bob")
    verbs = _create_tag(client, alice, "verbs")

    assert client.post("/api/tags", json={"name": "verbs"}, headers=alice).status_code == 409
    assert _create_tag(client, bob, "verbs")["name"] == "verbs"

    renamed = client.put(f"/api/tags/{verbs['id']}", json={"name": "Verben", "color": "red"}, headers=alice)
    assert renamed.status_code == 200
    assert renamed.json() == {"id": verbs["id"], "name": "Verben", "color": "red"}
    assert client.put(f"/api/tags/{verbs['id']}", json={"name": "x"}, headers=bob).status_code == 403

    assert [tag["name"] for tag in client.get("/api/tags", headers=alice).json()] == ["Verben"]
    assert client.delete(f"/api/tags/{verbs['id']}", headers=alice).status_code == 204
    assert client.get("/api/tags", headers=alice).json() == []
    assert client.delete(f"/api/tags/{verbs['id']}", headers=alice).status_code == 404


def test_search_term_matches_substrings(client, signup):
    headers = signup("alice")
    _create_card(client, headers, front="das Haus", back="the house")
    _create_card(client, headers, front="die Maus", back="the mouse", example_sentence="Die Maus ist klein.")
    _create_card(client, headers, front="der Hund", back="the dog")
    _create_card(client, headers, front="100% sicher", back="completely sure")

    def fronts(term):
        response = client.get("/api/v1/vocabulary", params={"searchTerm": term}, headers=headers)
        assert response.status_code == 200
        return sorted(card["front"] for card in response.json())

    assert fronts("ouse") == ["das Haus", "die Maus"]
    assert fronts("KLEIN") == ["die Maus"]
    assert fronts("%") == ["100% sicher"]
    assert fronts("_") == []
    assert len(fronts("  ")) == 4


def test_out_of_range_ids_are_rejected(client, signup):
    headers = signup("alice")
    too_big = 2**64

    assert client.get(f"/api/v1/vocabulary/{too_big}", headers=headers).status_code == 400
    assert client.get("/api/v1/vocabulary/0", headers=headers).status_code == 400
    assert client.delete(f"/api/v1/vocabulary/{too_big}", headers=headers).status_code == 400
    assert client.get("/api/v1/vocabulary", params={"tag_id": too_big}, headers=headers).status_code == 400
    assert client.delete(f"/api/tags/{too_big}", headers=headers).status_code == 400

    response = client.post(
        "/api/v1/vocabulary",
        json={"front": "a", "back": "b", "tag_ids": [too_big]},
        headers=headers,
    )
    assert response.status_code == 400
    assert "tag_ids" in response.json()["detail"]
