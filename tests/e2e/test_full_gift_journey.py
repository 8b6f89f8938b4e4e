from fastapi.testclient import TestClient

from app.main import app

ALICE = {"Authorization": "Bearer alice-token"}
BOB = {"Authorization": "Bearer bob-token"}
CAROL = {"Authorization": "Bearer carol-token"}


def test_full_gift_journey(store, google, clock):
    client = TestClient(app)

    # Sender signs in and locks a gift for one hour
    me = client.post("/auth/identity", json={"credential": "alice-token"})
    assert me.status_code == 200
    alice_id = me.json()["user"]["id"]

    created = client.post(
        "/gift",
        json={
            "senderId": alice_id,
            "receiverEmail": "bob@example.com",
            "textMessage": "See you at eight",
            "imageUrl": "https://img.test/cake.png",
            "unlockTimestamp": "2030-01-01T13:00:00Z",
            "passcode": "1234",
        },
        headers=ALICE,
    )
    assert created.status_code == 201
    gift_id = created.json()["gift_id"]

    # The share page works before anyone signs in
    meta = client.get(f"/gift/{gift_id}").json()
    assert meta["sender_name"] == "Alice"
    assert meta["is_unlocked"] is False

    # Too early, even with the right passcode
    early = client.post(
        "/gift/open", json={"giftId": gift_id, "enteredPasscode": "1234"}, headers=BOB
    )
    assert early.status_code == 403
    assert early.json()["code"] == "not_yet_unlocked"

    clock.advance(hours=1, minutes=1)

    wrong = client.post(
        "/gift/open", json={"giftId": gift_id, "enteredPasscode": "0000"}, headers=BOB
    )
    assert wrong.status_code == 401
    assert wrong.json()["code"] == "invalid_passcode"

    opened = client.post(
        "/gift/open", json={"giftId": gift_id, "enteredPasscode": "1234"}, headers=BOB
    )
    assert opened.status_code == 200
    assert opened.json()["first_open"] is True
    assert opened.json()["content"] == {
        "text_message": "See you at eight",
        "image_url": "https://img.test/cake.png",
        "video_url": None,
    }

    again = client.post(
        "/gift/open", json={"giftId": gift_id, "enteredPasscode": "1234"}, headers=BOB
    )
    assert again.status_code == 200
    assert again.json()["first_open"] is False

    # Sender's history shows the gift opened and both lifecycle events
    sent = client.get("/gifts", headers=ALICE).json()
    assert sent[0]["gift_id"] == gift_id
    assert sent[0]["opened"] is True

    trail = client.get("/transactions", params={"gift_id": gift_id}, headers=ALICE).json()
    assert [t["event"] for t in trail] == ["CREATED", "OPENED"]
    assert trail[1]["actor_email"] == "bob@example.com"


def test_only_the_named_recipient_can_open(store, google, clock):
    client = TestClient(app)

    gift_id = client.post(
        "/gift",
        json={
            "receiverEmail": "bob@example.com",
            "textMessage": "for Bob only",
            "unlockTimestamp": "2030-01-01T12:30:00Z",
            "passcode": "1234",
        },
        headers=ALICE,
    ).json()["gift_id"]
    clock.advance(hours=1)

    stranger = client.post(
        "/gift/open", json={"giftId": gift_id, "enteredPasscode": "1234"}, headers=CAROL
    )
    assert stranger.status_code == 403
    assert stranger.json()["code"] == "forbidden"
    assert store.gifts[gift_id].opened is False

    recipient = client.post(
        "/gift/open", json={"giftId": gift_id, "enteredPasscode": "1234"}, headers=BOB
    )
    assert recipient.status_code == 200
