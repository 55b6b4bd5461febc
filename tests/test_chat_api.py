import pytest

from helpers import API, bearer


@pytest.fixture
def pair(register_viewer, register_provider):
    """Um viewer e uma imobiliária, cada um com sua sessão."""
    viewer_token, viewer = register_viewer()
    agency_token, agency = register_provider()
    return (viewer_token, viewer), (agency_token, agency)


def open_conversation(client, token, participant_id):
    r = client.post(f"{API}/chat/conversations", json={"participantId": participant_id}, headers=bearer(token))
    assert r.status_code == 200, r.text
    return r.json()


class TestConversations:
    def test_same_pair_reuses_conversation(self, client, pair):
        (viewer_token, viewer), (agency_token, agency) = pair
        first = open_conversation(client, viewer_token, agency["id"])
        second = open_conversation(client, agency_token, viewer["id"])
        assert first["id"] == second["id"]
        assert {first["participant1Id"], first["participant2Id"]} == {viewer["id"], agency["id"]}

    def test_cannot_talk_to_yourself(self, client, pair):
        (viewer_token, viewer), _ = pair
        r = client.post(f"{API}/chat/conversations", json={"participantId": viewer["id"]}, headers=bearer(viewer_token))
        assert r.status_code == 422

    def test_unknown_participant(self, client, pair):
        (viewer_token, _), _ = pair
        r = client.post(f"{API}/chat/conversations", json={"participantId": "ghost"}, headers=bearer(viewer_token))
        assert r.status_code == 404

    def test_outsider_cannot_read(self, client, pair, register_viewer):
        (viewer_token, _), (_, agency) = pair
        conv = open_conversation(client, viewer_token, agency["id"])
        outsider_token, _ = register_viewer(email="outsider@example.com")
        r = client.get(f"{API}/chat/conversations/{conv['id']}/messages", headers=bearer(outsider_token))
        assert r.status_code == 404


class TestMessages:
    def test_send_list_and_read(self, client, pair):
        (viewer_token, viewer), (agency_token, agency) = pair
        conv = open_conversation(client, viewer_token, agency["id"])
        url = f"{API}/chat/conversations/{conv['id']}/messages"

        r = client.post(url, json={"message": "Olá, o apartamento ainda está disponível?"}, headers=bearer(viewer_token))
        assert r.status_code == 201
        sent = r.json()
        assert sent["senderId"] == viewer["id"]
        assert sent["receiverId"] == agency["id"]
        assert sent["isRead"] is False

        reply = client.post(url, json={"message": "Sim, está!"}, headers=bearer(agency_token)).json()

        messages = client.get(url, headers=bearer(agency_token)).json()
        assert [m["id"] for m in messages] == [sent["id"], reply["id"]]

        newer = client.get(url, params={"after": sent["createdAt"]}, headers=bearer(viewer_token)).json()
        assert [m["id"] for m in newer] == [reply["id"]]

        r = client.post(f"{API}/chat/conversations/{conv['id']}/read", headers=bearer(agency_token))
        assert r.json() == {"updated": 1}

        conversations = client.get(f"{API}/chat/conversations", headers=bearer(viewer_token)).json()
        assert conversations[0]["lastMessage"] == "Sim, está!"

    def test_receiver_is_notified(self, client, pair):
        (viewer_token, _), (agency_token, agency) = pair
        conv = open_conversation(client, viewer_token, agency["id"])
        client.post(
            f"{API}/chat/conversations/{conv['id']}/messages",
            json={"message": "Tenho interesse"},
            headers=bearer(viewer_token),
        )
        notes = client.get(f"{API}/notifications", headers=bearer(agency_token)).json()
        assert len(notes) == 1
        assert notes[0]["type"] == "new_message"
        assert notes[0]["relatedId"] == conv["id"]

    def test_empty_message(self, client, pair):
        (viewer_token, _), (_, agency) = pair
        conv = open_conversation(client, viewer_token, agency["id"])
        r = client.post(
            f"{API}/chat/conversations/{conv['id']}/messages", json={"message": ""}, headers=bearer(viewer_token)
        )
        assert r.status_code == 422


class TestAssistant:
    @pytest.mark.parametrize(
        "text,start",
        [
            ("Olá, tudo bem?", "Olá! Como posso"),
            ("preciso de ajuda", "Estou aqui para ajudar"),
            ("quais propriedades vocês têm?", "Temos várias propriedades"),
            ("bom dia", "Interessante!"),
        ],
    )
    def test_canned_replies(self, client, text, start):
        r = client.post(f"{API}/chat/assistant", json={"message": text})
        assert r.status_code == 200
        assert r.json()["message"].startswith(start)
