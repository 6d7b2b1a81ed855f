"""
End-to-end tests through the FastAPI WebSocket endpoint.
"""

from app import create_app
from backend import RoomRegistry


def join(ws, room_id, player_id, player_name):
    ws.send_json({"type": "join", "roomId": room_id, "playerId": player_id, "playerName": player_name})


def roster_of(message):
    assert message["type"] == "players"
    return [(p["id"], p["name"], p["online"], p["score"]) for p in message["players"]]


def test_health_reports_room_count(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "rooms": 0}


def test_unknown_room_details_is_404(client):
    assert client.get("/rooms/missing").status_code == 404


def test_two_players_share_puzzle_state(client):
    with client.websocket_connect("/") as alice:
        join(alice, "r1", "a1", "Alice")
        assert alice.receive_json() == {"type": "puzzle_state", "pieces": [], "gameState": {}}
        assert roster_of(alice.receive_json()) == [("a1", "Alice", True, 0)]

        with client.websocket_connect("/") as bob:
            join(bob, "r1", "b1", "Bob")
            assert bob.receive_json() == {"type": "puzzle_state", "pieces": [], "gameState": {}}
            expected = [("a1", "Alice", True, 0), ("b1", "Bob", True, 0)]
            assert roster_of(bob.receive_json()) == expected
            assert roster_of(alice.receive_json()) == expected

            pieces = [{"id": 1, "x": 0, "y": 0}]
            alice.send_json({"type": "init_puzzle", "pieces": pieces})
            state = {"type": "puzzle_state", "pieces": pieces, "gameState": {}}
            assert alice.receive_json() == state
            assert bob.receive_json() == state

        assert roster_of(alice.receive_json()) == [("a1", "Alice", True, 0), ("b1", "Bob", False, 0)]

        details = client.get("/rooms/r1").json()
        assert details["connection_count"] == 1
        assert details["online_players_count"] == 1
        assert details["piece_count"] == 1
        assert [p["id"] for p in details["players"]] == ["a1", "b1"]


def test_malformed_frames_keep_connection_open(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("{not json")
        ws.send_json({"type": "piece_move", "pieces": [{"id": 1}]})
        ws.send_bytes(b"\x00\x01")
        join(ws, "r2", "a1", "Alice")
        assert ws.receive_json()["pieces"] == []
        ws.receive_json()

        ws.send_json({"type": "mystery"})
        ws.send_json({"type": "chat_message", "playerId": "a1", "playerName": "Alice",
                      "message": "still here", "timestamp": 5})
        chat = ws.receive_json()
        assert chat["type"] == "chat_message"
        assert chat["message"]["message"] == "still here"
        assert chat["message"]["timestamp"] == 5


def test_piece_move_echoes_to_sender(client):
    with client.websocket_connect("/") as ws:
        join(ws, None, "a1", "Alice")
        ws.receive_json()
        ws.receive_json()

        ws.send_json({"type": "piece_move", "pieces": [{"id": 4, "x": 3, "y": 1}]})
        assert ws.receive_json() == {"type": "piece_move", "pieces": [{"id": 4, "x": 3, "y": 1}]}

        rooms = client.get("/rooms/").json()
        assert rooms == [{"room_id": "default", "connection_count": 1, "player_count": 1, "piece_count": 1}]


def test_create_app_uses_supplied_registry():
    registry = RoomRegistry()
    app = create_app(registry=registry)

    assert app.state.registry is registry
    assert create_app().state.registry is not registry
