"""Integration tests for the room lifecycle over HTTP."""
import logging
import pathlib

from fastapi.testclient import TestClient

from lobby.main import create_app
from lobby.schemas.enums import GameType
from lobby.services.games import TicTacToeEngine
from lobby.services.lobby import LobbyContext

TTT = "/Game/api/TicTacToeBox/Game"
RPS = "/Game/api/RockPaperScissor/Game"
AIRPLANE = "/Game/api/FindAirplane/Game"


def _create(client, base=TTT):
    resp = client.post(base)
    assert resp.status_code == 200, resp.text
    return resp.json()


def _join(client, room_id, base=TTT):
    return client.get(base, params={"roomId": room_id})


def _move(client, room_id, move, base=TTT):
    return client.post(f"{base}/room", params={"roomId": room_id}, json={"move": move})


def _paired_room(client, make_client, base=TTT):
    """Create a room with `client` and fill player2 with a fresh browser."""
    room_id = _create(client, base)["roomId"]
    guest = make_client()
    resp = _join(guest, room_id, base)
    assert resp.status_code == 200, resp.text
    return room_id, guest


class TestCreateRoom:
    """Room creation and session issuance."""

    def test_create_issues_cookie_and_waiting_room(self, client, lobby):
        resp = client.post(TTT)
        assert resp.status_code == 200
        assert "gameUser=" in resp.headers["set-cookie"]

        data = resp.json()
        assert data["slot"] == "player1"
        assert data["status"] == "waiting"
        assert data["ready"] is False
        assert data["created"] is True
        assert data["gameType"] == "TicTacToeBox"

        registry = lobby.registry(GameType.TICTACTOE)
        assert registry.count() == 1
        room = registry.get_room(data["roomId"])
        assert room.player1 == client.cookies["gameUser"]
        assert room.player2 is None

    def test_create_via_get(self, client):
        resp = client.get(RPS)
        assert resp.status_code == 200
        assert resp.json()["gameType"] == "RockPaperScissor"

    def test_existing_cookie_is_kept(self, client):
        _create(client)
        token = client.cookies["gameUser"]
        resp = client.post(TTT)
        assert "set-cookie" not in resp.headers
        assert client.cookies["gameUser"] == token

    def test_rooms_are_per_game_type(self, client, lobby):
        room_id = _create(client, TTT)["roomId"]
        resp = _join(client, room_id, RPS)
        assert resp.status_code == 404
        assert lobby.registry(GameType.RPS).count() == 0

    def test_create_and_join_are_logged(self, client, make_client, caplog):
        with caplog.at_level(logging.DEBUG, logger="lobby.api.endpoints.game"):
            room_id = _create(client)["roomId"]
            _join(make_client(), room_id)
        messages = [r.getMessage() for r in caplog.records if r.name == "lobby.api.endpoints.game"]
        assert f"[TicTacToeBox] Created room {room_id} as player1" in messages
        assert f"[TicTacToeBox] Joined room {room_id} as player2" in messages

    def test_unknown_game_type(self, client):
        resp = client.post("/Game/api/Chess/Game")
        assert resp.status_code == 422


class TestJoinRoom:
    """Pairing a second browser into a room."""

    def test_second_client_joins_as_player2(self, client, make_client):
        room_id = _create(client)["roomId"]
        guest = make_client()
        resp = _join(guest, room_id)
        assert resp.status_code == 200
        data = resp.json()
        assert data["slot"] == "player2"
        assert data["status"] == "active"
        assert data["ready"] is True
        assert data["created"] is False

    def test_third_client_gets_room_full(self, client, make_client):
        room_id, _ = _paired_room(client, make_client)
        resp = _join(make_client(), room_id)
        assert resp.status_code == 409
        assert resp.json()["error"] == "ROOM_FULL"

    def test_creator_rejoin_keeps_player1(self, client, make_client):
        room_id = _create(client)["roomId"]
        resp = _join(client, room_id)
        assert resp.status_code == 200
        assert resp.json()["slot"] == "player1"
        assert resp.json()["status"] == "waiting"

    def test_join_unknown_room(self, client):
        resp = _join(client, "424242")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "ROOM_NOT_FOUND"
        assert body["details"] == {"room_id": "424242"}

    def test_wait_reports_player2(self, client, make_client):
        room_id = _create(client)["roomId"]
        resp = client.get(f"{TTT}/wait", params={"roomId": room_id})
        assert resp.json()["ready"] is False

        _join(make_client(), room_id)
        resp = client.get(f"{TTT}/wait", params={"roomId": room_id})
        assert resp.status_code == 200
        assert resp.json()["ready"] is True
        assert resp.json()["slot"] == "player1"

    def test_expired_room_is_gone(self, client, make_client, lobby, clock):
        room_id = _create(client)["roomId"]
        clock.advance(lobby.settings.ROOM_TTL_SECONDS)
        assert _join(make_client(), room_id).status_code == 404
        assert lobby.registry(GameType.TICTACTOE).count() == 0


class TestMoves:
    """Submitting and polling game state."""

    def test_move_before_player2_is_rejected(self, client):
        room_id = _create(client)["roomId"]
        resp = _move(client, room_id, {"cell": 0})
        assert resp.status_code == 400
        assert resp.json()["error"] == "MOVE_REJECTED"

    def test_spectator_cannot_move(self, client, make_client):
        room_id, _ = _paired_room(client, make_client)
        resp = _move(make_client(), room_id, {"cell": 0})
        assert resp.status_code == 403
        assert resp.json()["error"] == "NOT_IN_ROOM"

    def test_moves_and_polling(self, client, make_client):
        room_id, guest = _paired_room(client, make_client)

        resp = _move(client, room_id, {"cell": 4})
        assert resp.status_code == 200
        assert resp.json()["state"]["board"][4] == "X"
        assert resp.json()["state"]["yourTurn"] is False

        resp = _move(client, room_id, {"cell": 0})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Not your turn"

        resp = guest.get(f"{TTT}/room", params={"roomId": room_id})
        assert resp.status_code == 200
        data = resp.json()
        assert data["slot"] == "player2"
        assert data["state"]["yourTurn"] is True
        assert data["state"]["mySymbol"] == "O"

    def test_spectator_poll_gets_public_view(self, client, make_client):
        room_id, _ = _paired_room(client, make_client)
        resp = make_client().get(f"{TTT}/room", params={"roomId": room_id})
        assert resp.status_code == 200
        assert resp.json()["slot"] == "none"
        assert resp.json()["state"]["mySymbol"] is None

    def test_win_finishes_room(self, client, make_client, lobby, clock):
        room_id, guest = _paired_room(client, make_client)
        for player, cell in [(client, 0), (guest, 3), (client, 1), (guest, 4), (client, 2)]:
            resp = _move(player, room_id, {"cell": cell})
            assert resp.status_code == 200, resp.text

        data = resp.json()
        assert data["status"] == "finished"
        assert data["state"]["winner"] == "player1"
        assert data["state"]["winningLine"] == [0, 1, 2]

        room = lobby.registry(GameType.TICTACTOE).get_room(room_id)
        assert room.expire == clock.now + lobby.settings.FINISHED_ROOM_TTL_SECONDS
        clock.advance(lobby.settings.FINISHED_ROOM_TTL_SECONDS)
        assert guest.get(f"{TTT}/room", params={"roomId": room_id}).status_code == 404

    def test_missing_move_body(self, client, make_client):
        room_id, _ = _paired_room(client, make_client)
        resp = client.post(f"{TTT}/room", params={"roomId": room_id}, json={})
        assert resp.status_code == 422


class TestRoundEnd:
    """Rock-paper-scissors round results."""

    def test_round_end_after_round(self, client, make_client):
        room_id, guest = _paired_room(client, make_client, RPS)

        resp = client.get(f"{RPS}/roundend", params={"roomId": room_id})
        assert resp.status_code == 200
        assert resp.json()["result"] is None

        _move(client, room_id, {"choice": "rock"}, RPS)
        _move(guest, room_id, {"choice": "scissors"}, RPS)

        resp = guest.get(f"{RPS}/roundend", params={"roomId": room_id})
        assert resp.status_code == 200
        data = resp.json()
        assert data["slot"] == "player2"
        assert data["result"]["winner"] == "player1"
        assert data["result"]["choices"] == {"player1": "rock", "player2": "scissors"}
        assert data["result"]["scores"] == {"player1": 1, "player2": 0}

    def test_round_end_unsupported_for_other_games(self, client):
        room_id = _create(client)["roomId"]
        resp = client.get(f"{TTT}/roundend", params={"roomId": room_id})
        assert resp.status_code == 404
        assert resp.json()["error"] == "UNSUPPORTED_OPERATION"


class TestFindAirplaneFlow:
    """Placement then guessing over HTTP."""

    def test_place_and_guess(self, client, make_client):
        room_id, guest = _paired_room(client, make_client, AIRPLANE)
        planes = [
            {"x": 2, "y": 0, "direction": "up"},
            {"x": 7, "y": 0, "direction": "up"},
            {"x": 2, "y": 5, "direction": "up"},
        ]
        assert _move(client, room_id, {"planes": planes}, AIRPLANE).status_code == 200
        resp = _move(guest, room_id, {"planes": planes}, AIRPLANE)
        assert resp.json()["state"]["phase"] == "guessing"

        resp = _move(client, room_id, {"x": 7, "y": 0}, AIRPLANE)
        assert resp.status_code == 200
        assert resp.json()["state"]["myShots"] == [{"x": 7, "y": 0, "result": "head"}]
        assert "opponentPlanes" not in resp.json()["state"]


class TestServerErrors:

    def test_capacity_returns_503(self, test_settings, clock):
        test_settings.MAX_ROOMS_PER_GAME = 1
        app = create_app(LobbyContext(test_settings, clock=clock))
        with TestClient(app) as c:
            _create(c)
            resp = c.post(TTT)
        assert resp.status_code == 503
        assert resp.json()["error"] == "SERVER_CAPACITY"

    def _move_with_broken_engine(self, settings):
        """Pair two browsers in a room whose engine crashes, then submit a move."""
        class BrokenEngine(TicTacToeEngine):
            def apply_move(self, state, slot, move):
                raise RuntimeError("boom")

        context = LobbyContext(settings, engines={GameType.TICTACTOE: BrokenEngine()})
        app = create_app(context)
        with TestClient(app, raise_server_exceptions=False) as host:
            room_id = _create(host)["roomId"]
            with TestClient(app, raise_server_exceptions=False) as guest:
                _join(guest, room_id)
            return _move(host, room_id, {"cell": 0})

    def test_unexpected_error_returns_500(self, test_settings):
        assert test_settings.DEBUG is False
        resp = self._move_with_broken_engine(test_settings)
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "INTERNAL_ERROR"
        assert body["message"] == "An unexpected error occurred."
        assert "boom" not in resp.text

    def test_debug_mode_returns_traceback(self, test_settings):
        test_settings.DEBUG = True
        resp = self._move_with_broken_engine(test_settings)
        assert resp.status_code == 500
        assert "RuntimeError" in resp.text
        assert "boom" in resp.text


class TestAppSurface:
    """CORS, health and static frontend routes."""

    def test_cors_preflight(self, client):
        resp = client.options(
            TTT,
            headers={
                "Origin": "http://localhost:8080",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:8080"
        assert resp.headers["access-control-allow-credentials"] == "true"

    def test_cors_rejects_unknown_origin(self, client):
        resp = client.options(
            TTT,
            headers={
                "Origin": "http://evil.test",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert resp.status_code == 400

    def test_health(self, client):
        _create(client)
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert resp.json()["rooms"]["TicTacToeBox"] == 1

    def test_index_missing_frontend(self, client):
        resp = client.get("/")
        assert resp.status_code == 404

    def test_index_and_assets_served(self, test_settings, lobby):
        dist_dir = pathlib.Path(test_settings.FRONTEND_DIST_DIR)
        (dist_dir / "js").mkdir(parents=True)
        (dist_dir / "index.html").write_text("<html>lobby</html>")
        (dist_dir / "js" / "app.js").write_text("console.log('hi')")

        with TestClient(create_app(lobby)) as c:
            for path in ("/", "/Game"):
                resp = c.get(path)
                assert resp.status_code == 200
                assert "lobby" in resp.text
            assert c.get("/js/app.js").status_code == 200
            assert c.get("/css/app.css").status_code == 404

    def test_lifespan_with_sweeper(self, test_settings, lobby):
        test_settings.SWEEP_INTERVAL_SECONDS = 3600
        with TestClient(create_app(lobby)) as c:
            assert c.get("/health").status_code == 200
