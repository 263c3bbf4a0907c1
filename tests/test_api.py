"""Tests for the FastAPI OptimalXO interface."""

from __future__ import annotations

from fastapi.testclient import TestClient

from optimalxo import ui
from optimalxo.ui import app


client = TestClient(app)
ui.COMPUTER_MOVE_DELAY = 0.0


def _new_game(vs_computer: bool = True) -> dict:
    response = client.post("/api/game", json={"vsComputer": vs_computer})
    assert response.status_code == 200
    return response.json()


def test_create_game_initial_state():
    payload = _new_game()
    assert payload["board"] == [""] * 9
    assert payload["statusMessage"] == "X's Turn"
    assert payload["isTerminal"] is False
    assert payload["vsComputer"] is True
    assert payload["computerPending"] is False


def test_create_game_without_body_defaults_to_computer():
    response = client.post("/api/game")
    assert response.status_code == 200
    assert response.json()["vsComputer"] is True


def test_move_schedules_computer_reply():
    game_id = _new_game()["id"]

    move_response = client.post(f"/api/game/{game_id}/move", json={"index": 0})
    assert move_response.status_code == 200
    state = move_response.json()
    assert state["board"][0] == "X"
    assert state["statusMessage"] == "O's Turn"
    assert state["computerPending"] is True

    follow_up = client.get(f"/api/game/{game_id}").json()
    assert follow_up["board"][4] == "O"
    assert follow_up["statusMessage"] == "X's Turn"
    assert follow_up["computerPending"] is False


def test_illegal_moves_are_ignored():
    game_id = _new_game(vs_computer=False)["id"]
    client.post(f"/api/game/{game_id}/move", json={"index": 0})

    duplicate = client.post(f"/api/game/{game_id}/move", json={"index": 0})
    assert duplicate.status_code == 200
    assert duplicate.json()["board"] == ["X"] + [""] * 8
    assert duplicate.json()["statusMessage"] == "O's Turn"

    out_of_range = client.post(f"/api/game/{game_id}/move", json={"index": 12})
    assert out_of_range.status_code == 200
    assert out_of_range.json()["board"] == ["X"] + [""] * 8


def test_malformed_move_rejected():
    game_id = _new_game()["id"]
    response = client.post(f"/api/game/{game_id}/move", json={"index": "centre"})
    assert response.status_code == 422


def test_two_player_game_to_win_and_restart():
    game_id = _new_game(vs_computer=False)["id"]
    for index in (0, 3, 1, 4, 2):
        state = client.post(f"/api/game/{game_id}/move", json={"index": index}).json()
    assert state["statusMessage"] == "X Wins!"
    assert state["isTerminal"] is True
    assert state["winningLine"] == [0, 1, 2]

    after_end = client.post(f"/api/game/{game_id}/move", json={"index": 8}).json()
    assert after_end["board"][8] == ""

    restarted = client.post(f"/api/game/{game_id}/restart").json()
    assert restarted["board"] == [""] * 9
    assert restarted["statusMessage"] == "X's Turn"
    assert restarted["isTerminal"] is False
    assert restarted["vsComputer"] is False


def test_mode_change_resets_game():
    game_id = _new_game(vs_computer=False)["id"]
    client.post(f"/api/game/{game_id}/move", json={"index": 0})

    state = client.post(
        f"/api/game/{game_id}/mode", json={"vsComputer": True}
    ).json()
    assert state["vsComputer"] is True
    assert state["board"] == [""] * 9
    assert state["statusMessage"] == "X's Turn"


def test_stale_computer_move_is_dropped_after_reset():
    game_id, session = ui._create_session(vs_computer=True)
    session.game.play_move(0)
    session.computer_pending = True
    stale_epoch = session.game.epoch

    ui._reset_session(game_id, session)
    ui._run_computer_turn(game_id, stale_epoch)

    assert session.game.cells == [""] * 9
    assert session.computer_pending is False


def test_computer_never_loses_through_api():
    game_id = _new_game()["id"]
    state = client.get(f"/api/game/{game_id}").json()
    while not state["isTerminal"]:
        index = state["board"].index("")
        state = client.post(f"/api/game/{game_id}/move", json={"index": index}).json()
        state = client.get(f"/api/game/{game_id}").json()
    assert state["winner"] != "X"


def test_missing_game_returns_404():
    missing = client.get("/api/game/INVALID")
    assert missing.status_code == 404
    assert client.post("/api/game/INVALID/restart").status_code == 404


def test_index_serves_page():
    response = client.get("/")
    assert response.status_code == 200
    assert "OptimalXO" in response.text


def test_moves_ignored_while_computer_to_move():
    game_id, session = ui._create_session(vs_computer=True)
    ui._apply_player_move(game_id, session, 0)
    assert session.game.cells == ["X"] + [""] * 8
    assert session.game.current_player == "O"
    # Nothing was scheduled, so nothing is left waiting
    assert session.computer_pending is False

    ui._apply_player_move(game_id, session, 1)
    assert session.game.cells == ["X"] + [""] * 8
    assert session.game.current_player == "O"
    assert session.computer_pending is False


def test_moves_ignored_while_computer_move_pending():
    game_id, session = ui._create_session(vs_computer=True)
    ui._apply_player_move(game_id, session, 0)
    session.computer_pending = True

    state = client.post(f"/api/game/{game_id}/move", json={"index": 1}).json()
    assert state["board"] == ["X"] + [""] * 8
    assert state["currentPlayer"] == "O"
    assert state["computerPending"] is True
    assert session.computer_pending is True


def test_idle_sessions_expire():
    stale_id, stale = ui._create_session(vs_computer=False)
    stale.last_seen -= ui.SESSION_TTL_SECONDS + 1
    fresh_id = _new_game()["id"]

    assert stale_id not in ui.SESSIONS
    assert client.get(f"/api/game/{stale_id}").status_code == 404
    assert client.get(f"/api/game/{fresh_id}").status_code == 200
