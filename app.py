from __future__ import annotations

import argparse
import logging
import os
import socket
from typing import Optional, Tuple

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from config import DEFAULT_PORTS, log_level
from legs import RowCountError
from models import LegID, Selection
from parsing import is_valid_number, is_valid_odds
from session import CalculatorSession, SessionError, UnknownLegError, get_session
from settings import apply_config_env

load_dotenv()
apply_config_env()

logger = logging.getLogger(__name__)

app = Flask(__name__)


def _error(message: str, code: int = 400) -> tuple:
    return jsonify({"success": False, "error": message, "error_code": code}), code


def _state(calc: CalculatorSession) -> tuple:
    payload = calc.snapshot()
    payload["success"] = True
    return jsonify(payload), 200


def _json_payload() -> Tuple[Optional[dict], Optional[tuple]]:
    if not request.get_data():
        return {}, None
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        return None, _error("Invalid JSON payload")
    if not isinstance(payload, dict):
        return None, _error("Payload must be a JSON object")
    return payload, None


def _text_field(payload: dict, key: str) -> Optional[str]:
    value = payload.get(key, "")
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return str(value)


def _int_field(payload: dict, key: str) -> Optional[int]:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


@app.errorhandler(UnknownLegError)
def _unknown_leg(exc: UnknownLegError) -> tuple:
    return _error(f"Unknown leg {exc.args[0] if exc.args else ''}".strip(), 404)


@app.errorhandler(RowCountError)
def _bad_row_count(exc: RowCountError) -> tuple:
    return _error(str(exc))


@app.errorhandler(SessionError)
def _session_error(exc: SessionError) -> tuple:
    return _error(str(exc))


@app.route("/api/state")
def state() -> tuple:
    return _state(get_session())


@app.route("/api/validate")
def validate() -> tuple:
    text = request.args.get("text", "")
    kind = (request.args.get("kind") or "number").strip().lower()
    if kind == "odds":
        valid = is_valid_odds(text)
    elif kind == "number":
        valid = is_valid_number(text)
    else:
        return _error("kind must be 'number' or 'odds'")
    return jsonify({"success": True, "text": text, "kind": kind, "valid": valid}), 200


@app.route("/api/total", methods=["POST"])
def total_stake() -> tuple:
    payload, error = _json_payload()
    if error:
        return error
    text = _text_field(payload, "stake")
    if text is None:
        return _error("stake must be a string")
    calc = get_session()
    calc.set_total_stake(text)
    return _state(calc)


@app.route("/api/legs/<int:leg_id>/stake", methods=["POST"])
def leg_stake(leg_id: int) -> tuple:
    payload, error = _json_payload()
    if error:
        return error
    text = _text_field(payload, "stake")
    if text is None:
        return _error("stake must be a string")
    calc = get_session()
    calc.set_leg_stake(leg_id, text)
    return _state(calc)


@app.route("/api/legs/<int:leg_id>/odds", methods=["POST"])
def leg_odds(leg_id: int) -> tuple:
    payload, error = _json_payload()
    if error:
        return error
    text = _text_field(payload, "odds")
    if text is None:
        return _error("odds must be a string")
    calc = get_session()
    calc.set_leg_odds(leg_id, text)
    return _state(calc)


@app.route("/api/legs/<int:leg_id>/toggle", methods=["POST"])
def toggle_leg(leg_id: int) -> tuple:
    calc = get_session()
    calc.toggle_leg(leg_id)
    return _state(calc)


@app.route("/api/legs/count", methods=["POST"])
def leg_count() -> tuple:
    payload, error = _json_payload()
    if error:
        return error
    count = _int_field(payload, "count")
    if count is None:
        return _error("count must be an integer")
    calc = get_session()
    calc.set_visible_count(count)
    return _state(calc)


@app.route("/api/select", methods=["POST"])
def select() -> tuple:
    payload, error = _json_payload()
    if error:
        return error
    kind = str(payload.get("kind") or "none").strip().lower()
    calc = get_session()
    if kind == "none":
        calc.focus_elsewhere()
    elif kind == "total":
        calc.select(Selection.total())
    elif kind == "leg":
        leg_id = _int_field(payload, "legId")
        if leg_id is None:
            return _error("legId must be an integer")
        calc.select(Selection.leg(LegID(leg_id)))
    else:
        return _error("kind must be 'none', 'total' or 'leg'")
    return _state(calc)


@app.route("/api/clear", methods=["POST"])
def clear() -> tuple:
    payload, error = _json_payload()
    if error:
        return error
    calc = get_session()
    field = payload.get("field")
    if not field:
        calc.clear_all()
        return _state(calc)
    leg_id = _int_field(payload, "legId")
    if leg_id is None and payload.get("legId") is not None:
        return _error("legId must be an integer")
    calc.clear_field(str(field), leg_id)
    return _state(calc)


def _port_available(port: int) -> bool:
    if port <= 0:
        return False
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.settimeout(0.5)
        try:
            sock.bind(("127.0.0.1", port))
        except OSError:
            return False
    return True


def _choose_port(preferred: Optional[int]) -> int:
    candidates = []
    if preferred:
        candidates.append(preferred)
    candidates.extend(DEFAULT_PORTS)
    seen = set()
    for port in candidates:
        if port in seen:
            continue
        seen.add(port)
        if _port_available(port):
            return port
    return 0  # fall back to OS-chosen port


def main() -> None:
    parser = argparse.ArgumentParser(description="Surebet calculator server")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to run the local server on (default 5000, auto-fallback if busy)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = _choose_port(args.port or _env_port())
    logger.info("Starting surebet calculator on port %s", port or "auto")
    app.run(port=port or 0, debug=False)


def _env_port() -> Optional[int]:
    raw = os.getenv("SUREBET_PORT", "").strip()
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


if __name__ == "__main__":
    main()
