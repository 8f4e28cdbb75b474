"""
Headless runner for Tesouro.

Provides a JSON I/O interface for programmatic control.
Input: one JSON command per line on stdin
Output: JSON responses and bus events on stdout

This lets another process (a web front end, a bot, a test harness)
drive the engine without touching Python.
"""

import json
import sys
from pathlib import Path
from typing import TextIO

from .. import __version__
from ..config import EngineConfig, load_config
from ..state.catalog import Catalog, default_catalog
from ..state.event_bus import EventBus, GameEvent
from ..state.schemas.result import CommandResult
from ..state.store import JsonSessionStore, SessionRecord, SessionStore
from ..systems.turns import GameEngine
from ..tools.rng import SeededRandom


class HeadlessRunner:
    """
    Headless engine runner with JSON I/O.

    Commands are read as JSON objects, one per line. Every command gets
    exactly one "result" object back; bus events produced by the command
    are written before it as "event" objects.
    """

    def __init__(
        self,
        sessions_dir: Path | None = None,
        config: EngineConfig | None = None,
        catalog: Catalog | None = None,
        seed: int | None = None,
        biome: str | None = None,
        store: SessionStore | None = None,
        output: TextIO = sys.stdout,
    ):
        self.output = output
        self.config = config or load_config()
        self.catalog = catalog or default_catalog()
        self.store = store or JsonSessionStore(sessions_dir or Path("sessions"))
        self.bus = EventBus()
        self.bus.on_all(self._emit_event)

        self.session = SessionRecord()
        self.engine = GameEngine(
            catalog=self.catalog,
            config=self.config,
            rng=SeededRandom(seed),
            bus=self.bus,
            biome=biome,
            session_id=self.session.id,
        )

    def _emit_event(self, event: GameEvent):
        """Emit a bus event as JSON."""
        self._write_json({
            "type": "event",
            "event_type": event.type.value,
            "data": event.data,
            "session_id": event.session_id,
            "turn": event.turn,
            "timestamp": event.timestamp.isoformat(),
        })

    def _write_json(self, obj: dict):
        """Write a JSON object to output followed by newline."""
        json.dump(obj, self.output, ensure_ascii=False)
        self.output.write("\n")
        self.output.flush()

    def _emit_response(self, response_type: str, **data):
        self._write_json({
            "type": response_type,
            **data,
        })

    def handle_command(self, cmd: dict) -> dict:
        """
        Handle a JSON command.

        Commands:
            {"cmd": "state"} - Full snapshot
            {"cmd": "play_card", "index": 0}
            {"cmd": "discard_card", "index": 0}
            {"cmd": "end_turn"}
            {"cmd": "resolve_event", "choice": 0}
            {"cmd": "resolve_council", "option": 0}
            {"cmd": "pick_reward", "index": 0}
            {"cmd": "skip_reward"}
            {"cmd": "set_biome", "biome": "praia"}
            {"cmd": "reset", "biome": "praia"} - biome optional
            {"cmd": "alerts"} / {"cmd": "report"}
            {"cmd": "save"} / {"cmd": "load", "session_id": "..."}
            {"cmd": "list"} - Saved sessions
            {"cmd": "quit"} - Exit

        Returns:
            Response dict
        """
        cmd_type = cmd.get("cmd", "")

        if cmd_type == "state":
            return {"ok": True, "session_id": self.session.id, "state": self.engine.snapshot()}
        elif cmd_type == "play_card":
            return self._indexed(cmd, "index", self.engine.play_card)
        elif cmd_type == "discard_card":
            return self._indexed(cmd, "index", self.engine.discard_card)
        elif cmd_type == "end_turn":
            return self._result(self.engine.end_turn())
        elif cmd_type == "resolve_event":
            return self._indexed(cmd, "choice", self.engine.resolve_event)
        elif cmd_type == "resolve_council":
            return self._indexed(cmd, "option", self.engine.resolve_council)
        elif cmd_type == "pick_reward":
            return self._indexed(cmd, "index", self.engine.pick_reward)
        elif cmd_type == "skip_reward":
            return self._result(self.engine.skip_reward())
        elif cmd_type == "set_biome":
            return self._result(self.engine.set_biome(str(cmd.get("biome", ""))))
        elif cmd_type == "reset":
            return self._result(self.engine.reset(cmd.get("biome")))
        elif cmd_type == "alerts":
            return {"ok": True, "alerts": self.engine.alerts()}
        elif cmd_type == "report":
            return {"ok": True, "report": self.engine.edu_report()}
        elif cmd_type == "save":
            return self._cmd_save()
        elif cmd_type == "load":
            return self._cmd_load(str(cmd.get("session_id", "")))
        elif cmd_type == "list":
            return {"ok": True, "sessions": [
                {**s, "updated_at": s["updated_at"].isoformat()} for s in self.store.list_all()
            ]}
        elif cmd_type == "quit":
            return {"ok": True, "action": "quit"}
        else:
            return {"ok": False, "error": f"Unknown command: {cmd_type}"}

    def _indexed(self, cmd: dict, key: str, command) -> dict:
        value = cmd.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return {"ok": False, "error": f"'{key}' must be an integer"}
        return self._result(command(value))

    def _result(self, result: CommandResult) -> dict:
        return {
            "ok": result.accepted,
            "command": result.command,
            "reason": result.reason,
            "state_version": result.state_version,
            "phase": self.engine.phase.value,
            "log": result.summary,
        }

    def _cmd_save(self) -> dict:
        self.session.snapshot = self.engine.snapshot()
        self.store.save(self.session)
        return {"ok": True, "session_id": self.session.id}

    def _cmd_load(self, session_id: str) -> dict:
        if not session_id:
            return {"ok": False, "error": "session_id required"}
        record = self.store.load(session_id)
        if record is None:
            return {"ok": False, "error": f"Session not found: {session_id}"}
        self.session = record
        self.engine = GameEngine.from_snapshot(
            record.snapshot,
            catalog=self.catalog,
            config=self.config,
            rng=self.engine.rng,
            bus=self.bus,
            session_id=record.id,
        )
        return {"ok": True, "session_id": record.id, "phase": self.engine.phase.value}

    def run(self, input: TextIO = sys.stdin):
        """
        Main loop: read JSON commands, write responses.

        One JSON object per line. Exit on EOF or quit command.
        """
        self._emit_response("ready", version=__version__, session_id=self.session.id)

        for line in input:
            line = line.strip()
            if not line:
                continue

            try:
                cmd = json.loads(line)
            except json.JSONDecodeError as e:
                self._emit_response("error", error=f"Invalid JSON: {e}")
                continue
            if not isinstance(cmd, dict):
                self._emit_response("error", error="Command must be a JSON object")
                continue

            result = self.handle_command(cmd)
            self._emit_response("result", **result)

            if result.get("action") == "quit":
                break


def run_headless(
    seed: int | None = None,
    biome: str | None = None,
    sessions_dir: Path | None = None,
    config_path: Path | None = None,
):
    """Entry point for headless mode."""
    runner = HeadlessRunner(
        sessions_dir=sessions_dir,
        config=load_config(config_path),
        seed=seed,
        biome=biome,
    )
    runner.run()
