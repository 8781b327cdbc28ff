"""
Match storage — SQLAlchemy persistence for matches, games, points and lets.

Deleting a match cascades to its games, and deleting a game cascades to
its points and lets.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.engine import Engine

from squash.config import get_logger, settings
from squash.engine.match import Match
from squash.models.records import GameRecord, LetRecord, MatchRecord, PointRecord

logger = get_logger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS matches (
        id VARCHAR(36) PRIMARY KEY,
        player1_name TEXT NOT NULL,
        player2_name TEXT NOT NULL,
        starting_server VARCHAR(16) NOT NULL,
        best_of INTEGER NOT NULL,
        saved_at VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS games (
        id VARCHAR(36) PRIMARY KEY,
        match_id VARCHAR(36) NOT NULL REFERENCES matches(id) ON DELETE CASCADE,
        game_number INTEGER NOT NULL,
        player1_name TEXT NOT NULL,
        player2_name TEXT NOT NULL,
        player1_score INTEGER NOT NULL,
        player2_score INTEGER NOT NULL,
        starting_server VARCHAR(16) NOT NULL,
        current_server VARCHAR(16) NOT NULL,
        winner VARCHAR(16)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS points (
        id VARCHAR(36) PRIMARY KEY,
        game_id VARCHAR(36) NOT NULL REFERENCES games(id) ON DELETE CASCADE,
        point_id VARCHAR(36) NOT NULL,
        point_number INTEGER NOT NULL,
        scorer VARCHAR(16) NOT NULL,
        zone VARCHAR(32) NOT NULL,
        shot_type VARCHAR(16) NOT NULL,
        server VARCHAR(16) NOT NULL,
        player1_score INTEGER NOT NULL,
        player2_score INTEGER NOT NULL,
        timestamp VARCHAR(40) NOT NULL,
        duration FLOAT NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lets (
        id VARCHAR(36) PRIMARY KEY,
        game_id VARCHAR(36) NOT NULL REFERENCES games(id) ON DELETE CASCADE,
        let_id VARCHAR(36) NOT NULL,
        let_number INTEGER NOT NULL,
        requested_by VARCHAR(16) NOT NULL,
        server VARCHAR(16) NOT NULL,
        player1_score INTEGER NOT NULL,
        player2_score INTEGER NOT NULL,
        timestamp VARCHAR(40) NOT NULL
    )
    """,
]


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(database_url: Optional[str] = None, **kwargs) -> Engine:
    """Create an engine; SQLite connections get foreign keys switched on."""
    url = database_url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        # Request handlers may run on a different thread than the one that connected
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = sa.create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        sa.event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class MatchRepository:
    """Saves and restores matches. Stored matches are immutable snapshots."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()
        self.init_db()

    def init_db(self) -> None:
        with self.engine.begin() as conn:
            for statement in SCHEMA:
                conn.execute(sa.text(statement))

    # ── Write ────────────────────────────────────────────────────────────────

    def save(self, match: Match) -> str:
        """Store a snapshot of ``match`` and return its id."""
        record = MatchRecord.from_match(match)
        with self.engine.begin() as conn:
            conn.execute(sa.text("""
                INSERT INTO matches (id, player1_name, player2_name, starting_server, best_of, saved_at)
                VALUES (:id, :player1_name, :player2_name, :starting_server, :best_of, :saved_at)
            """), {
                "id": record.id,
                "player1_name": record.player1_name,
                "player2_name": record.player2_name,
                "starting_server": record.starting_server,
                "best_of": record.best_of,
                "saved_at": record.saved_at.isoformat(),
            })
            for game in record.games:
                self._insert_game(conn, record.id, game)
        logger.info(
            "Saved match %s (%s vs %s, %s)",
            record.id, record.player1_name, record.player2_name, record.score_line,
        )
        return record.id

    def _insert_game(self, conn, match_id: str, game: GameRecord) -> None:
        game_id = str(uuid.uuid4())
        conn.execute(sa.text("""
            INSERT INTO games (
                id, match_id, game_number, player1_name, player2_name,
                player1_score, player2_score, starting_server, current_server, winner
            )
            VALUES (
                :id, :match_id, :game_number, :player1_name, :player2_name,
                :player1_score, :player2_score, :starting_server, :current_server, :winner
            )
        """), {"id": game_id, "match_id": match_id, **game.model_dump(exclude={"points", "lets"})})
        if game.points:
            conn.execute(sa.text("""
                INSERT INTO points (
                    id, game_id, point_id, point_number, scorer, zone, shot_type, server,
                    player1_score, player2_score, timestamp, duration
                )
                VALUES (
                    :id, :game_id, :point_id, :point_number, :scorer, :zone, :shot_type, :server,
                    :player1_score, :player2_score, :timestamp, :duration
                )
            """), [
                {
                    **p.model_dump(),
                    "id": str(uuid.uuid4()),
                    "point_id": p.id,
                    "game_id": game_id,
                    "timestamp": p.timestamp.isoformat(),
                }
                for p in game.points
            ])
        if game.lets:
            conn.execute(sa.text("""
                INSERT INTO lets (
                    id, game_id, let_id, let_number, requested_by, server,
                    player1_score, player2_score, timestamp
                )
                VALUES (
                    :id, :game_id, :let_id, :let_number, :requested_by, :server,
                    :player1_score, :player2_score, :timestamp
                )
            """), [
                {
                    **l.model_dump(),
                    "id": str(uuid.uuid4()),
                    "let_id": l.id,
                    "game_id": game_id,
                    "timestamp": l.timestamp.isoformat(),
                }
                for l in game.lets
            ])

    def delete(self, match_id: str) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(
                sa.text("DELETE FROM matches WHERE id = :id"), {"id": match_id}
            )
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted match %s", match_id)
        return deleted

    # ── Read ─────────────────────────────────────────────────────────────────

    def load(self, match_id: str) -> Optional[Match]:
        record = self.load_record(match_id)
        return record.to_match() if record else None

    def load_record(self, match_id: str) -> Optional[MatchRecord]:
        with self.engine.connect() as conn:
            row = conn.execute(
                sa.text("SELECT * FROM matches WHERE id = :id"), {"id": match_id}
            ).mappings().first()
            if row is None:
                return None
            return self._build_record(conn, row)

    def list_matches(self) -> list[MatchRecord]:
        """All stored matches, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                sa.text("SELECT * FROM matches ORDER BY saved_at DESC")
            ).mappings().all()
            return [self._build_record(conn, row) for row in rows]

    def _build_record(self, conn, row) -> MatchRecord:
        games = []
        game_rows = conn.execute(
            sa.text("SELECT * FROM games WHERE match_id = :id ORDER BY game_number"),
            {"id": row["id"]},
        ).mappings().all()
        for game_row in game_rows:
            point_rows = conn.execute(
                sa.text("SELECT * FROM points WHERE game_id = :id ORDER BY point_number"),
                {"id": game_row["id"]},
            ).mappings().all()
            let_rows = conn.execute(
                sa.text("SELECT * FROM lets WHERE game_id = :id ORDER BY let_number"),
                {"id": game_row["id"]},
            ).mappings().all()
            games.append(GameRecord(
                game_number=game_row["game_number"],
                player1_name=game_row["player1_name"],
                player2_name=game_row["player2_name"],
                player1_score=game_row["player1_score"],
                player2_score=game_row["player2_score"],
                starting_server=game_row["starting_server"],
                current_server=game_row["current_server"],
                winner=game_row["winner"],
                points=[
                    PointRecord(
                        id=p["point_id"],
                        point_number=p["point_number"],
                        scorer=p["scorer"],
                        zone=p["zone"],
                        shot_type=p["shot_type"],
                        server=p["server"],
                        player1_score=p["player1_score"],
                        player2_score=p["player2_score"],
                        timestamp=datetime.fromisoformat(p["timestamp"]),
                        duration=p["duration"],
                    )
                    for p in point_rows
                ],
                lets=[
                    LetRecord(
                        id=l["let_id"],
                        let_number=l["let_number"],
                        requested_by=l["requested_by"],
                        server=l["server"],
                        player1_score=l["player1_score"],
                        player2_score=l["player2_score"],
                        timestamp=datetime.fromisoformat(l["timestamp"]),
                    )
                    for l in let_rows
                ],
            ))
        return MatchRecord(
            id=row["id"],
            player1_name=row["player1_name"],
            player2_name=row["player2_name"],
            starting_server=row["starting_server"],
            best_of=row["best_of"],
            saved_at=datetime.fromisoformat(row["saved_at"]),
            games=games,
        )
