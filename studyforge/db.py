import json
import os
import sqlite3
from typing import Any, Dict, List, Optional

from studyforge.models.quiz import QuizAttemptRecord


class StudyStore:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._init_db()

    # -------------------------
    # Connection
    # -------------------------
    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.db_path)
        con.row_factory = sqlite3.Row
        return con

    def _ensure_columns(self, con: sqlite3.Connection, table: str, cols: dict) -> None:
        cur = con.execute(f"PRAGMA table_info({table})")
        existing = {row[1] for row in cur.fetchall()}
        for col, ddl in cols.items():
            if col not in existing:
                con.execute(f"ALTER TABLE {table} ADD COLUMN {col} {ddl}")

    def _init_db(self) -> None:
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)

        with self._connect() as con:
            # -------------------------
            # Quiz attempts (one row per graded quiz)
            # -------------------------
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS quiz_attempts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_key TEXT NOT NULL,

                    title TEXT NOT NULL,
                    questions_json TEXT NOT NULL,
                    answers_json TEXT NOT NULL,

                    score INTEGER NOT NULL,
                    total_questions INTEGER NOT NULL,

                    source_type TEXT NOT NULL CHECK(source_type IN ('topic','file')),
                    source_file_name TEXT,

                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )

            # migrations (safe on existing DBs)
            self._ensure_columns(
                con,
                "quiz_attempts",
                {
                    "source_file_name": "TEXT",
                    "created_at": "DATETIME DEFAULT CURRENT_TIMESTAMP",
                },
            )

            con.execute("CREATE INDEX IF NOT EXISTS idx_attempts_owner_time ON quiz_attempts(owner_key, created_at)")
            con.commit()

    # -------------------------
    # Rows
    # -------------------------
    @staticmethod
    def _row_to_record(r: sqlite3.Row) -> QuizAttemptRecord:
        return QuizAttemptRecord(
            id=int(r["id"]),
            owner_key=r["owner_key"],
            title=r["title"],
            questions=json.loads(r["questions_json"] or "[]"),
            answers=json.loads(r["answers_json"] or "[]"),
            score=int(r["score"]),
            total_questions=int(r["total_questions"]),
            source_type=r["source_type"],
            source_file_name=r["source_file_name"],
            created_at=r["created_at"],
        )

    # -------------------------
    # Quiz attempts
    # -------------------------
    def add_quiz_attempt(self, record: QuizAttemptRecord) -> int:
        if not record.owner_key:
            raise ValueError("owner_key is required to save a quiz attempt")

        with self._connect() as con:
            cur = con.execute(
                """
                INSERT INTO quiz_attempts(
                owner_key, title, questions_json, answers_json,
                score, total_questions, source_type, source_file_name
                )
                VALUES (?,?,?,?,?,?,?,?)
                """,
                (
                    str(record.owner_key),
                    str(record.title or "Quiz"),
                    json.dumps(record.questions, ensure_ascii=False),
                    json.dumps(record.answers),
                    int(record.score),
                    int(record.total_questions),
                    str(record.source_type or "topic"),
                    (record.source_file_name or None),
                ),
            )
            con.commit()
            return int(cur.lastrowid)

    def list_quiz_attempts(self, owner_key: str, *, limit: int = 50) -> List[QuizAttemptRecord]:
        with self._connect() as con:
            rows = con.execute(
                """
                SELECT *
                FROM quiz_attempts
                WHERE owner_key = ?
                ORDER BY datetime(created_at) DESC, id DESC
                LIMIT ?
                """,
                (str(owner_key), int(limit)),
            ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def get_quiz_attempt(self, owner_key: str, attempt_id: int) -> Optional[QuizAttemptRecord]:
        with self._connect() as con:
            row = con.execute(
                "SELECT * FROM quiz_attempts WHERE id = ? AND owner_key = ?",
                (int(attempt_id), str(owner_key)),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def delete_quiz_attempt(self, owner_key: str, attempt_id: int) -> bool:
        with self._connect() as con:
            cur = con.execute(
                "DELETE FROM quiz_attempts WHERE id = ? AND owner_key = ?",
                (int(attempt_id), str(owner_key)),
            )
            con.commit()
            return cur.rowcount > 0

    def owner_summary(self, owner_key: str) -> Dict[str, Any]:
        with self._connect() as con:
            r = con.execute(
                """
                SELECT COUNT(*) AS quizzes,
                       COALESCE(SUM(score), 0) AS correct,
                       COALESCE(SUM(total_questions), 0) AS answered
                FROM quiz_attempts
                WHERE owner_key = ?
                """,
                (str(owner_key),),
            ).fetchone()

        answered = int(r["answered"] or 0)
        correct = int(r["correct"] or 0)
        return {
            "quizzes": int(r["quizzes"] or 0),
            "correct": correct,
            "answered": answered,
            "accuracy": round(100.0 * correct / answered, 1) if answered else 0.0,
        }
