# =============================================================================
# UTILS
# =============================================================================

import logging


class TestText:
    """Small text helpers."""

    def test_limit(self):
        from studyforge.utils.text import limit

        assert limit("  short ", 10) == "short"
        assert limit("abcdefghij", 5) == "abcd…"

    def test_clean_topic(self):
        from studyforge.utils.text import clean_topic

        assert clean_topic("  @everyone   cell   biology ") == "everyone cell biology"
        assert clean_topic("   ") == "general"

    def test_jaccard(self):
        from studyforge.utils.text import jaccard_sim

        assert jaccard_sim("cell membrane transport", "transport of the cell membrane") == 1.0
        assert jaccard_sim("", "anything") == 0.0


class TestLogging:
    """Console + rotating file handlers."""

    def test_setup_logging_writes_file(self, tmp_path):
        from studyforge.utils.logger_setup import setup_logging

        root = logging.getLogger()
        saved = list(root.handlers), root.level
        try:
            setup_logging(log_dir=str(tmp_path), log_file="t.log")
            logging.getLogger("StudyForge").info("hello from test")
            for h in root.handlers:
                h.flush()

            assert "hello from test" in (tmp_path / "t.log").read_text(encoding="utf-8")
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            for h in list(root.handlers):
                root.removeHandler(h)
                h.close()
            for h in saved[0]:
                root.addHandler(h)
            root.setLevel(saved[1])
