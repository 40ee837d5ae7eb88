# studyforge/utils/text.py
import re
from typing import Set


def limit(s: str, n: int) -> str:
    s = (s or "").strip()
    if len(s) <= n:
        return s
    return s[: max(0, n - 1)].rstrip() + "…"


def one_line(text: str) -> str:
    return " ".join((text or "").split())


def clean_topic(topic: str, max_len: int = 80) -> str:
    t = one_line(topic).replace("@everyone", "everyone").replace("@here", "here")
    return limit(t, max_len) or "general"


# -----------------------------
# Fuzzy dedupe helpers (Jaccard)
# -----------------------------
_STOP = {
    "the","a","an","and","or","to","of","in","on","for","with","by","at","from",
    "is","are","was","were","be","been","being","this","that","these","those",
    "what","which","who","when","where","why","how"
}

def _norm(s: str) -> str:
    s = (s or "").lower()
    s = re.sub(r"[^a-z0-9\s]", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s

def _tokens(s: str) -> Set[str]:
    return {t for t in _norm(s).split() if len(t) >= 3 and t not in _STOP}

def jaccard_sim(a: str, b: str) -> float:
    A, B = _tokens(a), _tokens(b)
    if not A or not B:
        return 0.0
    return len(A & B) / len(A | B)
