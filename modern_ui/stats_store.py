import json
import logging
from pathlib import Path

from engine.Topics import normalizeDifficulty
from modern_ui.ui_config import DIFFICULTY_ORDER

logger = logging.getLogger(__name__)

STATS_PATH = Path(__file__).with_name("stats.json")


def _empty_bucket():
    return {
        "games_started": 0,
        "games_won": 0,
        "games_lost": 0,
        "total_duration_sec": 0.0,
        "total_actions": 0,
        "current_streak": 0,
        "best_streak": 0,
    }


def _default_stats():
    return {
        "overall": _empty_bucket(),
        "by_difficulty": {k: _empty_bucket() for k in DIFFICULTY_ORDER},
    }


def _as_int(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return int(default)


def _as_float(value, default=0.0):
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


def _merge_bucket(dst: dict, src: dict):
    if not isinstance(src, dict):
        return
    for key in ("games_started", "games_won", "games_lost", "total_actions", "current_streak", "best_streak"):
        dst[key] = max(0, _as_int(src.get(key), dst[key]))
    dst["total_duration_sec"] = max(0.0, _as_float(src.get("total_duration_sec"), dst["total_duration_sec"]))


def _sanitize(data):
    out = _default_stats()
    if not isinstance(data, dict):
        return out

    _merge_bucket(out["overall"], data.get("overall"))
    by_difficulty = data.get("by_difficulty")
    if isinstance(by_difficulty, dict):
        for key in DIFFICULTY_ORDER:
            _merge_bucket(out["by_difficulty"][key], by_difficulty.get(key))
    return out


def load_stats():
    if not STATS_PATH.exists():
        return _default_stats()
    try:
        return _sanitize(json.loads(STATS_PATH.read_text(encoding="utf-8")))
    except (OSError, ValueError) as e:
        logger.warning("ignoring unreadable stats file %s: %s", STATS_PATH, e)
        return _default_stats()


def save_stats(stats):
    STATS_PATH.parent.mkdir(parents=True, exist_ok=True)
    STATS_PATH.write_text(json.dumps(_sanitize(stats), ensure_ascii=False, indent=2), encoding="utf-8")


def record_game_started(stats, difficulty):
    stats = _sanitize(stats)
    key = normalizeDifficulty(difficulty)
    stats["overall"]["games_started"] += 1
    stats["by_difficulty"][key]["games_started"] += 1
    return stats


def record_game_won(stats, difficulty, duration_sec, actions):
    stats = _sanitize(stats)
    key = normalizeDifficulty(difficulty)

    for bucket in (stats["overall"], stats["by_difficulty"][key]):
        bucket["games_won"] += 1
        bucket["total_duration_sec"] += max(0.0, float(duration_sec))
        bucket["total_actions"] += max(0, int(actions))
        bucket["current_streak"] += 1
        bucket["best_streak"] = max(bucket["best_streak"], bucket["current_streak"])
    return stats


def record_game_lost(stats, difficulty):
    stats = _sanitize(stats)
    key = normalizeDifficulty(difficulty)
    for bucket in (stats["overall"], stats["by_difficulty"][key]):
        bucket["games_lost"] += 1
        bucket["current_streak"] = 0
    return stats
