"""
Utility functions for the Word Chain League
"""

import logging

from .core.game.game_manager import GameResult
from .core.progression.engine import ExperienceStats, LevelUpEvent
from .level_system import LevelInfo

logger = logging.getLogger(__name__)


def escape_html(text: str) -> str:
    """Escape characters that break Telegram HTML parse mode"""
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def format_progress_bar(progress: float, width: int = 10) -> str:
    """Render a progress fraction as a text bar"""
    progress = min(1.0, max(0.0, progress))
    filled = int(progress * width)
    return "▰" * filled + "▱" * (width - filled)


def format_level_info(level_info: LevelInfo) -> str:
    """Format level, title and progress to the next level"""
    result = f"🏅 레벨 {level_info.current_level} · {level_info.title}\n"
    if level_info.is_max_level:
        result += f"✨ 최고 레벨 달성! ({level_info.current_exp} EXP)"
        return result

    result += (
        f"{format_progress_bar(level_info.progress_to_next_level)} "
        f"{level_info.progress_to_next_level:.0%}\n"
    )
    result += f"📈 {level_info.current_exp} / {level_info.exp_for_next_level} EXP"
    return result


def format_user_stats(user: dict, stats: ExperienceStats) -> str:
    """Format the /stats reply for a user record"""
    total_games = user.get("total_games", 0)
    wins = user.get("wins", 0)
    win_rate = wins / total_games if total_games else 0.0

    result = f"📊 <b>{escape_html(user.get('nickname', ''))}</b>님의 기록\n\n"
    result += f"🏅 레벨: <b>{stats.current_level}</b> ({stats.level_title})\n"
    result += f"⭐ 경험치: <b>{stats.current_experience}</b> EXP\n"
    if stats.is_max_level:
        result += "✨ 최고 레벨에 도달했습니다!\n"
    else:
        result += (
            f"{format_progress_bar(stats.level_progress)} {stats.level_progress:.0%}"
            f" (다음 레벨까지 {stats.experience_to_next_level} EXP)\n"
        )
    result += f"\n🎮 게임 수: {total_games}\n"
    result += f"🏆 승리: {wins} ({win_rate:.0%})\n"
    result += f"📝 입력한 단어: {user.get('total_words', 0)}\n"
    result += f"🔥 연승: {user.get('current_streak', 0)} (최고 {user.get('longest_streak', 0)})"
    return result


def format_duration(seconds: float) -> str:
    """Format duration in human-readable format"""
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}초"
    minutes = seconds // 60
    return f"{minutes}분 {seconds % 60}초"


def format_game_result(result: GameResult, player_id: str) -> str:
    """Format a finished game from one player's point of view"""
    session = result.session
    if result.winner is None:
        headline = "🤝 무승부"
    elif result.winner == player_id:
        headline = "🏆 승리!"
    else:
        headline = "😢 패배"

    text = f"🏁 {result.message}\n{headline}\n\n"
    text += f"📝 단어 수: {len(session.words)}\n"
    text += f"⏱ 경기 시간: {format_duration(session.duration)}\n"

    if session.words:
        chain = " → ".join(word.text for word in session.words[-10:])
        text += f"🔗 {chain}\n"

    award = result.awards.get(player_id)
    if award is not None:
        text += f"\n⭐ +{award.breakdown.total} EXP ({award.breakdown.description})"
        if not award.persisted:
            text += "\n⚠️ 기록 저장에 실패했습니다."
    return text


def format_level_up(event: LevelUpEvent) -> str:
    """Format a level-up announcement"""
    text = f"{event.level_up_message}\n{event.title_message}"
    for reward in event.rewards:
        text += f"\n🎁 {reward}"
    return text
