"""
Database models for the Word Chain League
"""

from datetime import datetime
from typing import TypedDict


class User(TypedDict):
    """User model"""
    id: str
    nickname: str
    level: int
    experience: int
    total_games: int
    wins: int
    total_words: int
    current_streak: int
    longest_streak: int
    created_at: datetime
    updated_at: datetime
