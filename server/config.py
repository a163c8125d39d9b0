"""
Centralized configuration for the UNO room server.

Configuration is loaded from (in order of precedence):
1. Environment variables
2. .env file (if exists)
3. Default values

Usage:
    from config import config
    print(config.PORT)
    print(config.game.hand_size)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if it exists
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    val = os.environ.get(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    if val in ("false", "0", "no", "off"):
        return False
    return default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_float(key: str, default: float = 0.0) -> float:
    """Get float environment variable."""
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


@dataclass
class GameSettings:
    """Table rules that are fixed for every room."""
    hand_size: int = 7
    min_players_to_start: int = 2
    auto_start_delay: float = 2.5  # seconds after a join before dealing
    default_wild_color: str = "red"


@dataclass
class ServerConfig:
    """Server configuration."""
    HOST: str = "0.0.0.0"
    PORT: int = 3003
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # Room settings
    MAX_PLAYERS_PER_ROOM: int = 4
    ROOM_CODE_LENGTH: int = 6

    # Chat relay
    CHAT_HISTORY_LIMIT: int = 100
    MAX_CHAT_LENGTH: int = 500

    game: GameSettings = field(default_factory=GameSettings)

    def validate(self) -> list[str]:
        """Return a list of problems with the loaded settings (empty if fine)."""
        problems = []
        if not 2 <= self.MAX_PLAYERS_PER_ROOM <= 10:
            problems.append(f"MAX_PLAYERS_PER_ROOM must be 2-10, got {self.MAX_PLAYERS_PER_ROOM}")
        if not 2 <= self.game.min_players_to_start <= self.MAX_PLAYERS_PER_ROOM:
            problems.append("MIN_PLAYERS_TO_START must be between 2 and MAX_PLAYERS_PER_ROOM")
        # A full table still has to leave a non-wild card to turn up
        if self.game.hand_size < 1 or self.game.hand_size * self.MAX_PLAYERS_PER_ROOM > 100:
            problems.append(f"HAND_SIZE {self.game.hand_size} cannot be dealt to {self.MAX_PLAYERS_PER_ROOM} players")
        if self.game.default_wild_color not in ("red", "blue", "green", "yellow"):
            problems.append(f"DEFAULT_WILD_COLOR must be a card color, got {self.game.default_wild_color!r}")
        if self.game.auto_start_delay < 0:
            problems.append("AUTO_START_DELAY cannot be negative")
        if self.ROOM_CODE_LENGTH < 4:
            problems.append("ROOM_CODE_LENGTH must be at least 4")
        return problems

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        return cls(
            HOST=get_env("HOST", "0.0.0.0"),
            PORT=get_env_int("PORT", 3003),
            DEBUG=get_env_bool("DEBUG", False),
            LOG_LEVEL=get_env("LOG_LEVEL", "INFO"),
            ENVIRONMENT=get_env("ENVIRONMENT", "development"),
            MAX_PLAYERS_PER_ROOM=get_env_int("MAX_PLAYERS_PER_ROOM", 4),
            ROOM_CODE_LENGTH=get_env_int("ROOM_CODE_LENGTH", 6),
            CHAT_HISTORY_LIMIT=get_env_int("CHAT_HISTORY_LIMIT", 100),
            MAX_CHAT_LENGTH=get_env_int("MAX_CHAT_LENGTH", 500),
            game=GameSettings(
                hand_size=get_env_int("HAND_SIZE", 7),
                min_players_to_start=get_env_int("MIN_PLAYERS_TO_START", 2),
                auto_start_delay=get_env_float("AUTO_START_DELAY", 2.5),
                default_wild_color=get_env("DEFAULT_WILD_COLOR", "red"),
            ),
        )


# Global config instance - loaded once at module import
config = ServerConfig.from_env()

