from .question import Question
from .choice_question import ChoiceQuestion
from .team import Team
from .path_entry import PathEntry
from .game_settings import GameSettings
from .announcement import Announcement
from .log_entry import LogEntry

__all__ = [
	"Question",
	"ChoiceQuestion",
	"Team",
	"PathEntry",
	"GameSettings",
	"Announcement",
	"LogEntry",
]
