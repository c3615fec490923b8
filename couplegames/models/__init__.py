"""Database models for the game rental application."""

from .user import User
from .verification_token import VerificationToken
from .center import Center
from .game import Game, GameInstance
from .rental import Rental

__all__ = ['User', 'VerificationToken', 'Center', 'Game', 'GameInstance', 'Rental']
