from .tag import Tag, TagCreate
from .card import Card, CardCreate, CardLean, LanguagePair
from .review import ReviewCreate, ReviewEvent
from .user import AuthResponse, LoginRequest, SignupRequest

__all__ = [
    'Tag', 'TagCreate',
    'Card', 'CardCreate', 'CardLean', 'LanguagePair',
    'ReviewCreate', 'ReviewEvent',
    'AuthResponse', 'LoginRequest', 'SignupRequest',
]
