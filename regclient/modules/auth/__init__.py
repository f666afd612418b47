from .challenge import AuthChallenge, parse_challenge
from .auth import Token, fetch_token
