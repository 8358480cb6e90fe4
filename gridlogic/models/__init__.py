from gridlogic.models.game_session_model import GameSession
